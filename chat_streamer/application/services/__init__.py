"""Application services"""

from chat_streamer.application.services.flush_scheduler import FlushScheduler, SchedulerOptions
from chat_streamer.application.services.rotating_status import DEFAULT_STATUS_MESSAGES, RotatingStatus
from chat_streamer.application.services.stream_session import SessionOptions, StreamSession
from chat_streamer.application.services.streamer import Streamer

__all__ = [
    "FlushScheduler",
    "SchedulerOptions",
    "DEFAULT_STATUS_MESSAGES",
    "RotatingStatus",
    "SessionOptions",
    "StreamSession",
    "Streamer",
]
