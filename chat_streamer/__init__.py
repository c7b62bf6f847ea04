"""
Chat Streamer - progressively publish streamed agent output to a chat.

Architecture:
- Domain: text buffer, diff/render helpers, error taxonomy, client interface
- Application: flush scheduler, stream sessions, streamer factory
- Infrastructure: retrying transport, Telegram (aiogram) backend
- Shared: configuration, logging, constants
"""

from chat_streamer.application.services.flush_scheduler import SchedulerOptions
from chat_streamer.application.services.rotating_status import DEFAULT_STATUS_MESSAGES, RotatingStatus
from chat_streamer.application.services.stream_session import SessionOptions, StreamSession
from chat_streamer.application.services.streamer import Streamer
from chat_streamer.domain.exceptions import ChatApiError, ErrorKind, classify_error
from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.value_objects.message_ref import MessageRef
from chat_streamer.domain.value_objects.session_mode import SessionMode
from chat_streamer.infrastructure.messaging.chat_transport import ChatTransport, TransportOptions

__all__ = [
    "ChatApiError",
    "ChatTransport",
    "DEFAULT_STATUS_MESSAGES",
    "ErrorKind",
    "IChatClient",
    "MessageRef",
    "RotatingStatus",
    "SchedulerOptions",
    "SessionMode",
    "SessionOptions",
    "StreamSession",
    "Streamer",
    "TransportOptions",
    "classify_error",
]
