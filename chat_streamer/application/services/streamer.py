"""
Streamer

Entry point of the library: owns one shared ChatTransport and mints
StreamSession instances with merged scheduler defaults.

Usage:
    streamer = Streamer(AiogramChatClient(bot))
    session = streamer.start_session("123456", mode=SessionMode.HYBRID)
    session.start_rotating_status()
    async for token in agent_output:
        session.append(token)
    await session.finalize()
"""

import dataclasses
import logging
from typing import Any, Mapping, Optional

from chat_streamer.application.services.flush_scheduler import SchedulerOptions
from chat_streamer.application.services.stream_session import SessionOptions, StreamSession
from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.value_objects.session_mode import SessionMode
from chat_streamer.infrastructure.messaging.chat_transport import ChatTransport, TransportOptions
from chat_streamer.shared import constants
from chat_streamer.shared.config.settings import StreamerSettings

logger = logging.getLogger(__name__)


class Streamer:
    """Factory of stream sessions sharing one transport."""

    def __init__(
        self,
        client: IChatClient,
        transport_options: Optional[TransportOptions] = None,
        scheduler_options: Optional[SchedulerOptions] = None,
        hybrid_switch_chars: int = constants.HYBRID_SWITCH_CHARS,
        hybrid_switch_on_429: bool = constants.HYBRID_SWITCH_ON_429,
    ):
        self._transport = ChatTransport(client, transport_options)
        self._scheduler_defaults = scheduler_options or SchedulerOptions()
        self._hybrid_switch_chars = hybrid_switch_chars
        self._hybrid_switch_on_429 = hybrid_switch_on_429

    @classmethod
    def from_settings(
        cls,
        client: IChatClient,
        settings: Optional[StreamerSettings] = None,
    ) -> "Streamer":
        """Build a streamer from environment-driven settings."""
        settings = settings or StreamerSettings.from_env()
        return cls(
            client,
            transport_options=TransportOptions(
                max_retries=settings.transport.max_retries,
                base_retry_delay=settings.transport.base_retry_delay,
                max_retry_delay=settings.transport.max_retry_delay,
            ),
            scheduler_options=SchedulerOptions(
                flush_interval=settings.scheduler.flush_interval,
                min_chars_delta=settings.scheduler.min_chars_delta,
                max_updates_per_minute=settings.scheduler.max_updates_per_minute,
            ),
            hybrid_switch_chars=settings.session.hybrid_switch_chars,
            hybrid_switch_on_429=settings.session.hybrid_switch_on_429,
        )

    @property
    def transport(self) -> ChatTransport:
        return self._transport

    @property
    def scheduler_defaults(self) -> SchedulerOptions:
        return self._scheduler_defaults

    def start_session(
        self,
        channel: str,
        *,
        thread_id: Optional[str] = None,
        mode: SessionMode = SessionMode.EDIT,
        hybrid_switch_chars: Optional[int] = None,
        hybrid_switch_on_429: Optional[bool] = None,
        scheduler: Optional[Mapping[str, Any]] = None,
    ) -> StreamSession:
        """
        Start a new session in a channel (must be called inside a running loop).

        Args:
            channel: Target channel / chat id
            thread_id: Existing thread to post into
            mode: Delivery mode
            hybrid_switch_chars: Text length that moves HYBRID to thread delivery
            hybrid_switch_on_429: Move HYBRID to thread delivery on rate limits
            scheduler: Overrides of SchedulerOptions fields for this session
        """
        options = SessionOptions(
            channel=channel,
            thread_id=thread_id,
            mode=SessionMode(mode),
            hybrid_switch_chars=(
                self._hybrid_switch_chars if hybrid_switch_chars is None else hybrid_switch_chars
            ),
            hybrid_switch_on_429=(
                self._hybrid_switch_on_429 if hybrid_switch_on_429 is None else hybrid_switch_on_429
            ),
            scheduler=dataclasses.replace(self._scheduler_defaults, **dict(scheduler or {})),
        )
        return StreamSession(self._transport, options)
