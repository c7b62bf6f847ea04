"""
Stream Session

Progressively publishes one growing text to a chat channel.

Delivery modes:
- EDIT: one message edited in place (status line + text)
- THREAD: a root message followed by thread replies with the new text only
- HYBRID: EDIT until the text gets long or edits are rate limited,
  then THREAD for the rest of the session

Flushes are serialized: at most one remote mutation per session is in
flight, and flushes run in the order they were requested. Flush errors
are remembered and raised by finalize().
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional, Sequence

from chat_streamer.application.services.flush_scheduler import FlushScheduler, SchedulerOptions
from chat_streamer.application.services.rotating_status import RotatingStatus
from chat_streamer.domain.entities.text_buffer import TextBuffer
from chat_streamer.domain.exceptions import is_rate_limit_error
from chat_streamer.domain.services.text_diff import diff_append
from chat_streamer.domain.value_objects.session_mode import SessionMode
from chat_streamer.infrastructure.messaging.chat_transport import ChatTransport
from chat_streamer.shared import constants

logger = logging.getLogger(__name__)


@dataclass
class SessionOptions:
    """Per-session delivery settings."""
    channel: str
    thread_id: Optional[str] = None
    mode: SessionMode = SessionMode.EDIT
    hybrid_switch_chars: int = constants.HYBRID_SWITCH_CHARS
    hybrid_switch_on_429: bool = constants.HYBRID_SWITCH_ON_429
    scheduler: SchedulerOptions = field(default_factory=SchedulerOptions)


class StreamSession:
    """
    One progressively revealed message (or thread) in a channel.

    Must be created inside a running event loop: the flush scheduler
    starts ticking right away.
    """

    def __init__(self, transport: ChatTransport, options: SessionOptions):
        self.session_id = uuid.uuid4().hex[:8]
        self._transport = transport
        self._channel = options.channel
        self._mode = SessionMode(options.mode)
        self._hybrid_switch_chars = options.hybrid_switch_chars
        self._hybrid_switch_on_429 = options.hybrid_switch_on_429

        self._thread_id: Optional[str] = options.thread_id
        self._message_id: Optional[str] = None
        self._last_sent_text = ""  # rendered form last delivered
        self._last_sent_body = ""  # plain text last delivered
        self._thread_mode_active = False
        self._closed = False
        self._last_error: Optional[BaseException] = None

        self._buffer = TextBuffer()
        self._flush_lock = asyncio.Lock()
        self._rotating_status: Optional[RotatingStatus] = None
        self._scheduler = FlushScheduler(
            options.scheduler,
            get_size=lambda: self._buffer.size,
            flush=self._enqueue_flush,
            on_error=self._remember_error,
        )
        self._scheduler.start()

        logger.info(
            f"Session {self.session_id}: started in {self._mode.value} mode "
            f"(channel={self._channel}, thread={self._thread_id})"
        )

    # === Properties ===

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def message_id(self) -> Optional[str]:
        return self._message_id

    @property
    def thread_id(self) -> Optional[str]:
        return self._thread_id

    @property
    def thread_mode_active(self) -> bool:
        return self._thread_mode_active

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def text(self) -> str:
        return self._buffer.text

    # === Mutations ===

    def append(self, chunk: Optional[str]) -> None:
        if self._closed:
            return
        self._buffer.append(chunk)
        self._scheduler.request_flush()

    def set_status(self, status: str) -> None:
        """Set the status line; it is flushed regardless of the size threshold."""
        if self._closed:
            return
        self._buffer.set_status(status)
        self._scheduler.request_flush(force=True)

    def clear_status(self) -> None:
        if self._closed:
            return
        self.stop_rotating_status()
        self._buffer.clear_status()
        self._scheduler.request_flush(force=True)

    def start_rotating_status(
        self,
        messages: Optional[Sequence[str]] = None,
        interval: float = constants.ROTATING_STATUS_INTERVAL_SECONDS,
        shuffle: bool = False,
    ) -> None:
        """Cycle the status line through messages until stopped or cleared."""
        if self._closed:
            return
        self.stop_rotating_status()
        self._rotating_status = RotatingStatus(
            self.set_status,
            messages=messages,
            interval=interval,
            shuffle=shuffle,
        )
        self._rotating_status.start()

    def stop_rotating_status(self) -> None:
        if self._rotating_status is not None:
            self._rotating_status.stop()
            self._rotating_status = None

    # === Lifecycle ===

    async def finalize(self) -> None:
        """
        Flush everything without a status line and close the session.

        Raises:
            Exception: The last flush error seen during the session
        """
        if self._closed:
            return
        self.stop_rotating_status()
        self._buffer.clear_status()
        self._scheduler.stop()
        try:
            await self._enqueue_flush(True)
        except Exception as e:
            self._remember_error(e)
        finally:
            self._closed = True

        logger.info(
            f"Session {self.session_id}: finalized ({self._buffer.size}ch, "
            f"message={self._message_id}, thread_mode={self._thread_mode_active})"
        )
        if self._last_error is not None:
            raise self._last_error

    def cancel(self) -> None:
        """Close the session without a final flush. Buffered text is dropped."""
        if self._closed:
            return
        self.stop_rotating_status()
        self._scheduler.stop()
        self._closed = True
        logger.info(f"Session {self.session_id}: cancelled")

    async def error(self, message: str) -> None:
        """Show an error as the status line and close the session."""
        if self._closed:
            return
        self.stop_rotating_status()
        self._scheduler.stop()
        self._buffer.set_status(message)
        logger.warning(f"Session {self.session_id}: closing with error status: {message}")
        try:
            await self._enqueue_flush(True)
        finally:
            self._closed = True

    # === Flush protocol ===

    def _remember_error(self, e: BaseException) -> None:
        logger.warning(f"Session {self.session_id}: flush failed: {e!r}")
        self._last_error = e

    async def _enqueue_flush(self, force: bool) -> None:
        # asyncio.Lock wakes waiters in FIFO order
        async with self._flush_lock:
            await self._flush(force)

    async def _flush(self, force: bool) -> None:
        if self._closed:
            return
        text = self._buffer.text
        if not force and not text:
            return

        if self._mode is SessionMode.HYBRID and not self._thread_mode_active:
            if len(text) >= self._hybrid_switch_chars:
                logger.info(
                    f"Session {self.session_id}: {len(text)}ch >= "
                    f"{self._hybrid_switch_chars}ch, switching to thread mode"
                )
                self._switch_to_thread_mode()

        if self._thread_mode_active or self._mode is SessionMode.THREAD:
            await self._flush_thread(force)
            return

        try:
            await self._flush_edit(force)
        except Exception as e:
            if (
                self._mode is SessionMode.HYBRID
                and self._hybrid_switch_on_429
                and is_rate_limit_error(e)
            ):
                logger.info(f"Session {self.session_id}: edit rate limited, switching to thread mode")
                self._switch_to_thread_mode()
                await self._flush_thread(True)
                return
            raise

    def _switch_to_thread_mode(self) -> None:
        self._thread_mode_active = True
        if not self._thread_id and self._message_id:
            self._thread_id = self._message_id

    async def _flush_edit(self, force: bool) -> None:
        text = self._buffer.text
        rendered = self._buffer.render()
        if rendered == self._last_sent_text and not force:
            return
        if not rendered:
            # Chat backends reject empty messages
            return

        if self._message_id is None:
            ref = await self._transport.post_message(self._channel, rendered, thread_id=self._thread_id)
            if self._closed:
                return
            self._message_id = ref.id
            if not self._thread_id:
                self._thread_id = ref.id
            logger.debug(f"Session {self.session_id}: created message {ref.id} ({len(rendered)}ch)")
        else:
            await self._transport.update_message(self._channel, self._message_id, rendered)
            if self._closed:
                return
            logger.debug(f"Session {self.session_id}: edited message {self._message_id} ({len(rendered)}ch)")

        self._last_sent_text = rendered
        self._last_sent_body = text

    async def _flush_thread(self, force: bool) -> None:
        text = self._buffer.text
        if text == self._last_sent_body and not force:
            return

        if not self._thread_id:
            if not text:
                return
            ref = await self._transport.post_message(self._channel, text)
            if self._closed:
                return
            self._thread_id = ref.id
            if self._message_id is None:
                self._message_id = ref.id
            self._last_sent_text = text
            self._last_sent_body = text
            logger.debug(f"Session {self.session_id}: created thread root {ref.id} ({len(text)}ch)")
            return

        diff = diff_append(self._last_sent_body, text)
        if not diff:
            return

        await self._transport.post_message(self._channel, diff, thread_id=self._thread_id)
        if self._closed:
            return
        self._last_sent_text = text
        self._last_sent_body = text
        logger.debug(f"Session {self.session_id}: posted {len(diff)}ch to thread {self._thread_id}")
