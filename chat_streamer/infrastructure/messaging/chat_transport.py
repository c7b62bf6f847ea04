"""
Chat Transport

Executes create/edit calls against the chat backend with retries:
- Rate limits wait for the server-declared retry-after (or the base delay)
- Transient failures (5xx, network) back off exponentially with jitter
- Fatal and unclassified errors propagate immediately

The transport keeps no per-call state and may be shared by sessions.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from chat_streamer.domain.exceptions import ErrorKind, classify_error, get_retry_after
from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.value_objects.message_ref import MessageRef
from chat_streamer.shared import constants

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class TransportOptions:
    """Retry policy of the transport."""
    max_retries: int = constants.MAX_RETRIES
    base_retry_delay: float = constants.BASE_RETRY_DELAY_SECONDS
    max_retry_delay: float = constants.MAX_RETRY_DELAY_SECONDS
    # Called with the server retry-after in seconds (0 if absent)
    on_rate_limit: Optional[Callable[[float], None]] = None


class ChatTransport:
    """Sends messages through an IChatClient with retry and backoff."""

    def __init__(self, client: IChatClient, options: Optional[TransportOptions] = None):
        options = options or TransportOptions()
        self.client = client
        self.max_retries = options.max_retries
        self.base_retry_delay = options.base_retry_delay
        self.max_retry_delay = options.max_retry_delay
        self._on_rate_limit = options.on_rate_limit

    async def post_message(
        self,
        channel: str,
        text: str,
        thread_id: Optional[str] = None
    ) -> MessageRef:
        """Create a message (a thread reply when thread_id is set)."""
        return await self._call_with_retries(
            "create_message",
            lambda: self.client.create_message(channel, text, thread_id=thread_id),
        )

    async def update_message(self, channel: str, message_id: str, text: str) -> MessageRef:
        """Edit an existing message in place."""
        return await self._call_with_retries(
            "edit_message",
            lambda: self.client.edit_message(channel, message_id, text),
        )

    async def _call_with_retries(self, op: str, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await call()
            except Exception as e:
                kind = classify_error(e)

                if kind is ErrorKind.RATE_LIMITED:
                    if attempt >= self.max_retries:
                        logger.warning(f"{op}: rate limited, giving up after {attempt} retries")
                        raise
                    retry_after = get_retry_after(e)
                    self._notify_rate_limit(retry_after)
                    delay = retry_after or self.base_retry_delay
                    logger.info(f"{op}: rate limited, waiting {delay:.2f}s (attempt {attempt + 1})")
                    await self._sleep(delay)
                    attempt += 1
                    continue

                if kind is not ErrorKind.TRANSIENT:
                    # FATAL and UNCLASSIFIED are never retried
                    logger.error(f"{op}: {kind.value} error, not retrying: {e!r}")
                    raise

                if attempt >= self.max_retries:
                    logger.warning(f"{op}: transient error, giving up after {attempt} retries: {e!r}")
                    raise

                delay = self._backoff_delay(attempt)
                logger.info(f"{op}: transient error, retrying in {delay:.2f}s (attempt {attempt + 1}): {e!r}")
                await self._sleep(delay)
                attempt += 1

    def _backoff_delay(self, attempt: int) -> float:
        backoff = min(self.max_retry_delay, self.base_retry_delay * (2 ** attempt))
        jitter = random.random() * constants.RETRY_JITTER_RATIO * backoff
        return backoff + jitter

    def _notify_rate_limit(self, retry_after: float) -> None:
        if self._on_rate_limit is None:
            return
        try:
            self._on_rate_limit(retry_after)
        except Exception as e:
            logger.warning(f"on_rate_limit callback failed: {e}")

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
