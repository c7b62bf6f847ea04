"""
Rotating status line shown while an agent is working.

Cycles a callback through playful status messages
("Thinking...", "Reticulating splines...", ...).
"""

import asyncio
import logging
import random
from typing import Callable, List, Optional, Sequence

from chat_streamer.shared import constants

logger = logging.getLogger(__name__)

DEFAULT_STATUS_MESSAGES = [
    "Thinking...",
    "Pondering...",
    "Contemplating reality...",
    "Reticulating splines...",
    "Consulting the oracle...",
    "Gathering thoughts...",
    "Processing...",
    "Computing possibilities...",
    "Analyzing...",
    "Synthesizing response...",
]


class RotatingStatus:
    """
    Periodically emits the next status message.

    The first message is emitted immediately on start(), then one more
    per interval, wrapping around at the end of the list.

    Args:
        on_status_change: Called with each status message
        messages: Messages to cycle through (default catalog if None)
        interval: Seconds between changes
        shuffle: Shuffle the messages once at construction
        rng: Random source used for shuffling (seed it for reproducibility)
    """

    def __init__(
        self,
        on_status_change: Callable[[str], None],
        messages: Optional[Sequence[str]] = None,
        interval: float = constants.ROTATING_STATUS_INTERVAL_SECONDS,
        shuffle: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self._messages: List[str] = list(messages if messages is not None else DEFAULT_STATUS_MESSAGES)
        if not self._messages:
            raise ValueError("RotatingStatus needs at least one message")
        if shuffle:
            (rng or random.Random()).shuffle(self._messages)

        self._on_status_change = on_status_change
        self.interval = interval
        self._index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._task is not None:
            return
        self._on_status_change(self._messages[self._index])
        self._task = asyncio.get_running_loop().create_task(self._rotate())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _rotate(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._index = (self._index + 1) % len(self._messages)
            self._on_status_change(self._messages[self._index])
