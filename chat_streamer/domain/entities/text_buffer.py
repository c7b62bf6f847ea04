"""
TextBuffer Entity

Accumulated streaming text plus an optional status line.
Owned by exactly one StreamSession.
"""

from typing import Optional

from chat_streamer.domain.services.rendering import render_text


class TextBuffer:
    """Holds streamed text and an independent status line."""

    def __init__(self):
        self._text = ""
        self._status: Optional[str] = None

    def append(self, chunk: Optional[str]) -> None:
        if not chunk:
            return
        self._text += chunk

    def set(self, value: Optional[str]) -> None:
        """Replace the whole text (None counts as empty)."""
        self._text = value or ""

    def set_status(self, status: Optional[str]) -> None:
        self._status = status

    def clear_status(self) -> None:
        self._status = None

    @property
    def text(self) -> str:
        return self._text

    @property
    def status(self) -> Optional[str]:
        return self._status

    @property
    def size(self) -> int:
        """Length of the text; the status line does not count."""
        return len(self._text)

    def render(self) -> str:
        return render_text(self._text, self._status)
