"""Rendering of buffered text for edit-mode delivery."""

from typing import Optional


def render_text(text: str, status: Optional[str] = None) -> str:
    """
    Prefix text with an italic status line.

    A status that is empty after trimming is ignored:
        render_text("Content", "Thinking...") -> "_Thinking..._\\nContent"
        render_text("Content", "") -> "Content"
    """
    status = (status or "").strip()
    if not status:
        return text
    return f"_{status}_\n{text}"
