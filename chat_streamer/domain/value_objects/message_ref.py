"""Reference to a message stored by the chat backend."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageRef:
    """Identifier of a created or edited message"""
    id: str
    channel: str
