"""Session mode value object.

Defines how a stream session delivers text to the chat backend.
"""

from enum import Enum


class SessionMode(str, Enum):
    """Delivery mode of a stream session.

    EDIT   — one message, edited in place as text grows.
    THREAD — a root message, new text posted as thread replies.
    HYBRID — starts as EDIT, switches to THREAD for good on size or rate limit.
    """

    EDIT = "edit"
    THREAD = "thread"
    HYBRID = "hybrid"
