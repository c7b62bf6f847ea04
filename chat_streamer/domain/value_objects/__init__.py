"""Domain value objects"""

from chat_streamer.domain.value_objects.message_ref import MessageRef
from chat_streamer.domain.value_objects.session_mode import SessionMode

__all__ = [
    "MessageRef",
    "SessionMode",
]
