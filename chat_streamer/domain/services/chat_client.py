from abc import ABC, abstractmethod
from typing import Optional

from chat_streamer.domain.value_objects.message_ref import MessageRef


class IChatClient(ABC):
    """Interface for the chat backend (Telegram, Slack, etc.)

    Implementations raise ChatApiError (or any exception carrying
    status_code / error / retry_after attributes) on failure.
    """

    @abstractmethod
    async def create_message(
        self,
        channel: str,
        text: str,
        thread_id: Optional[str] = None
    ) -> MessageRef:
        """Post a new message, as a thread reply when thread_id is given"""
        pass

    @abstractmethod
    async def edit_message(self, channel: str, message_id: str, text: str) -> MessageRef:
        """Replace the text of an existing message"""
        pass
