"""Test doubles for the chat backend."""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from chat_streamer.domain.exceptions import ChatApiError
from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.value_objects.message_ref import MessageRef


@dataclass
class CreateCall:
    channel: str
    text: str
    thread_id: Optional[str] = None


@dataclass
class EditCall:
    channel: str
    message_id: str
    text: str


class FakeChatClient(IChatClient):
    """Records every call; message ids are "1", "2", ... in create order."""

    def __init__(self):
        self.create_calls: List[CreateCall] = []
        self.edit_calls: List[EditCall] = []
        self.create_handler: Optional[Callable[[CreateCall], Awaitable[MessageRef]]] = None
        self.edit_handler: Optional[Callable[[EditCall], Awaitable[MessageRef]]] = None

    async def create_message(self, channel, text, thread_id=None):
        call = CreateCall(channel=channel, text=text, thread_id=thread_id)
        self.create_calls.append(call)
        if self.create_handler is not None:
            return await self.create_handler(call)
        return MessageRef(id=str(len(self.create_calls)), channel=channel)

    async def edit_message(self, channel, message_id, text):
        call = EditCall(channel=channel, message_id=message_id, text=text)
        self.edit_calls.append(call)
        if self.edit_handler is not None:
            return await self.edit_handler(call)
        return MessageRef(id=message_id, channel=channel)


def rate_limit_error(retry_after: float = 1) -> ChatApiError:
    return ChatApiError(
        "rate limited",
        error="ratelimited",
        status_code=429,
        headers={"retry-after": str(retry_after)},
    )
