"""
Telegram backend for the chat streamer.

Implements IChatClient on top of an aiogram Bot and translates aiogram
exceptions into ChatApiError so the transport can classify them.
Thread replies are regular replies to the thread root message.
"""

import logging
from typing import Optional, Union

from aiogram import Bot
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramNetworkError,
    TelegramRetryAfter,
    TelegramServerError,
    TelegramUnauthorizedError,
)
from aiogram.types import Message, ReplyParameters

from chat_streamer.domain.exceptions import ChatApiError
from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.value_objects.message_ref import MessageRef

logger = logging.getLogger(__name__)

# TelegramBadRequest descriptions -> backend error codes
_BAD_REQUEST_CODES = (
    ("chat not found", "channel_not_found"),
    ("message is too long", "msg_too_long"),
    ("message text is empty", "invalid_arguments"),
)


def _chat_id(channel: str) -> Union[int, str]:
    """Numeric channels are chat ids, anything else (@username) passes through."""
    try:
        return int(channel)
    except ValueError:
        return channel


def translate_telegram_error(e: TelegramAPIError) -> ChatApiError:
    """Map an aiogram exception onto the streamer error taxonomy."""
    message = str(e)
    if isinstance(e, TelegramRetryAfter):
        return ChatApiError(message, error="ratelimited", status_code=429, retry_after=e.retry_after)
    if isinstance(e, TelegramServerError):
        return ChatApiError(message, status_code=500)
    if isinstance(e, TelegramNetworkError):
        return ChatApiError(message, code="ECONNRESET")
    if isinstance(e, TelegramUnauthorizedError):
        return ChatApiError(message, error="invalid_auth", status_code=401)
    if isinstance(e, TelegramForbiddenError):
        return ChatApiError(message, error="not_in_channel", status_code=403)
    if isinstance(e, TelegramBadRequest):
        lowered = message.lower()
        for needle, code in _BAD_REQUEST_CODES:
            if needle in lowered:
                return ChatApiError(message, error=code, status_code=400)
        return ChatApiError(message, error="invalid_arguments", status_code=400)
    return ChatApiError(message)


class AiogramChatClient(IChatClient):
    """Telegram chat client backed by aiogram.

    Args:
        bot: aiogram Bot instance
        parse_mode: Telegram parse mode; None sends plain text
    """

    def __init__(self, bot: Bot, parse_mode: Optional[str] = None):
        self.bot = bot
        self.parse_mode = parse_mode

    async def create_message(
        self,
        channel: str,
        text: str,
        thread_id: Optional[str] = None
    ) -> MessageRef:
        reply_parameters = None
        if thread_id:
            reply_parameters = ReplyParameters(
                message_id=int(thread_id),
                allow_sending_without_reply=True,
            )
        try:
            message: Message = await self.bot.send_message(
                _chat_id(channel),
                text,
                parse_mode=self.parse_mode,
                reply_parameters=reply_parameters,
            )
        except TelegramAPIError as e:
            raise translate_telegram_error(e) from e

        return MessageRef(id=str(message.message_id), channel=str(message.chat.id))

    async def edit_message(self, channel: str, message_id: str, text: str) -> MessageRef:
        try:
            await self.bot.edit_message_text(
                text,
                chat_id=_chat_id(channel),
                message_id=int(message_id),
                parse_mode=self.parse_mode,
            )
        except TelegramBadRequest as e:
            if "message is not modified" in str(e).lower():
                # Content is already there
                logger.debug(f"Message {message_id}: not modified, treating as success")
                return MessageRef(id=message_id, channel=channel)
            raise translate_telegram_error(e) from e
        except TelegramAPIError as e:
            raise translate_telegram_error(e) from e

        return MessageRef(id=message_id, channel=channel)
