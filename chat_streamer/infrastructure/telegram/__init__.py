"""Telegram backend (aiogram)"""

from chat_streamer.infrastructure.telegram.aiogram_client import AiogramChatClient, translate_telegram_error

__all__ = ["AiogramChatClient", "translate_telegram_error"]
