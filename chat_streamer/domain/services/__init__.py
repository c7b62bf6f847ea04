"""Domain services"""

from chat_streamer.domain.services.chat_client import IChatClient
from chat_streamer.domain.services.rate_limit import min_interval
from chat_streamer.domain.services.rendering import render_text
from chat_streamer.domain.services.text_diff import diff_append

__all__ = [
    "IChatClient",
    "min_interval",
    "render_text",
    "diff_append",
]
