"""Domain entities"""

from chat_streamer.domain.entities.text_buffer import TextBuffer

__all__ = ["TextBuffer"]
