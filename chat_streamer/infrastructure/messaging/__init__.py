"""Chat backend transport"""

from chat_streamer.infrastructure.messaging.chat_transport import ChatTransport, TransportOptions

__all__ = ["ChatTransport", "TransportOptions"]
