from dataclasses import dataclass, field
import os
from dotenv import load_dotenv

from chat_streamer.shared import constants

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() == "true"


@dataclass
class SchedulerConfig:
    """Flush scheduler configuration"""
    flush_interval: float = constants.FLUSH_INTERVAL_SECONDS
    min_chars_delta: int = constants.MIN_CHARS_DELTA
    max_updates_per_minute: int = constants.MAX_UPDATES_PER_MINUTE

    @classmethod
    def from_env(cls) -> "SchedulerConfig":
        return cls(
            flush_interval=float(os.getenv("CHAT_STREAM_FLUSH_INTERVAL", str(constants.FLUSH_INTERVAL_SECONDS))),
            min_chars_delta=int(os.getenv("CHAT_STREAM_MIN_CHARS_DELTA", str(constants.MIN_CHARS_DELTA))),
            max_updates_per_minute=int(
                os.getenv("CHAT_STREAM_MAX_UPDATES_PER_MINUTE", str(constants.MAX_UPDATES_PER_MINUTE))
            ),
        )


@dataclass
class TransportConfig:
    """Chat transport retry configuration"""
    max_retries: int = constants.MAX_RETRIES
    base_retry_delay: float = constants.BASE_RETRY_DELAY_SECONDS
    max_retry_delay: float = constants.MAX_RETRY_DELAY_SECONDS

    @classmethod
    def from_env(cls) -> "TransportConfig":
        return cls(
            max_retries=int(os.getenv("CHAT_STREAM_MAX_RETRIES", str(constants.MAX_RETRIES))),
            base_retry_delay=float(
                os.getenv("CHAT_STREAM_BASE_RETRY_DELAY", str(constants.BASE_RETRY_DELAY_SECONDS))
            ),
            max_retry_delay=float(
                os.getenv("CHAT_STREAM_MAX_RETRY_DELAY", str(constants.MAX_RETRY_DELAY_SECONDS))
            ),
        )


@dataclass
class SessionConfig:
    """Session delivery configuration"""
    hybrid_switch_chars: int = constants.HYBRID_SWITCH_CHARS
    hybrid_switch_on_429: bool = constants.HYBRID_SWITCH_ON_429

    @classmethod
    def from_env(cls) -> "SessionConfig":
        return cls(
            hybrid_switch_chars=int(
                os.getenv("CHAT_STREAM_HYBRID_SWITCH_CHARS", str(constants.HYBRID_SWITCH_CHARS))
            ),
            hybrid_switch_on_429=_env_bool("CHAT_STREAM_HYBRID_SWITCH_ON_429", constants.HYBRID_SWITCH_ON_429),
        )


@dataclass
class StreamerSettings:
    """Streamer settings"""
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    transport: TransportConfig = field(default_factory=TransportConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "StreamerSettings":
        return cls(
            scheduler=SchedulerConfig.from_env(),
            transport=TransportConfig.from_env(),
            session=SessionConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
