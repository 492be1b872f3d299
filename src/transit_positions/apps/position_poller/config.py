"""Configuration dataclass for the position poller service.

Hold the tuneable parameters for one polling session: where to write,
how often to poll, and how to reach the TransitView feed.  Validated and
immutable after construction so a bad value fails at startup rather than
inside the loop.
"""

from dataclasses import dataclass

from transit_positions.core.config import ConfigError

DEFAULT_INTERVAL_SECONDS = 60
_DEFAULT_FEED_TIMEOUT = 30.0
_DEFAULT_FEED_BASE_URL = "https://www3.septa.org/hackathon"


@dataclass(frozen=True)
class PollerConfig:
    """Immutable configuration for a position poller session.

    Attributes:
        db_url: SQLAlchemy connection string; the scheme selects the
            backend (``postgresql+asyncpg://`` or ``sqlite+aiosqlite://``).
        interval_seconds: Seconds to wait after each cycle before the next.
        feed_base_url: Base URL of the TransitView API.
        feed_timeout: HTTP request timeout in seconds.

    Raises:
        ConfigError: If ``db_url`` is empty or any duration is not positive.

    """

    db_url: str
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    feed_base_url: str = _DEFAULT_FEED_BASE_URL
    feed_timeout: float = _DEFAULT_FEED_TIMEOUT

    def __post_init__(self) -> None:
        """Reject configurations the poller cannot run with."""
        if not self.db_url:
            raise ConfigError("A database URL is required")
        if self.interval_seconds <= 0:
            msg = f"Polling interval must be positive, got {self.interval_seconds}"
            raise ConfigError(msg)
        if self.feed_timeout <= 0:
            msg = f"Feed timeout must be positive, got {self.feed_timeout}"
            raise ConfigError(msg)
