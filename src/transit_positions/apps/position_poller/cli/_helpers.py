"""Shared helpers for the position poller CLI commands."""

import logging

from transit_positions.clients.transitview.client import TransitViewClient
from transit_positions.core.config import get_config


def configure_logging(*, verbose: bool) -> None:
    """Configure root logging for a CLI invocation.

    Args:
        verbose: Log at DEBUG instead of INFO.

    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def feed_settings() -> tuple[str, float]:
    """Return the configured TransitView base URL and request timeout."""
    config = get_config()
    base_url = str(config.get("transitview.base_url", TransitViewClient.BASE_URL))
    timeout = float(config.get("transitview.timeout", 30.0))
    return base_url, timeout
