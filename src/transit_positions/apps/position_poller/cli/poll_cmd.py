"""CLI command for running the vehicle position poller service.

Fetch every route's live positions from TransitView on a fixed interval
and persist each snapshot to PostgreSQL/PostGIS or SQLite.  Missing or
invalid configuration and schema initialisation failures exit with
status 1; failures inside a cycle are only logged.
"""

import asyncio
import logging
from typing import Annotated

import typer

from transit_positions.apps.position_poller.cli._helpers import configure_logging, feed_settings
from transit_positions.apps.position_poller.config import DEFAULT_INTERVAL_SECONDS, PollerConfig
from transit_positions.apps.position_poller.exceptions import SchemaError
from transit_positions.apps.position_poller.poller import PositionPoller
from transit_positions.apps.position_poller.repository import create_position_store
from transit_positions.clients.transitview.client import TransitViewClient
from transit_positions.core.config import ConfigError, get_config

logger = logging.getLogger(__name__)


def poll(
    db_url: Annotated[
        str,
        typer.Option(help="SQLAlchemy DB URL (postgresql+asyncpg://... or sqlite+aiosqlite://...)"),
    ] = "",
    interval: Annotated[
        int | None, typer.Option(help="Polling interval in seconds (must be positive)")
    ] = None,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Poll TransitView forever and record every snapshot.

    ``--db-url`` and ``--interval`` fall back to ``poller.db_url`` and
    ``poller.interval_seconds`` in settings.yaml (``VEHICLEPOS_DB_URL``
    can set the former).
    """
    configure_logging(verbose=verbose)

    settings = get_config()
    resolved_url = db_url or str(settings.get("poller.db_url", "") or "")
    resolved_interval = (
        interval
        if interval is not None
        else int(settings.get("poller.interval_seconds", DEFAULT_INTERVAL_SECONDS))
    )
    base_url, timeout = feed_settings()

    try:
        config = PollerConfig(
            db_url=resolved_url,
            interval_seconds=resolved_interval,
            feed_base_url=base_url,
            feed_timeout=timeout,
        )
        store = create_position_store(config.db_url)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Starting position poller (interval: {config.interval_seconds}s)")

    feed = TransitViewClient(base_url=config.feed_base_url, timeout=config.feed_timeout)
    poller = PositionPoller(feed, store, config.interval_seconds)
    try:
        asyncio.run(poller.run())
    except SchemaError as exc:
        logger.critical("Cannot start without a schema: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
