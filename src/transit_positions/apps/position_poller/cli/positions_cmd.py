"""CLI command for printing live vehicle positions.

Query TransitView once and print a short summary per vehicle, either for
a single route or for every route.  Nothing is written to the database.
"""

import asyncio
from typing import Annotated

import typer

from transit_positions.apps.position_poller.cli._helpers import configure_logging, feed_settings
from transit_positions.clients.transitview.client import TransitViewClient
from transit_positions.clients.transitview.exceptions import TransitViewError
from transit_positions.core.models import RouteSnapshot, format_position


async def _fetch(base_url: str, timeout: float, route: str) -> RouteSnapshot:
    async with TransitViewClient(base_url=base_url, timeout=timeout) as client:
        if route:
            return {route: tuple(await client.get_route_positions(route))}
        return await client.get_all_positions()


def positions(
    route: Annotated[str, typer.Option(help="Route label (omit for every route)")] = "",
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Print the current position of every vehicle on a route."""
    configure_logging(verbose=verbose)
    base_url, timeout = feed_settings()

    try:
        snapshot = asyncio.run(_fetch(base_url, timeout, route))
    except TransitViewError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if not any(snapshot.values()):
        typer.echo("No vehicles reported")
        return

    for label in sorted(snapshot):
        typer.echo(f"Route {label}")
        for position in snapshot[label]:
            typer.echo(format_position(position))
            typer.echo("")
