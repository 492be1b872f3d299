"""CLI subpackage for the vehicle position poller.

Create the Typer application and register all command modules.
"""

import typer

from transit_positions.apps.position_poller.cli.poll_cmd import poll
from transit_positions.apps.position_poller.cli.positions_cmd import positions

app = typer.Typer(help="SEPTA TransitView vehicle position tools")

app.command()(poll)
app.command()(positions)

__all__ = ["app"]
