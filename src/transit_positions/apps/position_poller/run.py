"""CLI entry point for the vehicle position poller app.

All command logic lives in the cli subpackage.
"""

from transit_positions.apps.position_poller.cli import app

__all__ = ["app", "main"]


def main() -> None:
    """Run the position poller CLI application."""
    app()


if __name__ == "__main__":
    main()
