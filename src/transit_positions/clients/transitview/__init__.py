"""SEPTA TransitView API client."""

from transit_positions.clients.transitview.client import TransitViewClient
from transit_positions.clients.transitview.exceptions import (
    TransitViewDecodeError,
    TransitViewError,
    TransitViewHTTPError,
    TransitViewTransportError,
)

__all__ = [
    "TransitViewClient",
    "TransitViewDecodeError",
    "TransitViewError",
    "TransitViewHTTPError",
    "TransitViewTransportError",
]
