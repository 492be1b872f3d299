"""Structural protocols for the pluggable feed and store collaborators.

Define the ``PositionFeed`` and ``PositionStore`` interfaces that
decouple the poller from concrete implementations. Any class whose shape
matches these protocols can be injected without explicit inheritance
(structural subtyping), which is how tests substitute fakes.
"""

from datetime import datetime
from typing import ClassVar, Protocol, runtime_checkable

from transit_positions.core.models import RouteSnapshot, VehiclePosition


@runtime_checkable
class PositionFeed(Protocol):
    """Async source of live vehicle positions."""

    async def get_all_positions(self) -> RouteSnapshot:
        """Return the current snapshot across every route."""
        ...

    async def get_route_positions(self, route: str) -> list[VehiclePosition]:
        """Return the current positions for a single route."""
        ...

    async def close(self) -> None:
        """Release any network resources."""
        ...


@runtime_checkable
class PositionStore(Protocol):
    """Async persistent store for position snapshots.

    Every ``insert_snapshot`` call is one all-or-nothing transaction in
    which every row shares the same ``read_time``.

    Duplicate handling is a fixed property of each backend, advertised
    by ``enforces_unique_key``. When it is ``True`` the backend holds a
    uniqueness rule on ``(route, trip, vehicle_id, block_id)`` and
    silently drops rows that conflict with it, including rows from
    earlier snapshots with a different ``read_time``. When it is
    ``False`` every row is appended unconditionally. Callers must not
    assume duplicate suppression.
    """

    enforces_unique_key: ClassVar[bool]

    async def init_db(self) -> None:
        """Create the schema if it does not already exist."""
        ...

    async def insert_snapshot(self, captured_at: datetime, snapshot: RouteSnapshot) -> int:
        """Persist every position of a snapshot in one transaction.

        Return the number of rows actually written.
        """
        ...

    async def count_rows(self) -> int:
        """Return the number of stored rows."""
        ...

    async def close(self) -> None:
        """Release the database connection."""
        ...
