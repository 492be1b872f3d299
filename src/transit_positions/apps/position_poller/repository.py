"""Async position stores for persisting route snapshots.

Wrap a SQLAlchemy async engine for the position poller.  Every snapshot is
written as one transaction: either every row becomes visible or none does.
Two backends share that contract but differ in duplicate handling:

* ``PostGISPositionStore`` appends every row and adds a ``geom`` point.
* ``SQLitePositionStore`` drops rows whose ``(route, trip, vehicle_id,
  block_id)`` already exists, across snapshots as well as within one.

The backend is chosen from the connection string by
``create_position_store`` and never changes at runtime.
"""

import logging
from datetime import datetime
from typing import Any, ClassVar

from geoalchemy2 import WKTElement
from sqlalchemy import CursorResult, Insert, Table, func, insert, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from transit_positions.apps.position_poller.exceptions import SchemaError, TransactionError
from transit_positions.apps.position_poller.models import (
    UNIQUE_KEY_COLUMNS,
    VEHICLES_TABLE,
    WGS84_SRID,
    SpatialVehicle,
    UniqueVehicle,
)
from transit_positions.core.config import ConfigError
from transit_positions.core.models import RouteSnapshot, VehiclePosition
from transit_positions.core.protocols import PositionStore

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


def _row_values(route: str, read_time: datetime, position: VehiclePosition) -> dict[str, Any]:
    """Map one position to the shared ``vehicles`` column values."""
    return {
        "route": route,
        "read_time": read_time,
        "label": position.label,
        "vehicle_id": position.vehicle_id,
        "block_id": position.block_id,
        "trip": position.trip,
        "latitude": position.latitude,
        "longitude": position.longitude,
        "direction": position.direction,
        "destination": position.destination,
        "offset_min": position.offset_minutes,
        "offset_sec": position.offset_seconds,
        "heading": position.heading,
        "late_min": position.late_minutes,
    }


class _SQLPositionStore:
    """Engine ownership, transactions and error translation shared by both backends.

    Subclasses supply the table, any extra schema statements, the insert
    statement and per-row extras.

    Args:
        db_url: SQLAlchemy async connection string.

    """

    enforces_unique_key: ClassVar[bool] = False
    _table: ClassVar[Table]

    def __init__(self, db_url: str | URL) -> None:
        """Initialize the store with an async database engine.

        Args:
            db_url: SQLAlchemy async connection string.

        """
        self._engine: AsyncEngine = create_async_engine(db_url, echo=False)

    async def init_db(self) -> None:
        """Create the ``vehicles`` table and extensions if they do not already exist.

        Idempotent; safe to call on every startup.

        Raises:
            SchemaError: If any schema statement fails.

        """
        try:
            async with self._engine.begin() as conn:
                await self._create_schema(conn)
        except (SQLAlchemyError, OSError) as exc:
            raise SchemaError(f"Failed to initialise {VEHICLES_TABLE} schema: {exc}") from exc
        logger.info("Database tables initialised")

    async def _create_schema(self, conn: AsyncConnection) -> None:
        await conn.run_sync(self._table.metadata.create_all)

    def _insert_statement(self) -> Insert:
        return insert(self._table)

    def _extra_values(self, position: VehiclePosition) -> dict[str, Any]:  # noqa: ARG002
        return {}

    def _written_count(
        self,
        result: CursorResult[Any],  # noqa: ARG002
        rows: list[dict[str, Any]],
    ) -> int:
        return len(rows)

    async def insert_snapshot(self, captured_at: datetime, snapshot: RouteSnapshot) -> int:
        """Insert every position of a snapshot in a single transaction.

        All rows share ``captured_at`` truncated to whole seconds as their
        ``read_time``.

        Args:
            captured_at: Time the snapshot was fetched.
            snapshot: Route label to positions.

        Returns:
            Number of rows written, which may be fewer than the positions
            sent when the backend drops duplicates.

        Raises:
            TransactionError: If any row fails; the whole batch is rolled back.

        """
        read_time = captured_at.replace(microsecond=0)
        rows = [
            {**_row_values(route, read_time, position), **self._extra_values(position)}
            for route, positions in snapshot.items()
            for position in positions
        ]
        if not rows:
            logger.debug("Empty snapshot at %s, nothing to insert", read_time.isoformat())
            return 0

        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(self._insert_statement(), rows)
                written = self._written_count(result, rows)
        except (SQLAlchemyError, OSError) as exc:
            raise TransactionError(f"Snapshot insert failed: {exc}", row_count=len(rows)) from exc
        logger.debug(
            "Inserted %d of %d positions across %d routes at %s",
            written,
            len(rows),
            len(snapshot),
            read_time.isoformat(),
        )
        return written

    async def count_rows(self) -> int:
        """Return the total number of rows in the ``vehicles`` table.

        Returns:
            Integer count of stored observations.

        """
        stmt = select(func.count()).select_from(self._table)
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            return result.scalar_one()

    async def close(self) -> None:
        """Dispose the async engine and release all connections."""
        await self._engine.dispose()
        logger.info("Database engine disposed")


class PostGISPositionStore(_SQLPositionStore):
    """PostgreSQL/PostGIS store: append-only, with a ``geom`` point per row.

    No uniqueness rule is defined, so repeated observations of the same
    vehicle are all kept.
    """

    enforces_unique_key: ClassVar[bool] = False
    _table: ClassVar[Table] = SpatialVehicle.__table__  # type: ignore[assignment]

    async def _create_schema(self, conn: AsyncConnection) -> None:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        await super()._create_schema(conn)
        # Tables created before the geometry column existed
        await conn.execute(
            text(
                f"ALTER TABLE {VEHICLES_TABLE} "
                f"ADD COLUMN IF NOT EXISTS geom geometry(Point, {WGS84_SRID})"
            )
        )

    def _extra_values(self, position: VehiclePosition) -> dict[str, Any]:
        return {
            "geom": WKTElement(
                f"POINT({position.longitude} {position.latitude})", srid=WGS84_SRID
            )
        }


class SQLitePositionStore(_SQLPositionStore):
    """SQLite store: non-spatial, deduplicated on ``(route, trip, vehicle_id, block_id)``.

    Conflicting rows are skipped with ``ON CONFLICT DO NOTHING`` rather
    than failing the batch.  ``read_time`` is not part of the key, so a
    vehicle already stored from an earlier snapshot is not stored again.
    """

    enforces_unique_key: ClassVar[bool] = True
    _table: ClassVar[Table] = UniqueVehicle.__table__  # type: ignore[assignment]

    def _insert_statement(self) -> Insert:
        return sqlite_insert(self._table).on_conflict_do_nothing(
            index_elements=list(UNIQUE_KEY_COLUMNS)
        )

    def _written_count(self, result: CursorResult[Any], rows: list[dict[str, Any]]) -> int:
        # Conflicting rows are not counted by the driver
        return result.rowcount if result.rowcount >= 0 else len(rows)


def create_position_store(db_url: str) -> PositionStore:
    """Build the store matching a connection string's backend.

    Plain ``postgresql://`` and ``sqlite://`` URLs are upgraded to their
    async drivers (``asyncpg`` and ``aiosqlite``).

    Args:
        db_url: SQLAlchemy connection string.

    Returns:
        A ``PostGISPositionStore`` or ``SQLitePositionStore``.

    Raises:
        ConfigError: If the URL cannot be parsed or names an unsupported backend.

    """
    try:
        url = make_url(db_url)
    except ArgumentError as exc:
        raise ConfigError(f"Invalid database URL: {db_url!r}") from exc

    backend = url.get_backend_name()
    if backend not in _ASYNC_DRIVERS:
        msg = f"Unsupported database backend {backend!r}; use postgresql or sqlite"
        raise ConfigError(msg)
    if url.drivername == backend:
        url = url.set(drivername=_ASYNC_DRIVERS[backend])

    store_cls = PostGISPositionStore if backend == "postgresql" else SQLitePositionStore
    try:
        return store_cls(url)
    except SQLAlchemyError as exc:
        raise ConfigError(f"Cannot create engine for {url.drivername}: {exc}") from exc
