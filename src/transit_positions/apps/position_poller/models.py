"""SQLAlchemy ORM models for the vehicle position database.

Define the ``vehicles`` table once per backend.  Both variants share the
same logical columns; the PostGIS variant adds a ``geom`` point derived
from longitude/latitude, and the SQLite variant adds a uniqueness rule on
``(route, trip, vehicle_id, block_id)`` used to drop repeat observations.
Each variant lives on its own declarative base so creating one schema
never touches the other.
"""

from datetime import datetime
from typing import Any

from geoalchemy2 import Geometry
from sqlalchemy import DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

VEHICLES_TABLE = "vehicles"
UNIQUE_KEY_COLUMNS = ("route", "trip", "vehicle_id", "block_id")
WGS84_SRID = 4326


class PostGISBase(DeclarativeBase):
    """Declarative base for the PostGIS schema."""


class SQLiteBase(DeclarativeBase):
    """Declarative base for the SQLite schema."""


class VehicleColumns:
    """Columns shared by every ``vehicles`` table variant.

    Attributes:
        id: Auto-incrementing surrogate key.
        route: Route label the vehicle was reported under.
        read_time: Capture time shared by every row of one snapshot (indexed).
        label: Display name of the vehicle's run.
        vehicle_id: Fleet number.
        block_id: Scheduled block.
        trip: Scheduled trip.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        direction: Direction of travel.
        destination: Destination sign text.
        offset_min: Schedule deviation minutes.
        offset_sec: Schedule deviation seconds.
        heading: Heading in degrees.
        late_min: Minutes late, negative when early.

    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    route: Mapped[str] = mapped_column(String)
    read_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    label: Mapped[str] = mapped_column(String)
    vehicle_id: Mapped[str] = mapped_column(String)
    block_id: Mapped[str] = mapped_column(String)
    trip: Mapped[str] = mapped_column(String)
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    direction: Mapped[str] = mapped_column(String)
    destination: Mapped[str] = mapped_column(String)
    offset_min: Mapped[int] = mapped_column(Integer)
    offset_sec: Mapped[int] = mapped_column(Integer)
    heading: Mapped[int] = mapped_column(Integer)
    late_min: Mapped[int] = mapped_column(Integer)


class SpatialVehicle(VehicleColumns, PostGISBase):
    """Append-only vehicle row with a PostGIS point, no uniqueness rule."""

    __tablename__ = VEHICLES_TABLE

    geom: Mapped[Any] = mapped_column(
        Geometry(geometry_type="POINT", srid=WGS84_SRID), nullable=True
    )


class UniqueVehicle(VehicleColumns, SQLiteBase):
    """Vehicle row deduplicated on ``(route, trip, vehicle_id, block_id)``."""

    __tablename__ = VEHICLES_TABLE

    __table_args__ = (
        UniqueConstraint(*UNIQUE_KEY_COLUMNS, name="uq_vehicles_route_trip_vehicle_block"),
    )
