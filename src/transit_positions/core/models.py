"""Core data models shared across the transit positions application.

Define the immutable ``VehiclePosition`` value object and the
``RouteSnapshot`` mapping that flow from the TransitView feed client,
through the poller, into the position store.
"""

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class VehiclePosition:
    """One observation of one vehicle at feed-fetch time.

    Instances carry no identity across fetches: the same vehicle seen in
    two cycles produces two independent observations.

    Args:
        label: Display name of the vehicle's current run.
        vehicle_id: Fleet number of the vehicle.
        block_id: Scheduled block the vehicle is operating.
        trip: Scheduled trip identifier.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        direction: Compass or free-text direction of travel.
        destination: Free-text destination sign.
        offset_minutes: Schedule deviation, whole minutes (signed).
        offset_seconds: Schedule deviation, seconds component (signed).
        heading: Heading in degrees.
        late_minutes: Minutes behind schedule, negative when early.

    """

    label: str
    vehicle_id: str
    block_id: str
    trip: str
    latitude: float
    longitude: float
    direction: str = ""
    destination: str = ""
    offset_minutes: int = 0
    offset_seconds: int = 0
    heading: int = 0
    late_minutes: int = 0


# Route label -> vehicles observed on that route at one fetch instant
RouteSnapshot = Mapping[str, tuple[VehiclePosition, ...]]


def count_positions(snapshot: RouteSnapshot) -> int:
    """Return the total number of positions across every route in a snapshot."""
    return sum(len(positions) for positions in snapshot.values())


def format_position(position: VehiclePosition) -> str:
    """Render a position as a short multi-line human-readable summary.

    Args:
        position: The vehicle position to describe.

    Returns:
        Four lines covering the run, schedule offset, lateness and
        location of the vehicle.

    """
    return "\n".join(
        (
            f"{position.label} (#{position.vehicle_id}): "
            f"{position.direction} towards {position.destination}",
            f"offset: {position.offset_minutes:02d}:{position.offset_seconds:02d}",
            f"late: {position.late_minutes}",
            f"position: {position.latitude:.5f} lat, {position.longitude:.5f} lon, "
            f"{position.heading} deg",
        )
    )
