r"""Normalize raw TransitView payloads into typed positions.

Note:
    The feed encodes ``lat``, ``lng``, ``offset`` and ``Offset_sec`` as
    quoted strings (e.g. ``"lat": "39.95258"``) while ``heading`` and
    ``late`` arrive as JSON numbers.  The all-routes endpoint also wraps
    its route map in a one-element array.  Both oddities stop here.

"""

import logging
import math
import re
from typing import Any, cast

from transit_positions.clients.transitview.exceptions import TransitViewDecodeError
from transit_positions.core.models import RouteSnapshot, VehiclePosition

logger = logging.getLogger(__name__)

# JSON number grammar, ASCII digits only
_FLOAT_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_INT_RE = re.compile(r"-?[0-9]+")


def _require_float(raw: dict[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None:
        raise TransitViewDecodeError(f"Missing required field {key!r}")
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        raise TransitViewDecodeError(f"Field {key!r} is not numeric: {value!r}")
    if isinstance(value, str) and not _FLOAT_RE.fullmatch(value):
        raise TransitViewDecodeError(f"Field {key!r} is not numeric: {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise TransitViewDecodeError(f"Field {key!r} is not finite: {value!r}")
    return result


def _int_field(raw: dict[str, Any], key: str) -> int:
    """Coerce an integer field that may arrive as a number or a quoted string.

    Missing or null values decode to zero.  Fractional values are rejected.
    """
    value = raw.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise TransitViewDecodeError(f"Field {key!r} is not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INT_RE.fullmatch(value):
        return int(value)
    raise TransitViewDecodeError(f"Field {key!r} is not an integer: {value!r}")


def _str_field(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TransitViewDecodeError(f"Field {key!r} is not a string: {value!r}")
    return value


def parse_position(raw: Any) -> VehiclePosition:
    """Decode a single wire-format position object.

    Args:
        raw: One element of a route's position list.

    Returns:
        The normalized ``VehiclePosition``.

    Raises:
        TransitViewDecodeError: If the object is malformed or a field
            cannot be coerced to its declared type.

    """
    if not isinstance(raw, dict):
        raise TransitViewDecodeError(f"Position is not an object: {raw!r}")
    fields = cast("dict[str, Any]", raw)
    return VehiclePosition(
        label=_str_field(fields, "label"),
        vehicle_id=_str_field(fields, "VehicleID"),
        block_id=_str_field(fields, "BlockID"),
        trip=_str_field(fields, "trip"),
        latitude=_require_float(fields, "lat"),
        longitude=_require_float(fields, "lng"),
        direction=_str_field(fields, "Direction"),
        destination=_str_field(fields, "destination"),
        offset_minutes=_int_field(fields, "offset"),
        offset_seconds=_int_field(fields, "Offset_sec"),
        heading=_int_field(fields, "heading"),
        late_minutes=_int_field(fields, "late"),
    )


def parse_position_list(raw: Any, *, context: str) -> tuple[VehiclePosition, ...]:
    """Decode a JSON array of positions.

    Args:
        raw: The array value from the payload.
        context: Where the array came from, used in error messages.

    Returns:
        Positions in feed order; ``null`` decodes to none.

    Raises:
        TransitViewDecodeError: If ``raw`` is not an array or any element
            fails to decode.

    """
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise TransitViewDecodeError(f"Positions for {context} are not a list: {raw!r}")
    try:
        return tuple(parse_position(item) for item in cast("list[Any]", raw))
    except TransitViewDecodeError as exc:
        raise TransitViewDecodeError(f"Bad position in {context}: {exc}") from exc


def parse_all_routes(payload: Any) -> RouteSnapshot:
    """Decode an all-routes response into a route snapshot.

    The payload is ``{"routes": [{"<route>": [<position>, ...], ...}]}``.
    The array wrapper carries no information; element zero is the route
    map.  Any further elements are ignored with a warning.

    Args:
        payload: Parsed JSON body.

    Returns:
        Mapping of route label to its positions.

    Raises:
        TransitViewDecodeError: If the array is missing or empty, or any
            position fails to decode.

    """
    if not isinstance(payload, dict):
        raise TransitViewDecodeError("All-routes payload is not an object")
    routes: Any = cast("dict[str, Any]", payload).get("routes")
    if not isinstance(routes, list):
        raise TransitViewDecodeError("All-routes payload has no 'routes' array")
    wrapper = cast("list[Any]", routes)
    if not wrapper:
        raise TransitViewDecodeError("All-routes 'routes' array is empty")
    if len(wrapper) > 1:
        logger.warning("All-routes array has %d elements; using the first", len(wrapper))

    route_map: Any = wrapper[0]
    if not isinstance(route_map, dict):
        raise TransitViewDecodeError("All-routes element is not an object")
    return {
        str(route): parse_position_list(positions, context=f"route {route}")
        for route, positions in cast("dict[str, Any]", route_map).items()
    }


def parse_route(payload: Any, route: str) -> list[VehiclePosition]:
    """Decode a single-route response of the form ``{"bus": [...]}``.

    A body without a ``bus`` key decodes to no positions.

    Args:
        payload: Parsed JSON body.
        route: Route label that was requested.

    Returns:
        Positions for the route in feed order.

    Raises:
        TransitViewDecodeError: If the body is not an object or any
            position fails to decode.

    """
    if not isinstance(payload, dict):
        raise TransitViewDecodeError(f"Route {route} payload is not an object")
    positions: Any = cast("dict[str, Any]", payload).get("bus")
    return list(parse_position_list(positions, context=f"route {route}"))
