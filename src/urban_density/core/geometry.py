"""Query-area geometry: geodesic circles, user-drawn rings, area and bounds.

All rings are stored as (lon, lat) and closed. Area is geodesic on the
WGS84 ellipsoid (pyproj.Geod), never a flat-Earth shoelace over degrees.
"""

import logging
from typing import Sequence, Union

import numpy as np
from pydantic import ValidationError
from pyproj import Geod
from shapely.geometry import Polygon
from shapely.validation import explain_validity

from urban_density.models import AreaGeometry, BoundingBox, Coordinate
from .exceptions import InvalidInputError

logger = logging.getLogger(__name__)

CIRCLE_STEPS = 128
SQ_METRES_PER_KM2 = 1_000_000.0
MIN_RING_POINTS = 4  # 3 distinct + closing point

_GEOD = Geod(ellps="WGS84")

PointLike = Union[Coordinate, Sequence[float]]


def _as_coordinate(point: PointLike) -> Coordinate:
    if isinstance(point, Coordinate):
        return point
    lon, lat = point
    return Coordinate(lon=lon, lat=lat)


def _ring_area_km2(ring: Sequence[Coordinate]) -> float:
    lons = [c.lon for c in ring]
    lats = [c.lat for c in ring]
    area_m2, _perimeter = _GEOD.polygon_area_perimeter(lons, lats)
    # Sign follows winding order
    return abs(area_m2) / SQ_METRES_PER_KM2


def _ring_bounds(ring: Sequence[Coordinate]) -> BoundingBox:
    lons = [c.lon for c in ring]
    lats = [c.lat for c in ring]
    return BoundingBox(min_lon=min(lons), min_lat=min(lats), max_lon=max(lons), max_lat=max(lats))


def build_circle(center: PointLike, radius_m: float, steps: int = CIRCLE_STEPS) -> AreaGeometry:
    """Approximate a geodesic circle with a regular ``steps``-gon.

    Vertices are the geodesic destinations from ``center`` at ``steps``
    evenly spaced azimuths, wound counter-clockwise starting due north.

    Raises:
        InvalidInputError: if ``radius_m <= 0``, ``steps < 3`` or the
            center is not a valid WGS84 position.
    """
    if radius_m is None or radius_m <= 0:
        raise InvalidInputError(f"Circle radius must be > 0 m, got {radius_m}")
    if steps < 3:
        raise InvalidInputError(f"Circle needs at least 3 steps, got {steps}")
    try:
        center = _as_coordinate(center)
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid circle center: {exc}") from exc

    azimuths = -np.linspace(0.0, 360.0, steps, endpoint=False)
    lons, lats, _back_az = _GEOD.fwd(
        np.full(steps, center.lon),
        np.full(steps, center.lat),
        azimuths,
        np.full(steps, float(radius_m)),
    )
    try:
        ring = [Coordinate(lon=float(lon), lat=float(lat)) for lon, lat in zip(lons, lats)]
    except ValidationError as exc:
        raise InvalidInputError(f"Circle of {radius_m} m around {center.as_tuple()} leaves WGS84 range") from exc
    ring.append(ring[0])

    return AreaGeometry(
        mode="circle",
        ring=ring,
        center=center,
        radius_m=float(radius_m),
        area_km2=_ring_area_km2(ring),
        bounding_box=_ring_bounds(ring),
    )


def from_ring(ring: Sequence[PointLike]) -> AreaGeometry:
    """Wrap a closed, simple user-drawn ring of (lon, lat) vertices.

    Raises:
        InvalidInputError: if the ring has fewer than 4 points, is not
            closed, has fewer than 3 distinct vertices or self-intersects.
    """
    if ring is None or len(ring) < MIN_RING_POINTS:
        n = 0 if ring is None else len(ring)
        raise InvalidInputError(
            f"Polygon ring needs at least {MIN_RING_POINTS} points (3 vertices + closing point), got {n}"
        )
    try:
        coords = [_as_coordinate(p) for p in ring]
    except (ValidationError, TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid ring vertex: {exc}") from exc

    if coords[0] != coords[-1]:
        raise InvalidInputError(
            f"Polygon ring is not closed: first {coords[0].as_tuple()} != last {coords[-1].as_tuple()}"
        )
    if len(set(coords[:-1])) < 3:
        raise InvalidInputError("Polygon ring needs at least 3 distinct vertices")

    polygon = Polygon([c.as_tuple() for c in coords])
    if not polygon.is_valid:
        raise InvalidInputError(f"Polygon ring is not simple: {explain_validity(polygon)}")

    return AreaGeometry(
        mode="freeform",
        ring=coords,
        area_km2=_ring_area_km2(coords),
        bounding_box=_ring_bounds(coords),
    )


def area_km2(geometry: AreaGeometry) -> float:
    """Geodesic area of the geometry's ring in km²."""
    return _ring_area_km2(geometry.ring)


def bounding_box(geometry: AreaGeometry) -> tuple[float, float, float, float]:
    """``(min_lon, min_lat, max_lon, max_lat)`` over the ring vertices."""
    return _ring_bounds(geometry.ring).as_tuple()
