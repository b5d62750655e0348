"""Containment counting of Overpass elements against a query ring.

Each element contributes at most one point: a node's own position, or the
``center`` Overpass attaches to ways and relations. Ways/relations without
a center are skipped. Containment is boundary-inclusive (``covers``), so a
POI lying exactly on the ring counts.
"""

import logging
from typing import Iterable, Optional

import numpy as np
import shapely
from pydantic import ValidationError
from shapely.geometry import Polygon

from urban_density.models import AreaGeometry, Coordinate, PoiElement

logger = logging.getLogger(__name__)


def parse_element(raw: dict) -> Optional[PoiElement]:
    """Reduce a raw Overpass element to a PoiElement, or None if unusable."""
    elem_type = raw.get("type")
    try:
        if elem_type == "node":
            if raw.get("lat") is None or raw.get("lon") is None:
                return None
            coordinate = Coordinate(lon=raw["lon"], lat=raw["lat"])
            return PoiElement(id=raw.get("id", 0), kind="point", coordinate=coordinate)
        if elem_type in ("way", "relation"):
            center = raw.get("center")
            coordinate = Coordinate(lon=center["lon"], lat=center["lat"]) if center else None
            return PoiElement(id=raw.get("id", 0), kind="way_or_relation", coordinate=coordinate)
    except (ValidationError, KeyError, TypeError) as exc:
        logger.debug("Skipping malformed %s element %s: %s", elem_type, raw.get("id"), exc)
        return None
    return None


def parse_elements(raw_elements: Iterable[dict]) -> list[PoiElement]:
    elements = []
    for raw in raw_elements:
        element = parse_element(raw)
        if element is not None:
            elements.append(element)
    return elements


def count_inside(raw_elements: Iterable[dict], geometry: AreaGeometry) -> int:
    """Count elements whose representative point lies in ``geometry``.

    The result does not depend on the order of ``raw_elements``.
    """
    points = [
        e.coordinate.as_tuple()
        for e in parse_elements(raw_elements)
        if e.coordinate is not None
    ]
    if not points:
        return 0

    polygon = Polygon([c.as_tuple() for c in geometry.ring])
    shapely.prepare(polygon)
    inside = shapely.covers(polygon, shapely.points(np.asarray(points, dtype=float)))
    return int(np.count_nonzero(inside))
