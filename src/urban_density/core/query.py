"""Overpass QL query construction for a query area.

Circles use the ``around`` filter on nodes only. Freeform rings use the
``poly`` filter on nodes, ways and relations and ask for ``center`` output
so non-point elements carry a centroid for containment counting.
"""

import re
from typing import Iterable

from urban_density.config import TAG_CATEGORIES
from urban_density.models import AreaGeometry
from .exceptions import InvalidInputError

QUERY_TIMEOUT_S = 25

_CATEGORY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_:]*$")


def _fmt_number(value: float) -> str:
    """Fixed-point text at OSM precision (1e-7 deg), no exponent."""
    text = f"{float(value):.7f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def poly_filter_ring(geometry: AreaGeometry) -> str:
    """Ring vertices as ``"lat1 lon1 lat2 lon2 ..."`` for the poly filter."""
    return " ".join(f"{_fmt_number(c.lat)} {_fmt_number(c.lon)}" for c in geometry.ring)


def _around_clauses(geometry: AreaGeometry, categories: list[str]) -> list[str]:
    radius = _fmt_number(geometry.radius_m)
    lat = _fmt_number(geometry.center.lat)
    lon = _fmt_number(geometry.center.lon)
    return [f"node[{cat}](around:{radius},{lat},{lon});" for cat in categories]


def _poly_clauses(geometry: AreaGeometry, categories: list[str]) -> list[str]:
    ring = poly_filter_ring(geometry)
    clauses = []
    for cat in categories:
        for element_type in ("node", "way", "relation"):
            clauses.append(f'{element_type}[{cat}](poly:"{ring}");')
    return clauses


def build_query(
    geometry: AreaGeometry,
    tag_categories: Iterable[str] = TAG_CATEGORIES,
    timeout_s: int = QUERY_TIMEOUT_S,
) -> str:
    """Render the Overpass QL union query for ``geometry``.

    Raises:
        InvalidInputError: if no tag categories are given, a category is
            not a plain OSM key, or the geometry has no vertices.
    """
    categories = list(tag_categories)
    if not categories:
        raise InvalidInputError("At least one tag category is required")
    for cat in categories:
        if not _CATEGORY_RE.match(cat):
            raise InvalidInputError(f"Invalid tag category '{cat}'")
    if not geometry.ring:
        raise InvalidInputError("Query geometry has no vertices")

    if geometry.mode == "circle":
        clauses = _around_clauses(geometry, categories)
        output = "out skel qt;"
    else:
        clauses = _poly_clauses(geometry, categories)
        output = "out skel center qt;"

    body = "\n".join(f"  {clause}" for clause in clauses)
    return f"[out:json][timeout:{int(timeout_s)}];\n(\n{body}\n);\n{output}"
