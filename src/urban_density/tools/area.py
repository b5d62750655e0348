"""Area definition tools: set_area_from_circle, set_area_from_polygon, clear_area."""

import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..config import CIRCLE_RADII_M
from ..state import state
from ..core.exceptions import InvalidInputError
from ..core.geometry import build_circle, from_ring

logger = logging.getLogger(__name__)


def _describe(area) -> str:
    b = area.bounding_box
    return (
        f"{area.area_km2:.3f} km², {area.vertex_count} vertices, "
        f"bbox W={b.min_lon:.6f}, S={b.min_lat:.6f}, E={b.max_lon:.6f}, N={b.max_lat:.6f}"
    )


def register_area_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_area_from_circle(lat: float, lon: float, radius_m: int = 1000) -> str:
        """Define the query area as a circle around a center point.

        **Next:** analyze_density.

        Args:
            lat: Center latitude (degrees).
            lon: Center longitude (degrees).
            radius_m: Radius in meters: 500, 1000 or 3000 (default 1000).
        """
        if radius_m not in CIRCLE_RADII_M:
            return f"Error: radius_m must be one of {list(CIRCLE_RADII_M)}, got {radius_m}."
        try:
            area = build_circle((lon, lat), radius_m, steps=state.settings.circle_steps)
        except InvalidInputError as e:
            return f"Error: {e.message}"

        state.set_area(area)
        logger.info("Circle area set: center=(%.6f, %.6f) radius=%dm", lon, lat, radius_m)
        return f"Area set: circle r={radius_m}m around ({lat:.6f}, {lon:.6f}) — {_describe(area)}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_area_from_polygon(ring: list[list[float]], close_ring: bool = False) -> str:
        """Define the query area as a drawn polygon.

        **Next:** analyze_density.

        Args:
            ring: Polygon vertices as [lon, lat] pairs. The first and last
                vertex must be identical unless close_ring is true.
            close_ring: Append the first vertex when the ring is left open.
        """
        points = [tuple(p) for p in ring]
        if close_ring and points and points[0] != points[-1]:
            points.append(points[0])
        try:
            area = from_ring(points)
        except InvalidInputError as e:
            return f"Error: {e.message}"

        state.set_area(area)
        logger.info("Polygon area set: %d vertices", area.vertex_count)
        return f"Area set: polygon — {_describe(area)}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def clear_area() -> str:
        """Remove the current area and any analysis result."""
        state.set_area(None)
        return "Area cleared."
