"""Analysis tools: analyze_density, get_density_result."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ._prereqs import require_state

logger = logging.getLogger(__name__)


def register_analyze_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False, openWorldHint=True))
    async def analyze_density() -> str:
        """Count OpenStreetMap POIs in the current area and estimate its urban level.

        Queries Overpass for amenity, shop, office and public_transport
        features, counts those inside the area and classifies POIs/km² as
        rural (< 5), suburban (5–20) or urban (≥ 20).

        **Requires:** set_area_from_circle or set_area_from_polygon first.
        """
        try:
            require_state(state, area=True)
        except ValueError as e:
            return f"Error: {e}"

        outcome = await state.tracker.run(state.area, state.settings)
        if outcome.stale:
            logger.info("Analysis generation %d superseded by %d", outcome.generation, state.tracker.latest)
            return (
                "Discarded: superseded by a newer analysis or area change. "
                "Run analyze_density again."
            )
        if outcome.error is not None:
            return f"Error: {outcome.error['errorKind']}: {outcome.error['message']}"

        r = outcome.result
        return (
            f"Urban level: {r.level.label} — {r.level.description}\n"
            f"Area: {r.area_km2:.2f} km² | POIs: {r.poi_count:,} | "
            f"Density: {r.poi_density:.1f} / km²"
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_density_result() -> str:
        """Return the latest analysis result as JSON."""
        try:
            require_state(state, result=True)
        except ValueError as e:
            return f"Error: {e}"
        return json.dumps(state.tracker.outcome.result.as_dict(), ensure_ascii=False, indent=2)
