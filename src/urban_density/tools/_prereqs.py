"""Prerequisite checking helpers for MCP tools."""


def require_state(state, *, area: bool = False, result: bool = False) -> None:
    """Raise ValueError with a descriptive message if required state is not set.

    Usage in a tool:
        try:
            require_state(state, area=True)
        except ValueError as e:
            return f"Error: {e}"
    """
    if area and state.area is None:
        raise ValueError(
            "Set an area first with set_area_from_circle or set_area_from_polygon."
        )
    if result and (state.tracker.outcome is None or state.tracker.outcome.result is None):
        raise ValueError(
            "Run an analysis first with analyze_density."
        )
