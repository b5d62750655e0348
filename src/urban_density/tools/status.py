"""Status tool: get_status."""

import json
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_status_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_status() -> str:
        """Return a summary of the current session.

        Shows the current area, the latest analysis result or error, and
        the active Overpass settings.
        """
        return json.dumps(state.summary(), ensure_ascii=False, indent=2)

    @mcp.resource("state://session")
    def session_resource() -> str:
        """Current session summary as JSON."""
        return json.dumps(state.summary(), ensure_ascii=False, indent=2)
