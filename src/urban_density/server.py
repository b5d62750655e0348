"""MCP server for urban-density.

Registers all tools and runs via stdio transport.
"""

from mcp.server.fastmcp import FastMCP

from .tools.area import register_area_tools
from .tools.analyze import register_analyze_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "urban-density",
    instructions="Estimate the urban density level of an area from OpenStreetMap POI counts",
)

# Register all tool groups
register_area_tools(mcp)
register_analyze_tools(mcp)
register_status_tools(mcp)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
