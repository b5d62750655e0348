"""Tests for analysis tools."""
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import TOKYO_STATION, node


def _register_and_get(tool_name: str):
    from urban_density.tools.analyze import register_analyze_tools
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register_analyze_tools(mock_mcp)
    return tools[tool_name]


@pytest.fixture(autouse=True)
def reset_state():
    from urban_density.state import state
    state.set_area(None)
    yield
    state.set_area(None)


@pytest.mark.anyio
async def test_analyze_requires_area():
    analyze_density = _register_and_get("analyze_density")
    result = await analyze_density()
    assert result.startswith("Error")
    assert "area" in result.lower()


@pytest.mark.anyio
async def test_analyze_reports_level_and_stats():
    from urban_density.core.geometry import build_circle
    from urban_density.state import state

    analyze_density = _register_and_get("analyze_density")
    state.set_area(build_circle(TOKYO_STATION, 1000))

    elements = [node(*TOKYO_STATION, id=i) for i in range(100)]
    with patch("urban_density.core.analysis.fetch_elements", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = elements
        result = await analyze_density()

    assert "Urban" in result
    assert "POIs: 100" in result
    assert "3.14 km²" in result
    assert state.tracker.outcome.result.poi_count == 100


@pytest.mark.anyio
async def test_analyze_reports_error_kind():
    from urban_density.core.exceptions import NetworkFailureError
    from urban_density.core.geometry import build_circle
    from urban_density.state import state

    analyze_density = _register_and_get("analyze_density")
    state.set_area(build_circle(TOKYO_STATION, 500))

    with patch("urban_density.core.analysis.fetch_elements", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.side_effect = NetworkFailureError("Overpass endpoint https://x timed out after 25s")
        result = await analyze_density()

    assert result.startswith("Error: NetworkFailure:")
    assert "timed out" in result
    assert state.tracker.outcome.error["errorKind"] == "NetworkFailure"


@pytest.mark.anyio
async def test_analyze_discards_result_when_area_changes_mid_flight():
    from urban_density.core.geometry import build_circle
    from urban_density.state import state

    analyze_density = _register_and_get("analyze_density")
    state.set_area(build_circle(TOKYO_STATION, 500))

    async def fetch_then_area_changes(query, endpoints, **kwargs):
        state.set_area(build_circle(TOKYO_STATION, 3000))
        return []

    with patch("urban_density.core.analysis.fetch_elements", new=fetch_then_area_changes):
        result = await analyze_density()

    assert result.startswith("Discarded")
    assert "superseded by a newer analysis or area change" in result
    assert state.tracker.outcome is None
    assert state.area.radius_m == 3000.0


@pytest.mark.anyio
async def test_analyze_rerun_on_same_area_supersedes_earlier_run():
    import asyncio

    from urban_density.core.geometry import build_circle
    from urban_density.state import state

    analyze_density = _register_and_get("analyze_density")
    state.set_area(build_circle(TOKYO_STATION, 500))
    release_first = asyncio.Event()
    calls = []

    async def fetch(query, endpoints, **kwargs):
        calls.append(query)
        if len(calls) == 1:
            await release_first.wait()
        return [node(*TOKYO_STATION)]

    with patch("urban_density.core.analysis.fetch_elements", new=fetch):
        first = asyncio.create_task(analyze_density())
        await asyncio.sleep(0)
        second = await analyze_density()
        release_first.set()
        first_result = await first

    assert second.startswith("Urban level:")
    assert first_result.startswith("Discarded: superseded by a newer analysis or area change")
    assert "area changed" not in first_result
    assert state.tracker.outcome.result.poi_count == 1


def test_get_density_result_requires_analysis():
    get_density_result = _register_and_get("get_density_result")
    assert "analyze_density" in get_density_result()


@pytest.mark.anyio
async def test_get_density_result_returns_json():
    from urban_density.core.geometry import build_circle
    from urban_density.state import state

    analyze_density = _register_and_get("analyze_density")
    get_density_result = _register_and_get("get_density_result")
    state.set_area(build_circle(TOKYO_STATION, 1000))

    with patch("urban_density.core.analysis.fetch_elements", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = []
        await analyze_density()

    parsed = json.loads(get_density_result())
    assert parsed["poiCount"] == 0
    assert parsed["level"] == "rural"
