import pytest
from pyproj import Geod

from urban_density.models import Coordinate

TOKYO_STATION = (139.7671, 35.6812)

_GEOD = Geod(ellps="WGS84")


@pytest.fixture
def anyio_backend():
    return "asyncio"


def offset(origin: tuple[float, float], azimuth_deg: float, distance_m: float) -> tuple[float, float]:
    """(lon, lat) reached from ``origin`` along a geodesic."""
    lon, lat, _ = _GEOD.fwd(origin[0], origin[1], azimuth_deg, distance_m)
    return (lon, lat)


def node(lon: float, lat: float, id: int = 0) -> dict:
    return {"type": "node", "id": id, "lon": lon, "lat": lat}


def way(center: tuple[float, float] | None, id: int = 0, type: str = "way") -> dict:
    elem = {"type": type, "id": id}
    if center is not None:
        elem["center"] = {"lon": center[0], "lat": center[1]}
    return elem


@pytest.fixture
def square_ring() -> list[tuple[float, float]]:
    """Closed ring of a ~1 km x 1 km square with its SW corner at Tokyo Station."""
    sw = TOKYO_STATION
    se = offset(sw, 90.0, 1000.0)
    nw = offset(sw, 0.0, 1000.0)
    ne = (se[0], nw[1])
    return [sw, se, ne, nw, sw]


@pytest.fixture
def tokyo() -> Coordinate:
    return Coordinate(lon=TOKYO_STATION[0], lat=TOKYO_STATION[1])
