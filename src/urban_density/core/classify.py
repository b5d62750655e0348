"""POI density classification into urban-level bands."""

from .exceptions import InvalidInputError
from .models import UrbanLevel

DENSITY_EPSILON_KM2 = 1e-6
RURAL_MAX_DENSITY = 5.0
SUBURBAN_MAX_DENSITY = 20.0


def poi_density(poi_count: int, area_km2: float) -> float:
    """POIs per km², with the area floored at ``DENSITY_EPSILON_KM2``."""
    if poi_count < 0:
        raise InvalidInputError(f"POI count must be >= 0, got {poi_count}")
    return poi_count / max(area_km2, DENSITY_EPSILON_KM2)


def classify_density(
    density: float,
    rural_max: float = RURAL_MAX_DENSITY,
    suburban_max: float = SUBURBAN_MAX_DENSITY,
) -> UrbanLevel:
    """[0, rural_max) rural, [rural_max, suburban_max) suburban, above urban."""
    if density < rural_max:
        return UrbanLevel.RURAL
    if density < suburban_max:
        return UrbanLevel.SUBURBAN
    return UrbanLevel.URBAN


def classify(
    poi_count: int,
    area_km2: float,
    rural_max: float = RURAL_MAX_DENSITY,
    suburban_max: float = SUBURBAN_MAX_DENSITY,
) -> UrbanLevel:
    return classify_density(poi_density(poi_count, area_km2), rural_max, suburban_max)
