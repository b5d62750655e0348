"""Pydantic return models for core computation functions."""

from enum import Enum
from functools import total_ordering
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


@total_ordering
class UrbanLevel(Enum):
    """Density bands, ordered rural < suburban < urban."""

    RURAL = "rural"
    SUBURBAN = "suburban"
    URBAN = "urban"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    @property
    def label(self) -> str:
        return _LEVEL_DISPLAY[self][0]

    @property
    def tone(self) -> str:
        return _LEVEL_DISPLAY[self][1]

    @property
    def description(self) -> str:
        return _LEVEL_DISPLAY[self][2]

    def __lt__(self, other):
        if not isinstance(other, UrbanLevel):
            return NotImplemented
        return self.rank < other.rank


_LEVEL_ORDER = [UrbanLevel.RURAL, UrbanLevel.SUBURBAN, UrbanLevel.URBAN]

# label, badge tone, description
_LEVEL_DISPLAY = {
    UrbanLevel.RURAL: ("低（Rural）", "neutral", "生活施設が少なく疎なエリア"),
    UrbanLevel.SUBURBAN: ("中（Suburban）", "amber", "郊外～準都心レベルの密度"),
    UrbanLevel.URBAN: ("高（Urban）", "green", "商業・公共施設が密な都心レベル"),
}


class DensityResult(BaseModel):
    """Return type for core.analysis.analyze."""
    model_config = ConfigDict(frozen=True)

    area_km2: float = Field(ge=0)
    poi_count: int = Field(ge=0)
    poi_density: float = Field(ge=0)
    level: UrbanLevel

    def as_dict(self) -> dict:
        return {
            "areaKm2": self.area_km2,
            "poiCount": self.poi_count,
            "poiDensity": self.poi_density,
            "level": self.level.value,
            "label": self.level.label,
            "description": self.level.description,
        }


class AnalysisOutcome(BaseModel):
    """Result or error of one tracked analysis run."""
    model_config = ConfigDict(frozen=True)

    generation: int = Field(ge=1)
    result: Optional[DensityResult] = None
    error: Optional[dict[str, str]] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.result is not None
