"""Session state for the urban-density MCP server.

Holds the current query area, the analysis settings and the tracker that
owns the latest published analysis outcome.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from urban_density.config import Settings
from urban_density.core.analysis import AnalysisTracker
from urban_density.models import AreaGeometry


class SessionState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    area: Optional[AreaGeometry] = None
    settings: Settings = Field(default_factory=Settings.from_env)
    tracker: AnalysisTracker = Field(default_factory=AnalysisTracker, exclude=True)

    def set_area(self, area: Optional[AreaGeometry]) -> None:
        """Replace the area and discard any in-flight or published outcome."""
        self.area = area
        self.tracker.invalidate()

    def summary(self) -> dict:
        outcome = self.tracker.outcome
        return {
            "area": {
                "area_set": True,
                "mode": self.area.mode,
                "vertices": self.area.vertex_count,
                "center": self.area.center.as_tuple() if self.area.center else None,
                "radius_m": self.area.radius_m,
                "area_km2": round(self.area.area_km2, 6),
                "bounding_box": self.area.bounding_box.as_tuple(),
            } if self.area is not None else {"area_set": False},
            "analysis": {
                "generation": self.tracker.latest,
                "result": outcome.result.as_dict() if outcome and outcome.result else None,
                "error": outcome.error if outcome else None,
            },
            "settings": {
                "endpoints": list(self.settings.endpoints),
                "timeout_s": self.settings.timeout_s,
                "circle_steps": self.settings.circle_steps,
                "thresholds": [self.settings.rural_max_density, self.settings.suburban_max_density],
                "tag_categories": list(self.settings.tag_categories),
            },
        }


# One session per MCP server process
state = SessionState()
