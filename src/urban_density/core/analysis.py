"""Density analysis pipeline: query, fetch, count, classify.

``analyze`` runs one analysis and raises on any stage failure.
``AnalysisTracker`` wraps it with a generation counter so that a run
overtaken by a newer one (area changed, re-run requested) cannot publish
its result over the newer state.
"""

import logging
from typing import Awaitable, Callable, Optional

from urban_density.config import Settings
from urban_density.models import AreaGeometry
from .classify import classify_density, poi_density
from .counting import count_inside
from .exceptions import DensityError
from .models import AnalysisOutcome, DensityResult
from .overpass import fetch_elements
from .query import build_query

logger = logging.getLogger(__name__)

FetchFn = Callable[..., Awaitable[list[dict]]]


async def analyze(
    geometry: AreaGeometry,
    settings: Optional[Settings] = None,
    fetch: Optional[FetchFn] = None,
) -> DensityResult:
    """Estimate the urban level of ``geometry`` from Overpass POI counts.

    Raises:
        DensityError: from whichever stage failed. No partial result is
            produced.
    """
    settings = settings or Settings()
    fetch = fetch or fetch_elements

    query = build_query(geometry, settings.tag_categories, timeout_s=settings.query_timeout_s)
    raw_elements = await fetch(
        query,
        settings.endpoints,
        timeout_s=settings.timeout_s,
        backoff_base_s=settings.backoff_base_s,
    )
    count = count_inside(raw_elements, geometry)
    density = poi_density(count, geometry.area_km2)
    level = classify_density(density, settings.rural_max_density, settings.suburban_max_density)

    logger.info(
        "Density analysis | mode=%s | area=%.3f km2 | elements=%d | inside=%d | density=%.2f/km2 | level=%s",
        geometry.mode, geometry.area_km2, len(raw_elements), count, density, level.value,
    )
    return DensityResult(area_km2=geometry.area_km2, poi_count=count, poi_density=density, level=level)


class AnalysisTracker:
    """Latest-wins guard over overlapping analysis runs."""

    def __init__(self):
        self._latest = 0
        self.outcome: Optional[AnalysisOutcome] = None

    @property
    def latest(self) -> int:
        return self._latest

    def begin(self) -> int:
        """Start a new generation; any earlier run becomes stale."""
        self._latest += 1
        return self._latest

    def invalidate(self) -> None:
        """Mark in-flight runs stale and drop the published outcome."""
        self.begin()
        self.outcome = None

    def is_current(self, generation: int) -> bool:
        return generation == self._latest

    def publish(self, outcome: AnalysisOutcome) -> bool:
        if not self.is_current(outcome.generation):
            logger.debug(
                "Discarding stale analysis outcome (generation %d, latest %d)",
                outcome.generation, self._latest,
            )
            return False
        self.outcome = outcome
        return True

    async def run(
        self,
        geometry: AreaGeometry,
        settings: Optional[Settings] = None,
        fetch: Optional[FetchFn] = None,
    ) -> AnalysisOutcome:
        generation = self.begin()
        try:
            result = await analyze(geometry, settings, fetch)
        except DensityError as exc:
            outcome = AnalysisOutcome(generation=generation, error=exc.to_error_dict())
        else:
            outcome = AnalysisOutcome(generation=generation, result=result)

        if not self.publish(outcome):
            outcome = outcome.model_copy(update={"stale": True})
        return outcome
