"""Pydantic domain models for query areas and POI elements."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Coordinate(BaseModel):
    """A WGS84 position stored as (lon, lat)."""
    model_config = ConfigDict(frozen=True)

    lon: float = Field(ge=-180, le=180)
    lat: float = Field(ge=-90, le=90)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lon, self.lat)


class BoundingBox(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_lon: float = Field(ge=-180, le=180)
    min_lat: float = Field(ge=-90, le=90)
    max_lon: float = Field(ge=-180, le=180)
    max_lat: float = Field(ge=-90, le=90)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)


class AreaGeometry(BaseModel):
    """A closed query ring tagged with how it was built.

    Instances come from ``core.geometry.build_circle`` or
    ``core.geometry.from_ring``, which fill in ``area_km2`` and
    ``bounding_box``. A changed area is a new instance, never an update.
    """
    model_config = ConfigDict(frozen=True)

    mode: Literal["circle", "freeform"]
    ring: list[Coordinate] = Field(min_length=4)
    center: Optional[Coordinate] = None
    radius_m: Optional[float] = None
    area_km2: float = Field(ge=0)
    bounding_box: BoundingBox

    @model_validator(mode="after")
    def check_ring_closed(self) -> "AreaGeometry":
        if self.ring[0] != self.ring[-1]:
            raise ValueError("ring must be closed (first vertex == last vertex)")
        return self

    @model_validator(mode="after")
    def check_circle_params(self) -> "AreaGeometry":
        if self.mode == "circle":
            if self.center is None or self.radius_m is None:
                raise ValueError("circle geometry requires center and radius_m")
            if self.radius_m <= 0:
                raise ValueError(f"radius_m must be > 0, got {self.radius_m}")
        return self

    @property
    def vertex_count(self) -> int:
        """Distinct vertices (the closing point is not counted)."""
        return len(self.ring) - 1


class PoiElement(BaseModel):
    """One Overpass element reduced to the point used for containment.

    ``coordinate`` is the node position for points and the service-supplied
    centroid for ways/relations; ``None`` means the element is not counted.
    """
    model_config = ConfigDict(frozen=True)

    id: int = 0
    kind: Literal["point", "way_or_relation"]
    coordinate: Optional[Coordinate] = None
