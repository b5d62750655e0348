"""Analysis settings, with defaults for the public Overpass service.

``Settings.from_env()`` overrides the defaults from ``URBAN_DENSITY_*``
environment variables. Out-of-range values raise ``pydantic.ValidationError``
at startup rather than on the first query.
"""

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_ENDPOINTS = (
    "https://overpass-api.de/api/interpreter",
    "https://overpass.kumi.systems/api/interpreter",
    "https://overpass.openstreetmap.ru/api/interpreter",
)

TAG_CATEGORIES = ("amenity", "shop", "office", "public_transport")

CIRCLE_RADII_M = (500, 1000, 3000)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoints: tuple[str, ...] = Field(default=DEFAULT_ENDPOINTS, min_length=1)
    timeout_s: float = Field(default=25.0, gt=0)
    query_timeout_s: int = Field(default=25, gt=0)
    backoff_base_s: float = Field(default=0.150, ge=0)
    circle_steps: int = Field(default=128, ge=3)
    rural_max_density: float = Field(default=5.0, gt=0)
    suburban_max_density: float = Field(default=20.0, gt=0)
    tag_categories: tuple[str, ...] = Field(default=TAG_CATEGORIES, min_length=1)

    @field_validator("endpoints")
    @classmethod
    def endpoints_must_be_http(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for url in v:
            if not url.startswith(("http://", "https://")):
                raise ValueError(f"Endpoint '{url}' must be an http(s) URL")
        return v

    @model_validator(mode="after")
    def check_threshold_order(self) -> "Settings":
        if self.rural_max_density >= self.suburban_max_density:
            raise ValueError(
                f"rural_max_density ({self.rural_max_density}) must be less than "
                f"suburban_max_density ({self.suburban_max_density})"
            )
        return self

    @classmethod
    def from_env(cls) -> "Settings":
        values: dict = {}
        endpoints = os.getenv("URBAN_DENSITY_OVERPASS_ENDPOINTS")
        if endpoints:
            values["endpoints"] = tuple(u.strip() for u in endpoints.split(",") if u.strip())
        for key, field in [
            ("URBAN_DENSITY_TIMEOUT_S", "timeout_s"),
            ("URBAN_DENSITY_QUERY_TIMEOUT_S", "query_timeout_s"),
            ("URBAN_DENSITY_BACKOFF_BASE_S", "backoff_base_s"),
            ("URBAN_DENSITY_CIRCLE_STEPS", "circle_steps"),
            ("URBAN_DENSITY_RURAL_MAX", "rural_max_density"),
            ("URBAN_DENSITY_SUBURBAN_MAX", "suburban_max_density"),
        ]:
            raw = os.getenv(key)
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        return cls(**values)
