"""Row schemas for the raw input tables."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _label(value: object) -> object:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


class GeometryRow(BaseModel):
    """One row of the geometry/mass table. Probe columns are kept as extras."""

    model_config = ConfigDict(extra="allow")

    cushion: str
    foam: str
    length: float = Field(ge=0)
    width: float = Field(ge=0)
    vf_thickness: float = Field(ge=0)
    sag_height: float = Field(ge=0)
    sag_width: float = Field(ge=0)
    mass: float = Field(gt=0)

    @field_validator("cushion", "foam", mode="before")
    @classmethod
    def coerce_labels(cls, value: object) -> object:
        return _label(value)


class FoamSpecRow(BaseModel):
    """One nominal density range in kg/m³."""

    foam: str
    min: float = Field(gt=0)
    max: float = Field(gt=0)

    @field_validator("foam", mode="before")
    @classmethod
    def coerce_foam(cls, value: object) -> object:
        return _label(value)

    @model_validator(mode="after")
    def check_order(self) -> "FoamSpecRow":
        if self.min >= self.max:
            raise ValueError(f"min ({self.min}) must be below max ({self.max})")
        return self


__all__ = ["GeometryRow", "FoamSpecRow"]
