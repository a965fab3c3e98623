"""Models for macro estimates returned by the analysis service."""

from pydantic import BaseModel, Field


class AlternativeSource(BaseModel):
    """Macro values for the same food reported by another source."""

    source: str
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)


class MacroEstimate(BaseModel):
    """Structured macro estimate for a photographed or described food."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    weight: float | None = Field(default=None, ge=0.0)
    alternative_sources: list[AlternativeSource] = Field(default_factory=list)
