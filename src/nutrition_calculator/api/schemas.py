"""Pydantic request models for the HTTP API.

User-typed numbers are validated here; anything unparsable or out of range is
rejected with a 422 before a service is called.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from nutrition_calculator.domain.entries import SourceEstimate
from nutrition_calculator.domain.nutrition import MacroProfile
from nutrition_calculator.domain.targets import (
    FitnessGoal,
    Gender,
    NutritionGoals,
    UserProfile,
)

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class SourceEstimatePayload(BaseModel):
    """Alternative source values attached to a new entry."""

    source: NonBlankStr
    calories: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)

    def to_domain(self) -> SourceEstimate:
        return SourceEstimate(
            source=self.source,
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )


class EntryCreate(BaseModel):
    """New food entry; macros are totals for all eaten portions."""

    name: NonBlankStr
    calories: float = Field(ge=0)
    protein_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    portions: float = Field(default=1.0, gt=0)
    short_label: str = ""
    logged_at: datetime | None = None
    weight_g: float | None = Field(default=None, ge=0)
    alternative_sources: list[SourceEstimatePayload] = Field(default_factory=list)

    @property
    def totals(self) -> MacroProfile:
        return MacroProfile(
            calories=self.calories,
            protein_g=self.protein_g,
            fat_g=self.fat_g,
            carbs_g=self.carbs_g,
        )


class PortionAdjust(BaseModel):
    """Change in portion count, usually +1 or -1."""

    delta: float


class EntryUpdate(BaseModel):
    """Rename an entry and/or change its short label."""

    name: NonBlankStr | None = None
    short_label: str | None = None


class GoalsPayload(BaseModel):
    """Daily nutrition goals."""

    daily_calories: float = Field(ge=0)
    daily_protein_g: float = Field(ge=0)
    daily_fat_g: float = Field(ge=0)

    def to_domain(self) -> NutritionGoals:
        return NutritionGoals(
            daily_calories=self.daily_calories,
            daily_protein_g=self.daily_protein_g,
            daily_fat_g=self.daily_fat_g,
        )


class ProfilePayload(BaseModel):
    """Body profile used for recommendations."""

    age: int = Field(ge=0, le=150)
    gender: Gender
    weight_kg: float = Field(gt=0)
    body_fat_pct: float = Field(ge=0, le=100)
    height_cm: float = Field(gt=0)
    fitness_goal: FitnessGoal

    def to_domain(self) -> UserProfile:
        return UserProfile(
            age=self.age,
            gender=self.gender,
            weight_kg=self.weight_kg,
            body_fat_pct=self.body_fat_pct,
            height_cm=self.height_cm,
            fitness_goal=self.fitness_goal,
        )


class TextEstimateRequest(BaseModel):
    """Free-text food description to estimate."""

    query: NonBlankStr
