"""Domain models for logged food entries."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from nutrition_calculator.domain.nutrition import MacroProfile

SHORT_LABEL_LENGTH = 3


@dataclass(frozen=True)
class SourceEstimate:
    """Alternative macro estimate for a food from another source."""

    source: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float


@dataclass(frozen=True)
class FoodEntry:
    """A logged food occurrence with macros stored per portion."""

    id: UUID
    name: str
    short_label: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    logged_at: datetime
    portions: float = 1.0
    weight_g: float | None = None
    source_estimates: tuple[SourceEstimate, ...] = ()

    @property
    def actual_calories(self) -> float:
        return self.calories * self.portions

    @property
    def actual_protein_g(self) -> float:
        return self.protein_g * self.portions

    @property
    def actual_fat_g(self) -> float:
        return self.fat_g * self.portions

    @property
    def actual_carbs_g(self) -> float:
        return self.carbs_g * self.portions

    @property
    def actual(self) -> MacroProfile:
        """Macros for all eaten portions."""
        return MacroProfile(
            calories=self.actual_calories,
            protein_g=self.actual_protein_g,
            fat_g=self.actual_fat_g,
            carbs_g=self.actual_carbs_g,
        )


@dataclass(frozen=True)
class FoodEntryDraft:
    """Values for a new entry before the store assigns an id."""

    name: str
    macros: MacroProfile
    logged_at: datetime
    short_label: str = ""
    portions: float = 1.0
    weight_g: float | None = None
    source_estimates: tuple[SourceEstimate, ...] = field(default_factory=tuple)

    @property
    def resolved_short_label(self) -> str:
        """Short label, defaulting to the first characters of the name."""
        return self.short_label or self.name[:SHORT_LABEL_LENGTH]
