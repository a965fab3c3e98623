"""Domain models for daily totals and goal progress."""

from dataclasses import dataclass
from datetime import date

from nutrition_calculator.domain.entries import FoodEntry


@dataclass(frozen=True)
class DailySummary:
    """Totals of all entries logged on one calendar day."""

    day: date
    total_calories: float
    total_protein_g: float
    total_fat_g: float
    total_carbs_g: float
    food_count: int

    @property
    def is_empty(self) -> bool:
        return self.food_count == 0


@dataclass(frozen=True)
class GoalProgress:
    """Comparison of a day's totals against the active goals."""

    calories_progress: float
    protein_progress: float
    fat_progress: float
    calories_remaining: float
    protein_remaining: float
    fat_remaining: float
    calories_percentage: float
    protein_percentage: float
    fat_percentage: float


@dataclass(frozen=True)
class DayOverview:
    """Entries, totals and progress for a single day."""

    day: date
    entries: list[FoodEntry]
    summary: DailySummary
    progress: GoalProgress
