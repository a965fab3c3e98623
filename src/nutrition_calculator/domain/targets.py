"""Domain models for nutrition goals and the user's body profile."""

from dataclasses import dataclass
from enum import Enum


class Gender(Enum):
    """Gender used to pick the BMR formula."""

    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class GoalCoefficients:
    """Per-goal multipliers used by the recommendation formula."""

    calorie_adjustment_factor: float
    protein_per_kg: float
    fat_share: float


class FitnessGoal(Enum):
    """Fitness objective that shapes the recommended goals."""

    BUILD_MUSCLE = "build_muscle"
    LOSE_FAT = "lose_fat"

    @property
    def coefficients(self) -> GoalCoefficients:
        return _GOAL_COEFFICIENTS[self]

    @property
    def calorie_adjustment_factor(self) -> float:
        return self.coefficients.calorie_adjustment_factor

    @property
    def protein_per_kg(self) -> float:
        return self.coefficients.protein_per_kg

    @property
    def fat_share(self) -> float:
        return self.coefficients.fat_share


_GOAL_COEFFICIENTS: dict[FitnessGoal, GoalCoefficients] = {
    FitnessGoal.BUILD_MUSCLE: GoalCoefficients(
        calorie_adjustment_factor=1.10, protein_per_kg=2.2, fat_share=0.30
    ),
    FitnessGoal.LOSE_FAT: GoalCoefficients(
        calorie_adjustment_factor=0.85, protein_per_kg=2.0, fat_share=0.25
    ),
}


@dataclass(frozen=True)
class NutritionGoals:
    """Daily nutrition targets."""

    daily_calories: float
    daily_protein_g: float
    daily_fat_g: float


@dataclass(frozen=True)
class UserProfile:
    """Body metrics and objective of the single app user."""

    age: int
    gender: Gender
    weight_kg: float
    body_fat_pct: float
    height_cm: float
    fitness_goal: FitnessGoal


DEFAULT_GOALS = NutritionGoals(daily_calories=2000, daily_protein_g=50, daily_fat_g=65)

DEFAULT_PROFILE = UserProfile(
    age=30,
    gender=Gender.MALE,
    weight_kg=70.0,
    body_fat_pct=15.0,
    height_cm=170.0,
    fitness_goal=FitnessGoal.BUILD_MUSCLE,
)


def parse_gender(raw: object) -> Gender:
    """Parse a stored gender value, falling back to male."""
    try:
        return Gender(raw)
    except ValueError:
        return Gender.MALE


def parse_fitness_goal(raw: object) -> FitnessGoal:
    """Parse a stored fitness goal, falling back to building muscle."""
    try:
        return FitnessGoal(raw)
    except ValueError:
        return FitnessGoal.BUILD_MUSCLE
