"""Nutrition goals and user profile service."""

import logging
from dataclasses import dataclass
from typing import Protocol

from nutrition_calculator.domain.targets import (
    DEFAULT_GOALS,
    DEFAULT_PROFILE,
    NutritionGoals,
    UserProfile,
)
from nutrition_calculator.services.recommendations import recommended_goals

_logger = logging.getLogger(__name__)


class GoalsRepository(Protocol):
    """Persistence interface for the active nutrition goals."""

    def get_goals(self) -> NutritionGoals | None:
        """Return the most recently saved goals, if any."""

    def save_goals(self, goals: NutritionGoals) -> None:
        """Replace the active goals."""


class ProfileRepository(Protocol):
    """Persistence interface for the active user profile."""

    def get_profile(self) -> UserProfile | None:
        """Return the most recently saved profile, if any."""

    def save_profile(self, profile: UserProfile) -> None:
        """Replace the active profile."""


@dataclass
class TargetsService:
    """Service for goals, the body profile and goal recommendations."""

    goals_repository: GoalsRepository
    profile_repository: ProfileRepository

    def get_goals(self) -> NutritionGoals:
        """Return the active goals or the defaults."""
        try:
            goals = self.goals_repository.get_goals()
        except Exception:
            _logger.exception("Failed to load nutrition goals, using defaults")
            return DEFAULT_GOALS
        return goals or DEFAULT_GOALS

    def save_goals(self, goals: NutritionGoals) -> None:
        """Persist new goals."""
        self.goals_repository.save_goals(goals)
        _logger.info(
            "Saved goals: calories=%.0f protein=%.1f fat=%.1f",
            goals.daily_calories,
            goals.daily_protein_g,
            goals.daily_fat_g,
        )

    def get_profile(self) -> UserProfile:
        """Return the active profile or the default one."""
        try:
            profile = self.profile_repository.get_profile()
        except Exception:
            _logger.exception("Failed to load user profile, using defaults")
            return DEFAULT_PROFILE
        return profile or DEFAULT_PROFILE

    def save_profile(self, profile: UserProfile) -> None:
        """Persist a new profile."""
        self.profile_repository.save_profile(profile)

    def get_recommended_goals(self) -> NutritionGoals:
        """Return recommended goals for the saved profile."""
        return recommended_goals(self.get_profile())
