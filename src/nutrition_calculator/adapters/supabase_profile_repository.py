"""Supabase repository for the user profile."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_calculator.domain.errors import RecordStoreError
from nutrition_calculator.domain.targets import (
    UserProfile,
    parse_fitness_goal,
    parse_gender,
)
from nutrition_calculator.services.targets import ProfileRepository

_TABLE = "user_profiles"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for the user profile."""

    client: Client

    def get_profile(self) -> UserProfile | None:
        """Return the most recently saved profile."""
        response = (
            self.client.table(_TABLE)
            .select(
                "age, gender, weight_kg, body_fat_pct, height_cm, fitness_goal"
            )
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return UserProfile(
            age=int(row.get("age", 0)),
            gender=parse_gender(row.get("gender")),
            weight_kg=float(row.get("weight_kg", 0.0)),
            body_fat_pct=float(row.get("body_fat_pct", 0.0)),
            height_cm=float(row.get("height_cm", 0.0)),
            fitness_goal=parse_fitness_goal(row.get("fitness_goal")),
        )

    def save_profile(self, profile: UserProfile) -> None:
        """Store the given profile and drop older rows once it is saved."""
        created_at = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "age": profile.age,
                    "gender": profile.gender.value,
                    "weight_kg": profile.weight_kg,
                    "body_fat_pct": profile.body_fat_pct,
                    "height_cm": profile.height_cm,
                    "fitness_goal": profile.fitness_goal.value,
                    "created_at": created_at,
                }
            )
            .execute()
        )
        if not response.data:
            raise RecordStoreError("Failed to save user profile")
        self.client.table(_TABLE).delete().lt("created_at", created_at).execute()
