"""Supabase repository for the active nutrition goals."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_calculator.domain.errors import RecordStoreError
from nutrition_calculator.domain.targets import NutritionGoals
from nutrition_calculator.services.targets import GoalsRepository

_TABLE = "nutrition_goals"


@dataclass
class SupabaseGoalsRepository(GoalsRepository):
    """Supabase implementation for nutrition goals."""

    client: Client

    def get_goals(self) -> NutritionGoals | None:
        """Return the most recently saved goals."""
        response = (
            self.client.table(_TABLE)
            .select("daily_calories, daily_protein_g, daily_fat_g")
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return NutritionGoals(
            daily_calories=float(row.get("daily_calories", 0.0)),
            daily_protein_g=float(row.get("daily_protein_g", 0.0)),
            daily_fat_g=float(row.get("daily_fat_g", 0.0)),
        )

    def save_goals(self, goals: NutritionGoals) -> None:
        """Store the given goals and drop older rows once it is saved."""
        created_at = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "daily_calories": goals.daily_calories,
                    "daily_protein_g": goals.daily_protein_g,
                    "daily_fat_g": goals.daily_fat_g,
                    "created_at": created_at,
                }
            )
            .execute()
        )
        if not response.data:
            raise RecordStoreError("Failed to save nutrition goals")
        self.client.table(_TABLE).delete().lt("created_at", created_at).execute()
