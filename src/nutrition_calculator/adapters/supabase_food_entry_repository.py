"""Supabase repository for logged food entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_calculator.domain.entries import (
    FoodEntry,
    FoodEntryDraft,
    SourceEstimate,
)
from nutrition_calculator.domain.errors import RecordStoreError
from nutrition_calculator.services.food_log import (
    FoodEntryRepository,
    latest_by_name,
    rank_by_frequency,
)

_TABLE = "food_entries"
_LIKE_SPECIAL = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_"})


@dataclass
class SupabaseFoodEntryRepository(FoodEntryRepository):
    """Supabase implementation for food entries."""

    client: Client
    page_size: int = 1000

    def list_entries(self, start: datetime, end: datetime) -> list[FoodEntry]:
        """Return entries logged in [start, end)."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def create_entry(self, draft: FoodEntryDraft) -> FoodEntry:
        """Insert an entry row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "name": draft.name,
                    "short_label": draft.resolved_short_label,
                    "calories": draft.macros.calories,
                    "protein_g": draft.macros.protein_g,
                    "fat_g": draft.macros.fat_g,
                    "carbs_g": draft.macros.carbs_g,
                    "logged_at": draft.logged_at.isoformat(),
                    "portions": draft.portions,
                    "weight_g": draft.weight_g,
                    "source_estimates": [
                        {
                            "source": estimate.source,
                            "calories": estimate.calories,
                            "protein_g": estimate.protein_g,
                            "fat_g": estimate.fat_g,
                            "carbs_g": estimate.carbs_g,
                        }
                        for estimate in draft.source_estimates
                    ],
                }
            )
            .execute()
        )
        if not response.data:
            raise RecordStoreError("Failed to create food entry")
        return _parse_entry(response.data[0])

    def update_portions(self, entry_id: UUID, portions: float) -> None:
        self._update(entry_id, {"portions": portions})

    def update_name(self, entry_id: UUID, name: str) -> None:
        self._update(entry_id, {"name": name})

    def update_short_label(self, entry_id: UUID, short_label: str) -> None:
        self._update(entry_id, {"short_label": short_label})

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry row."""
        self.client.table(_TABLE).delete().eq("id", str(entry_id)).execute()

    def search_by_name(self, query: str, limit: int) -> list[FoodEntry]:
        """Return the latest entry per name containing the query."""
        pattern = f"%{query.translate(_LIKE_SPECIAL)}%"
        return latest_by_name(self._select_all(name_pattern=pattern))[:limit]

    def top_frequent(self, limit: int) -> list[FoodEntry]:
        """Return the latest entry per name ranked by how often it was logged."""
        return rank_by_frequency(self._select_all(), limit)

    def _select_all(self, name_pattern: str | None = None) -> list[FoodEntry]:
        """Read every matching row, newest first, one page at a time."""
        entries: list[FoodEntry] = []
        offset = 0
        while True:
            query = self.client.table(_TABLE).select("*")
            if name_pattern is not None:
                query = query.ilike("name", name_pattern)
            response = (
                query.order("logged_at", desc=True)
                .order("id")
                .range(offset, offset + self.page_size - 1)
                .execute()
            )
            page = response.data or []
            entries.extend(_parse_entry(row) for row in page)
            if len(page) < self.page_size:
                return entries
            offset += self.page_size

    def _update(self, entry_id: UUID, payload: dict[str, object]) -> None:
        response = (
            self.client.table(_TABLE).update(payload).eq("id", str(entry_id)).execute()
        )
        if not response.data:
            raise RecordStoreError(f"Failed to update food entry {entry_id}")


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    """Parse a food entry row into a domain model."""
    weight = row.get("weight_g")
    return FoodEntry(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        short_label=str(row.get("short_label") or ""),
        calories=float(row.get("calories", 0.0)),
        protein_g=float(row.get("protein_g", 0.0)),
        fat_g=float(row.get("fat_g", 0.0)),
        carbs_g=float(row.get("carbs_g", 0.0)),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
        portions=float(row.get("portions") or 1.0),
        weight_g=float(weight) if isinstance(weight, int | float) else None,
        source_estimates=tuple(
            _parse_source_estimate(item) for item in row.get("source_estimates") or []
        ),
    )


def _parse_source_estimate(item: dict[str, object]) -> SourceEstimate:
    return SourceEstimate(
        source=str(item.get("source", "")),
        calories=float(item.get("calories", 0.0)),
        protein_g=float(item.get("protein_g", 0.0)),
        fat_g=float(item.get("fat_g", 0.0)),
        carbs_g=float(item.get("carbs_g", 0.0)),
    )
