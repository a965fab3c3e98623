"""Food logging service: entries, daily summaries and quick selection."""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_calculator.domain.entries import (
    FoodEntry,
    FoodEntryDraft,
    SourceEstimate,
)
from nutrition_calculator.domain.errors import (
    EntryNotFoundError,
    PortionEditNotAllowedError,
)
from nutrition_calculator.domain.nutrition import MacroProfile
from nutrition_calculator.domain.summary import DayOverview
from nutrition_calculator.domain.targets import NutritionGoals
from nutrition_calculator.services import aggregation
from nutrition_calculator.services.targets import TargetsService

_logger = logging.getLogger(__name__)

MAX_HISTORY_DAYS = 366
MAX_RESULT_LIMIT = 100


class FoodEntryRepository(Protocol):
    """Persistence interface for logged food entries."""

    def list_entries(self, start: datetime, end: datetime) -> list[FoodEntry]:
        """Return entries logged in [start, end), oldest first."""

    def get_entry(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id, if present."""

    def create_entry(self, draft: FoodEntryDraft) -> FoodEntry:
        """Create an entry and return it."""

    def update_portions(self, entry_id: UUID, portions: float) -> None:
        """Set an entry's portion count."""

    def update_name(self, entry_id: UUID, name: str) -> None:
        """Rename an entry."""

    def update_short_label(self, entry_id: UUID, short_label: str) -> None:
        """Change an entry's short label."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry."""

    def search_by_name(self, query: str, limit: int) -> list[FoodEntry]:
        """Return the latest entry per matching name."""

    def top_frequent(self, limit: int) -> list[FoodEntry]:
        """Return the latest entry per name, most logged names first."""


@dataclass
class FoodLogService:
    """Application service around the food record store."""

    repository: FoodEntryRepository
    targets_service: TargetsService
    timezone_name: str = "UTC"
    search_limit: int = 5
    quick_select_limit: int = 20
    history_days: int = 7

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def today(self) -> date:
        """Return today's date in the configured timezone."""
        return datetime.now(tz=self.tz).date()

    def list_entries(self, day: date) -> list[FoodEntry]:
        """Return the entries logged on a local calendar day."""
        start, end = aggregation.day_bounds(day, self.tz)
        try:
            return self.repository.list_entries(start, end)
        except Exception:
            _logger.exception("Failed to list food entries for %s", day)
            return []

    def get_day(self, day: date) -> DayOverview:
        """Return entries, totals and goal progress for a day."""
        entries = self.list_entries(day)
        return self._overview(day, entries, self.targets_service.get_goals())

    def get_today(self) -> DayOverview:
        return self.get_day(self.today())

    def recent_days(self, count: int | None = None) -> list[DayOverview]:
        """Return overviews for the last days ending today, oldest first."""
        days = _bounded(count, self.history_days, MAX_HISTORY_DAYS)
        today = self.today()
        first = today - timedelta(days=days - 1)
        start, _ = aggregation.day_bounds(first, self.tz)
        _, end = aggregation.day_bounds(today, self.tz)
        try:
            entries = self.repository.list_entries(start, end)
        except Exception:
            _logger.exception("Failed to list food entries from %s", first)
            entries = []
        by_day: dict[date, list[FoodEntry]] = {}
        for entry in entries:
            entry_day = aggregation.local_day(entry.logged_at, self.tz)
            by_day.setdefault(entry_day, []).append(entry)
        goals = self.targets_service.get_goals()
        return [
            self._overview(day, by_day.get(day, []), goals)
            for day in (first + timedelta(days=offset) for offset in range(days))
        ]

    def create_entry(  # noqa: PLR0913
        self,
        name: str,
        totals: MacroProfile,
        *,
        portions: float = 1.0,
        short_label: str = "",
        logged_at: datetime | None = None,
        weight_g: float | None = None,
        source_estimates: Iterable[SourceEstimate] = (),
    ) -> FoodEntry:
        """Log a food from the macros of all eaten portions.

        The macros are stored per portion and the stored portion count starts
        at one. Naive timestamps are read in the configured timezone.
        """
        if logged_at is None:
            logged_at = datetime.now(tz=UTC)
        elif logged_at.tzinfo is None:
            logged_at = logged_at.replace(tzinfo=self.tz)
        draft = FoodEntryDraft(
            name=name,
            macros=aggregation.per_portion(totals, portions),
            logged_at=logged_at,
            short_label=short_label,
            portions=aggregation.MIN_PORTIONS,
            weight_g=weight_g,
            source_estimates=tuple(source_estimates),
        )
        entry = self.repository.create_entry(draft)
        _logger.info("Logged food entry %s (%s)", entry.id, entry.name)
        return entry

    def adjust_portions(self, entry_id: UUID, delta: float) -> FoodEntry:
        """Change the portions of an entry logged today."""
        entry = self._require(entry_id)
        if aggregation.local_day(entry.logged_at, self.tz) != self.today():
            raise PortionEditNotAllowedError(entry_id)
        portions = aggregation.adjust_portions(entry, delta)
        self.repository.update_portions(entry_id, portions)
        return self._require(entry_id)

    def rename(
        self,
        entry_id: UUID,
        *,
        name: str | None = None,
        short_label: str | None = None,
    ) -> FoodEntry:
        """Update an entry's name and/or short label."""
        self._require(entry_id)
        if name is not None:
            self.repository.update_name(entry_id, name)
        if short_label is not None:
            self.repository.update_short_label(entry_id, short_label)
        return self._require(entry_id)

    def delete_entry(self, entry_id: UUID) -> None:
        self._require(entry_id)
        self.repository.delete_entry(entry_id)
        _logger.info("Deleted food entry %s", entry_id)

    def search(self, query: str | None, limit: int | None = None) -> list[FoodEntry]:
        """Search previously logged foods by name."""
        cleaned = (query or "").strip()
        if not cleaned:
            return []
        try:
            return self.repository.search_by_name(
                cleaned, _bounded(limit, self.search_limit, MAX_RESULT_LIMIT)
            )
        except Exception:
            _logger.exception("Failed to search food entries for %r", cleaned)
            return []

    def top_frequent(self, limit: int | None = None) -> list[FoodEntry]:
        """Return the most frequently logged foods for quick selection."""
        try:
            return self.repository.top_frequent(
                _bounded(limit, self.quick_select_limit, MAX_RESULT_LIMIT)
            )
        except Exception:
            _logger.exception("Failed to load frequent food entries")
            return []

    def _require(self, entry_id: UUID) -> FoodEntry:
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return entry

    def _overview(
        self, day: date, entries: list[FoodEntry], goals: NutritionGoals
    ) -> DayOverview:
        summary = aggregation.summarize(entries, day)
        return DayOverview(
            day=day,
            entries=entries,
            summary=summary,
            progress=aggregation.goal_progress(summary, goals),
        )


def _bounded(value: int | None, default: int, maximum: int) -> int:
    """Clamp an optional count to [1, maximum], using the default when unset."""
    if value is None:
        value = default
    return min(max(value, 1), maximum)


def latest_by_name(entries: Iterable[FoodEntry]) -> list[FoodEntry]:
    """Keep the most recently logged entry for each name, newest first."""
    latest: dict[str, FoodEntry] = {}
    for entry in entries:
        current = latest.get(entry.name)
        if current is None or entry.logged_at > current.logged_at:
            latest[entry.name] = entry
    return sorted(latest.values(), key=lambda entry: entry.logged_at, reverse=True)


def rank_by_frequency(entries: Iterable[FoodEntry], limit: int) -> list[FoodEntry]:
    """Return the latest entry per name ordered by how often the name was logged."""
    materialized = list(entries)
    counts = Counter(entry.name for entry in materialized)
    ranked = sorted(
        latest_by_name(materialized),
        key=lambda entry: counts[entry.name],
        reverse=True,
    )
    return ranked[:limit]
