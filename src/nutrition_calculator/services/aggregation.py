"""Daily aggregation of food entries and goal progress."""

from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from nutrition_calculator.domain.entries import FoodEntry
from nutrition_calculator.domain.nutrition import MacroProfile
from nutrition_calculator.domain.summary import DailySummary, GoalProgress
from nutrition_calculator.domain.targets import NutritionGoals

MIN_PORTIONS = 1.0


def summarize(entries: Iterable[FoodEntry], day: date) -> DailySummary:
    """Sum the eaten macros of a day's entries."""
    total = DailySummary(
        day=day,
        total_calories=0.0,
        total_protein_g=0.0,
        total_fat_g=0.0,
        total_carbs_g=0.0,
        food_count=0,
    )
    for entry in entries:
        total = DailySummary(
            day=day,
            total_calories=total.total_calories + entry.actual_calories,
            total_protein_g=total.total_protein_g + entry.actual_protein_g,
            total_fat_g=total.total_fat_g + entry.actual_fat_g,
            total_carbs_g=total.total_carbs_g + entry.actual_carbs_g,
            food_count=total.food_count + 1,
        )
    return total


def goal_progress(summary: DailySummary, goals: NutritionGoals) -> GoalProgress:
    """Compare a day's totals with the daily goals."""
    return GoalProgress(
        calories_progress=summary.total_calories,
        protein_progress=summary.total_protein_g,
        fat_progress=summary.total_fat_g,
        calories_remaining=goals.daily_calories - summary.total_calories,
        protein_remaining=goals.daily_protein_g - summary.total_protein_g,
        fat_remaining=goals.daily_fat_g - summary.total_fat_g,
        calories_percentage=_percentage(summary.total_calories, goals.daily_calories),
        protein_percentage=_percentage(summary.total_protein_g, goals.daily_protein_g),
        fat_percentage=_percentage(summary.total_fat_g, goals.daily_fat_g),
    )


def adjust_portions(entry: FoodEntry, delta: float) -> float:
    """Return the entry's portion count changed by delta, never below one."""
    return max(MIN_PORTIONS, entry.portions + delta)


def per_portion(raw: MacroProfile, portions: float) -> MacroProfile:
    """Split raw totals for several portions into one portion's macros."""
    divisor = portions if portions > 0 else MIN_PORTIONS
    return raw.scaled(1 / divisor)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Return the UTC instants of local midnight and the next local midnight."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)


def local_day(moment: datetime, tz: ZoneInfo) -> date:
    """Return the calendar day of an instant in the given zone."""
    return moment.astimezone(tz).date()


def _percentage(progress: float, goal: float) -> float:
    if goal <= 0:
        return 0.0
    return progress / goal * 100
