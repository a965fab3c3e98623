"""Recommended daily goals derived from the user's body profile.

BMR uses the revised Harris-Benedict equation, TDEE a fixed light-activity
multiplier, and the fitness goal adjusts calories, protein and fat share.
"""

from nutrition_calculator.domain.targets import Gender, NutritionGoals, UserProfile

LIGHT_ACTIVITY_MULTIPLIER = 1.375
KCAL_PER_GRAM_FAT = 9


def basal_metabolic_rate(profile: UserProfile) -> float:
    """Return BMR in kcal/day."""
    if profile.gender is Gender.FEMALE:
        return (
            447.593
            + 9.247 * profile.weight_kg
            + 3.098 * profile.height_cm
            - 4.330 * profile.age
        )
    return (
        88.362
        + 13.397 * profile.weight_kg
        + 4.799 * profile.height_cm
        - 5.677 * profile.age
    )


def total_daily_energy_expenditure(profile: UserProfile) -> float:
    """Return TDEE in kcal/day."""
    return basal_metabolic_rate(profile) * LIGHT_ACTIVITY_MULTIPLIER


def adjusted_calories(profile: UserProfile) -> float:
    """Return the calorie target for the user's fitness goal."""
    return (
        total_daily_energy_expenditure(profile)
        * profile.fitness_goal.calorie_adjustment_factor
    )


def protein_goal(profile: UserProfile) -> float:
    """Return the daily protein target in grams."""
    return profile.weight_kg * profile.fitness_goal.protein_per_kg


def fat_goal(profile: UserProfile) -> float:
    """Return the daily fat target in grams."""
    calories = adjusted_calories(profile)
    return calories * profile.fitness_goal.fat_share / KCAL_PER_GRAM_FAT


def recommended_goals(profile: UserProfile) -> NutritionGoals:
    """Return recommended daily goals for a profile."""
    return NutritionGoals(
        daily_calories=adjusted_calories(profile),
        daily_protein_g=protein_goal(profile),
        daily_fat_g=fat_goal(profile),
    )


def body_mass_index(profile: UserProfile) -> float:
    height_m = profile.height_cm / 100
    return profile.weight_kg / (height_m * height_m)


def lean_body_mass(profile: UserProfile) -> float:
    return profile.weight_kg * (1 - profile.body_fat_pct / 100)
