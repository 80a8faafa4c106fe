from __future__ import annotations

from typing import Dict, Tuple


# BMI bands as (upper_bound_exclusive, label). Anything not below the last
# bound is "Obese".
BMI_BANDS: Tuple[Tuple[float, str], ...] = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
)
BMI_TOP_CATEGORY = "Obese"

BMR_CATEGORY = "Calculated"
IDEAL_WEIGHT_CATEGORY = "Ideal"

# Mifflin-St Jeor sex offsets (kcal/day).
BMR_SEX_OFFSET: Dict[str, float] = {
    "male": 5.0,
    "female": -161.0,
}

ACTIVITY_MULTIPLIERS: Dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}

# Robinson formula: (base_kg, kg_per_inch_over_five_feet).
ROBINSON: Dict[str, Tuple[float, float]] = {
    "male": (52.0, 1.9),
    "female": (49.0, 1.7),
}
CM_PER_INCH = 2.54
FIVE_FEET_IN = 60.0

# Decimal places kept in result_value, per test type.
RESULT_PRECISION: Dict[str, int] = {
    "bmi": 2,
    "bmr": 0,
    "tdee": 0,
    "ideal_weight": 1,
}

# Accepted ranges for form input, (min, max) inclusive. Only the form layer
# enforces these; the formulas accept any number.
FORM_RANGES: Dict[str, Tuple[float, float]] = {
    "height": (100.0, 250.0),
    "weight": (30.0, 300.0),
    "age": (10.0, 120.0),
}


def get_activity_multiplier(activity_level: str) -> float:
    try:
        return ACTIVITY_MULTIPLIERS[activity_level]
    except KeyError:
        raise ValueError(f"Unknown activity level: {activity_level!r}") from None
