"""Body-metric calculators: BMI, BMR, TDEE and ideal weight.

Every function here is pure. Inputs are not range-checked; out-of-range or
degenerate numbers produce whatever the formula gives (a zero height yields
an infinite or NaN BMI). Validation belongs to :mod:`foodcoach.health.forms`.
"""
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import numpy as np

from .records import (
    BMIInput,
    BMRInput,
    HealthTestInput,
    HealthTestResult,
    IdealWeightInput,
    TDEEInput,
)
from .thresholds import (
    BMI_BANDS,
    BMI_TOP_CATEGORY,
    BMR_CATEGORY,
    BMR_SEX_OFFSET,
    CM_PER_INCH,
    FIVE_FEET_IN,
    IDEAL_WEIGHT_CATEGORY,
    RESULT_PRECISION,
    ROBINSON,
    get_activity_multiplier,
)


def round_half_away(value: float, places: int) -> float:
    """Round to ``places`` decimals, ties away from zero.

    The exact binary value of the float is rounded, so ``1.005`` (stored
    just below the tie) goes to ``1.0`` while ``1617.5`` goes to ``1618``.
    NaN and infinities pass through.
    """
    value = float(value)
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    try:
        rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # Too many digits for the context; the value has no fractional part
        # at that magnitude anyway.
        return value
    return float(rounded)


def _divide(numerator: float, denominator: float) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(np.float64(numerator), np.float64(denominator)))


def _sex_key(sex: str, table: dict) -> str:
    if sex not in table:
        raise ValueError(f"sex must be 'male' or 'female', got {sex!r}")
    return sex


def body_mass_index(height_cm: float, weight_kg: float) -> float:
    height_m = float(height_cm) / 100.0
    return _divide(float(weight_kg), height_m * height_m)


def bmi_category(bmi: float) -> str:
    for upper, label in BMI_BANDS:
        if bmi < upper:
            return label
    # NaN compares false everywhere and lands here too.
    return BMI_TOP_CATEGORY


def basal_metabolic_rate(height_cm: float, weight_kg: float, age_years: int, sex: str) -> float:
    """Unrounded Mifflin-St Jeor BMR in kcal/day."""
    offset = BMR_SEX_OFFSET[_sex_key(sex, BMR_SEX_OFFSET)]
    return 10 * float(weight_kg) + 6.25 * float(height_cm) - 5 * int(age_years) + offset


def robinson_ideal_weight(height_cm: float, sex: str) -> float:
    base, per_inch = ROBINSON[_sex_key(sex, ROBINSON)]
    height_in = float(height_cm) / CM_PER_INCH
    return base + per_inch * (height_in - FIVE_FEET_IN)


def compute_bmi(height_cm: float, weight_kg: float) -> HealthTestResult:
    inputs = BMIInput(height_cm=float(height_cm), weight_kg=float(weight_kg))
    bmi = body_mass_index(inputs.height_cm, inputs.weight_kg)
    return HealthTestResult(
        test_type="bmi",
        test_data=inputs.to_test_data(),
        result_value=round_half_away(bmi, RESULT_PRECISION["bmi"]),
        # Classify the raw value, not the rounded one.
        result_category=bmi_category(bmi),
    )


def compute_bmr(height_cm: float, weight_kg: float, age_years: int, sex: str) -> HealthTestResult:
    inputs = BMRInput(
        height_cm=float(height_cm),
        weight_kg=float(weight_kg),
        age_years=int(age_years),
        sex=sex,  # type: ignore[arg-type]
    )
    bmr = basal_metabolic_rate(inputs.height_cm, inputs.weight_kg, inputs.age_years, inputs.sex)
    return HealthTestResult(
        test_type="bmr",
        test_data=inputs.to_test_data(),
        result_value=round_half_away(bmr, RESULT_PRECISION["bmr"]),
        result_category=BMR_CATEGORY,
    )


def compute_tdee(
    height_cm: float,
    weight_kg: float,
    age_years: int,
    sex: str,
    activity_level: str,
) -> HealthTestResult:
    inputs = TDEEInput(
        height_cm=float(height_cm),
        weight_kg=float(weight_kg),
        age_years=int(age_years),
        sex=sex,  # type: ignore[arg-type]
        activity_level=activity_level,  # type: ignore[arg-type]
    )
    multiplier = get_activity_multiplier(inputs.activity_level)
    bmr = basal_metabolic_rate(inputs.height_cm, inputs.weight_kg, inputs.age_years, inputs.sex)
    tdee = bmr * multiplier
    return HealthTestResult(
        test_type="tdee",
        test_data=inputs.to_test_data(),
        result_value=round_half_away(tdee, RESULT_PRECISION["tdee"]),
        result_category=inputs.activity_level,
    )


def compute_ideal_weight(height_cm: float, sex: str) -> HealthTestResult:
    inputs = IdealWeightInput(height_cm=float(height_cm), sex=sex)  # type: ignore[arg-type]
    ideal = robinson_ideal_weight(inputs.height_cm, inputs.sex)
    return HealthTestResult(
        test_type="ideal_weight",
        test_data=inputs.to_test_data(),
        result_value=round_half_away(ideal, RESULT_PRECISION["ideal_weight"]),
        result_category=IDEAL_WEIGHT_CATEGORY,
    )


def compute_test(inputs: HealthTestInput) -> HealthTestResult:
    if isinstance(inputs, BMIInput):
        return compute_bmi(inputs.height_cm, inputs.weight_kg)
    if isinstance(inputs, BMRInput):
        return compute_bmr(inputs.height_cm, inputs.weight_kg, inputs.age_years, inputs.sex)
    if isinstance(inputs, TDEEInput):
        return compute_tdee(
            inputs.height_cm,
            inputs.weight_kg,
            inputs.age_years,
            inputs.sex,
            inputs.activity_level,
        )
    if isinstance(inputs, IdealWeightInput):
        return compute_ideal_weight(inputs.height_cm, inputs.sex)
    raise TypeError(f"Unsupported health test input: {type(inputs).__name__}")
