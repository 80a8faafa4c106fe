from __future__ import annotations

from .metrics import (
    compute_bmi,
    compute_bmr,
    compute_ideal_weight,
    compute_tdee,
    compute_test,
    round_half_away,
)
from .records import HealthTestResult

__all__ = [
    "compute_bmi",
    "compute_bmr",
    "compute_tdee",
    "compute_ideal_weight",
    "compute_test",
    "round_half_away",
    "HealthTestResult",
]
