from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .metrics import compute_test
from .records import (
    ACTIVITY_LEVELS,
    SEXES,
    TEST_TYPES,
    BMIInput,
    BMRInput,
    HealthTestInput,
    HealthTestResult,
    IdealWeightInput,
    TDEEInput,
)
from .thresholds import FORM_RANGES


REQUIRED_FIELDS: Dict[str, Tuple[str, ...]] = {
    "bmi": ("height", "weight"),
    "bmr": ("height", "weight", "age", "sex"),
    "tdee": ("height", "weight", "age", "sex", "activity_level"),
    "ideal_weight": ("height", "sex"),
}


class FormValidationError(ValueError):
    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name


def parse_number(text: object, field_name: str = "value") -> float:
    raw = str(text if text is not None else "").strip().replace(",", ".")
    if not raw:
        raise FormValidationError(field_name, "is required.")
    try:
        value = float(raw)
    except ValueError:
        raise FormValidationError(field_name, f"must be a number, got {raw!r}.") from None
    if not math.isfinite(value):
        raise FormValidationError(field_name, "must be a finite number.")
    return value


def parse_int(text: object, field_name: str = "value") -> int:
    value = parse_number(text, field_name)
    if not value.is_integer():
        raise FormValidationError(field_name, "must be a whole number.")
    return int(value)


def check_range(field_name: str, value: float) -> float:
    low, high = FORM_RANGES[field_name]
    if value < low or value > high:
        raise FormValidationError(field_name, f"must be between {low:g} and {high:g}, got {value:g}.")
    return value


def ensure_finite(result: HealthTestResult) -> HealthTestResult:
    if not math.isfinite(result.result_value):
        raise FormValidationError(result.test_type, "result is not a finite number.")
    return result


@dataclass
class HealthForm:
    """Form state for one health test: pick a test, fill fields, submit.

    Raw field values are kept as strings the way a text input holds them.
    """

    active_test: Optional[str] = None
    height: str = ""
    weight: str = ""
    age: str = ""
    sex: str = "male"
    activity_level: str = "moderate"
    enforce_ranges: bool = True
    _last_result: Optional[HealthTestResult] = field(default=None, init=False, repr=False)

    def select(self, test_type: Optional[str]) -> None:
        if test_type is not None and test_type not in TEST_TYPES:
            raise ValueError(f"Unknown test type: {test_type!r}")
        self.active_test = test_type

    def required_fields(self) -> Tuple[str, ...]:
        if self.active_test is None:
            return ()
        return REQUIRED_FIELDS[self.active_test]

    def set_field(self, name: str, value: object) -> None:
        if name not in ("height", "weight", "age", "sex", "activity_level"):
            raise KeyError(f"Unknown form field: {name}")
        text = "" if value is None else str(value).strip()
        if name == "sex" and text not in SEXES:
            raise FormValidationError("sex", f"must be one of {', '.join(SEXES)}.")
        if name == "activity_level" and text not in ACTIVITY_LEVELS:
            raise FormValidationError("activity_level", f"must be one of {', '.join(ACTIVITY_LEVELS)}.")
        setattr(self, name, text)

    def _number(self, name: str) -> float:
        value = parse_number(getattr(self, name), name)
        return check_range(name, value) if self.enforce_ranges else value

    def _age(self) -> int:
        value = parse_int(self.age, "age")
        if self.enforce_ranges:
            check_range("age", value)
        return value

    def build_input(self) -> HealthTestInput:
        test_type = self.active_test
        if test_type is None:
            raise FormValidationError("test_type", "no test selected.")
        if test_type == "bmi":
            return BMIInput(height_cm=self._number("height"), weight_kg=self._number("weight"))
        if test_type == "bmr":
            return BMRInput(
                height_cm=self._number("height"),
                weight_kg=self._number("weight"),
                age_years=self._age(),
                sex=self.sex,  # type: ignore[arg-type]
            )
        if test_type == "tdee":
            return TDEEInput(
                height_cm=self._number("height"),
                weight_kg=self._number("weight"),
                age_years=self._age(),
                sex=self.sex,  # type: ignore[arg-type]
                activity_level=self.activity_level,  # type: ignore[arg-type]
            )
        return IdealWeightInput(height_cm=self._number("height"), sex=self.sex)  # type: ignore[arg-type]

    def submit(self) -> HealthTestResult:
        result = compute_test(self.build_input())
        self._last_result = result
        self.reset()
        return result

    def reset(self) -> None:
        # Sex and activity level keep their last choice.
        self.height = ""
        self.weight = ""
        self.age = ""
        self.active_test = None

    @property
    def last_result(self) -> Optional[HealthTestResult]:
        return self._last_result
