from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Union

Sex = Literal["male", "female"]
ActivityLevel = Literal["sedentary", "light", "moderate", "active", "very_active"]
TestType = Literal["bmi", "bmr", "tdee", "ideal_weight"]

SEXES = ("male", "female")
ACTIVITY_LEVELS = ("sedentary", "light", "moderate", "active", "very_active")
TEST_TYPES = ("bmi", "bmr", "tdee", "ideal_weight")


@dataclass(frozen=True)
class BMIInput:
    height_cm: float
    weight_kg: float
    test_type: TestType = field(default="bmi", init=False)

    def to_test_data(self) -> Dict[str, Any]:
        # Age and sex are not echoed for BMI even when the caller has them.
        return {"height": self.height_cm, "weight": self.weight_kg}


@dataclass(frozen=True)
class BMRInput:
    height_cm: float
    weight_kg: float
    age_years: int
    sex: Sex
    test_type: TestType = field(default="bmr", init=False)

    def to_test_data(self) -> Dict[str, Any]:
        return {
            "height": self.height_cm,
            "weight": self.weight_kg,
            "age": self.age_years,
            "gender": self.sex,
        }


@dataclass(frozen=True)
class TDEEInput:
    height_cm: float
    weight_kg: float
    age_years: int
    sex: Sex
    activity_level: ActivityLevel
    test_type: TestType = field(default="tdee", init=False)

    def to_test_data(self) -> Dict[str, Any]:
        return {
            "height": self.height_cm,
            "weight": self.weight_kg,
            "age": self.age_years,
            "gender": self.sex,
            "activity_level": self.activity_level,
        }


@dataclass(frozen=True)
class IdealWeightInput:
    height_cm: float
    sex: Sex
    test_type: TestType = field(default="ideal_weight", init=False)

    def to_test_data(self) -> Dict[str, Any]:
        return {"height": self.height_cm, "gender": self.sex}


HealthTestInput = Union[BMIInput, BMRInput, TDEEInput, IdealWeightInput]


def input_from_test_data(test_type: str, test_data: Mapping[str, Any]) -> HealthTestInput:
    """Rebuild the typed input record from a persisted ``test_data`` echo."""
    if test_type == "bmi":
        return BMIInput(height_cm=float(test_data["height"]), weight_kg=float(test_data["weight"]))
    if test_type == "bmr":
        return BMRInput(
            height_cm=float(test_data["height"]),
            weight_kg=float(test_data["weight"]),
            age_years=int(test_data["age"]),
            sex=str(test_data["gender"]),  # type: ignore[arg-type]
        )
    if test_type == "tdee":
        return TDEEInput(
            height_cm=float(test_data["height"]),
            weight_kg=float(test_data["weight"]),
            age_years=int(test_data["age"]),
            sex=str(test_data["gender"]),  # type: ignore[arg-type]
            activity_level=str(test_data["activity_level"]),  # type: ignore[arg-type]
        )
    if test_type == "ideal_weight":
        return IdealWeightInput(
            height_cm=float(test_data["height"]),
            sex=str(test_data["gender"]),  # type: ignore[arg-type]
        )
    raise ValueError(f"Unknown test type: {test_type!r}")


@dataclass(frozen=True)
class HealthTestResult:
    test_type: TestType
    test_data: Dict[str, Any]
    result_value: float
    result_category: str

    def to_record(self) -> Dict[str, Any]:
        """Return the record shape the persistence backend stores."""
        return {
            "test_type": self.test_type,
            "test_data": dict(self.test_data),
            "result_value": self.result_value,
            "result_category": self.result_category,
        }

    @staticmethod
    def from_record(data: Mapping[str, Any]) -> "HealthTestResult":
        test_type = str(data.get("test_type", ""))
        if test_type not in TEST_TYPES:
            raise ValueError(f"Unknown test type: {test_type!r}")
        test_data = data.get("test_data") or {}
        if not isinstance(test_data, Mapping):
            raise ValueError("test_data must be an object.")
        return HealthTestResult(
            test_type=test_type,  # type: ignore[arg-type]
            test_data=dict(test_data),
            result_value=float(data["result_value"]),
            result_category=str(data.get("result_category", "")),
        )
