from __future__ import annotations

import json
import math
import unittest

from foodcoach.health.metrics import (
    basal_metabolic_rate,
    bmi_category,
    body_mass_index,
    compute_bmi,
    compute_bmr,
    compute_ideal_weight,
    compute_tdee,
    compute_test,
    round_half_away,
)
from foodcoach.health.records import (
    HealthTestResult,
    IdealWeightInput,
    TDEEInput,
    input_from_test_data,
)
from foodcoach.health.thresholds import ACTIVITY_MULTIPLIERS


class BMITests(unittest.TestCase):
    def test_typical_adult(self) -> None:
        result = compute_bmi(170, 70)
        self.assertEqual(result.test_type, "bmi")
        self.assertEqual(result.result_value, 24.22)
        self.assertEqual(result.result_category, "Normal")
        self.assertEqual(result.test_data, {"height": 170.0, "weight": 70.0})

    def test_lower_boundary_belongs_to_normal(self) -> None:
        self.assertEqual(compute_bmi(170, 53.465).result_category, "Normal")
        self.assertEqual(compute_bmi(170, 53.465).result_value, 18.5)
        # 74 / 2.0^2 is exactly 18.5.
        self.assertEqual(compute_bmi(200, 74).result_category, "Normal")

    def test_upper_boundary_belongs_to_obese(self) -> None:
        result = compute_bmi(170, 86.7)
        self.assertEqual(result.result_category, "Obese")
        self.assertEqual(result.result_value, 30.0)
        self.assertEqual(compute_bmi(200, 120).result_category, "Obese")

    def test_bands(self) -> None:
        self.assertEqual(compute_bmi(180, 50).result_category, "Underweight")
        self.assertEqual(compute_bmi(180, 90).result_category, "Overweight")
        self.assertEqual(compute_bmi(160, 100).result_category, "Obese")
        self.assertEqual(bmi_category(24.999), "Normal")
        self.assertEqual(bmi_category(25.0), "Overweight")

    def test_monotonic_in_weight_and_height(self) -> None:
        by_weight = [body_mass_index(170, w) for w in range(40, 130, 5)]
        self.assertEqual(by_weight, sorted(by_weight))
        self.assertEqual(len(set(by_weight)), len(by_weight))
        by_height = [body_mass_index(h, 70) for h in range(120, 230, 5)]
        self.assertEqual(by_height, sorted(by_height, reverse=True))

    def test_zero_height_does_not_raise(self) -> None:
        result = compute_bmi(0, 70)
        self.assertTrue(math.isinf(result.result_value))
        self.assertEqual(result.result_category, "Obese")
        nan_result = compute_bmi(0, 0)
        self.assertTrue(math.isnan(nan_result.result_value))
        self.assertEqual(nan_result.result_category, "Obese")

    def test_out_of_range_input_is_not_rejected(self) -> None:
        result = compute_bmi(-170, 70)
        self.assertEqual(result.result_value, 24.22)


class BMRTests(unittest.TestCase):
    def test_male(self) -> None:
        result = compute_bmr(170, 70, 30, "male")
        self.assertEqual(result.result_value, 1618)
        self.assertEqual(result.result_category, "Calculated")
        self.assertEqual(result.test_data, {"height": 170.0, "weight": 70.0, "age": 30, "gender": "male"})

    def test_female(self) -> None:
        self.assertEqual(compute_bmr(170, 70, 30, "female").result_value, 1452)

    def test_unknown_sex_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            compute_bmr(170, 70, 30, "other")


class TDEETests(unittest.TestCase):
    def test_moderate_male(self) -> None:
        result = compute_tdee(170, 70, 30, "male", "moderate")
        self.assertEqual(result.result_value, 2507)
        self.assertEqual(result.result_category, "moderate")
        self.assertEqual(result.test_data["activity_level"], "moderate")

    def test_sedentary_female(self) -> None:
        self.assertEqual(compute_tdee(170, 70, 30, "female", "sedentary").result_value, 1742)

    def test_uses_same_bmr_as_bmr_calculator(self) -> None:
        bmr = basal_metabolic_rate(182, 84.5, 41, "male")
        self.assertEqual(round_half_away(bmr, 0), compute_bmr(182, 84.5, 41, "male").result_value)
        for level, multiplier in ACTIVITY_MULTIPLIERS.items():
            result = compute_tdee(182, 84.5, 41, "male", level)
            self.assertEqual(result.result_value, round_half_away(bmr * multiplier, 0), level)
            self.assertEqual(result.result_category, level)

    def test_multiplier_table(self) -> None:
        self.assertEqual(
            ACTIVITY_MULTIPLIERS,
            {"sedentary": 1.2, "light": 1.375, "moderate": 1.55, "active": 1.725, "very_active": 1.9},
        )

    def test_unknown_activity_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            compute_tdee(170, 70, 30, "male", "couch")


class IdealWeightTests(unittest.TestCase):
    def test_male(self) -> None:
        result = compute_ideal_weight(180, "male")
        self.assertEqual(result.result_value, 72.6)
        self.assertEqual(result.result_category, "Ideal")
        self.assertEqual(result.test_data, {"height": 180.0, "gender": "male"})

    def test_female(self) -> None:
        self.assertEqual(compute_ideal_weight(165, "female").result_value, 57.4)

    def test_five_feet_gives_base_weight(self) -> None:
        self.assertEqual(compute_ideal_weight(152.4, "male").result_value, 52.0)
        self.assertEqual(compute_ideal_weight(152.4, "female").result_value, 49.0)


class RoundingTests(unittest.TestCase):
    def test_ties_go_away_from_zero(self) -> None:
        self.assertEqual(round_half_away(2.5, 0), 3.0)
        self.assertEqual(round_half_away(-2.5, 0), -3.0)
        self.assertEqual(round_half_away(0.125, 2), 0.13)
        self.assertEqual(round_half_away(1617.5, 0), 1618.0)

    def test_rounds_the_stored_binary_value(self) -> None:
        # 1.005 and 89.38 / 4 are stored just below their printed ties.
        self.assertEqual(round_half_away(1.005, 2), 1.0)
        self.assertEqual(round_half_away(-1.005, 2), -1.0)
        self.assertEqual(compute_bmi(200, 89.38).result_value, 22.34)

    def test_non_finite_passes_through(self) -> None:
        self.assertTrue(math.isnan(round_half_away(float("nan"), 2)))
        self.assertEqual(round_half_away(float("-inf"), 1), float("-inf"))

    def test_huge_values(self) -> None:
        self.assertEqual(round_half_away(1e300, 2), 1e300)


class ResultRecordTests(unittest.TestCase):
    def test_record_shape(self) -> None:
        record = compute_tdee(170, 70, 30, "male", "moderate").to_record()
        self.assertEqual(set(record), {"test_type", "test_data", "result_value", "result_category"})
        self.assertIsInstance(record["result_value"], float)
        self.assertIsInstance(record["test_data"], dict)

    def test_repeated_calls_are_identical(self) -> None:
        a = compute_ideal_weight(177.3, "female")
        b = compute_ideal_weight(177.3, "female")
        self.assertEqual(a, b)
        self.assertEqual(json.dumps(a.to_record()), json.dumps(b.to_record()))

    def test_from_record_rejects_unknown_type(self) -> None:
        with self.assertRaises(ValueError):
            HealthTestResult.from_record({"test_type": "vo2max", "test_data": {}, "result_value": 1})

    def test_from_record_restores_result(self) -> None:
        saved = compute_bmr(160, 55, 25, "female")
        self.assertEqual(HealthTestResult.from_record(saved.to_record()), saved)

    def test_dispatch_by_input_record(self) -> None:
        inputs = TDEEInput(height_cm=170, weight_kg=70, age_years=30, sex="male", activity_level="moderate")
        self.assertEqual(inputs.test_type, "tdee")
        self.assertEqual(compute_test(inputs), compute_tdee(170, 70, 30, "male", "moderate"))
        self.assertEqual(compute_test(IdealWeightInput(height_cm=180, sex="male")).result_value, 72.6)
        with self.assertRaises(TypeError):
            compute_test({"height": 170})  # type: ignore[arg-type]

    def test_input_rebuilt_from_test_data(self) -> None:
        result = compute_tdee(175, 80, 40, "female", "light")
        rebuilt = input_from_test_data(result.test_type, result.test_data)
        self.assertIsInstance(rebuilt, TDEEInput)
        self.assertEqual(compute_test(rebuilt), result)


if __name__ == "__main__":
    unittest.main()
