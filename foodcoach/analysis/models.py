from __future__ import annotations

import json
from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict


class Nutrition(BaseModel):
    calories: str = ""
    protein: str = ""
    carbohydrates: str = ""
    fat: str = ""


class Recipe(BaseModel):
    # The model answers in camelCase; keep that on the wire.
    model_config = ConfigDict(populate_by_name=True)
    difficulty: str = ""
    cook_time: str = Field(default="", alias="cookTime")
    steps: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    is_food: bool = Field(alias="isFood")
    reason: Optional[str] = None
    dish_name: Optional[str] = Field(default=None, alias="dishName")
    ingredients: Optional[list[str]] = None
    nutrition: Optional[Nutrition] = None
    recipe: Optional[Recipe] = None
    uncertainty: Optional[str] = None

    @staticmethod
    def from_json(text: str) -> "AnalysisResult":
        """Parse the model's JSON reply. Raises ValueError on bad input."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Response is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Response JSON must be an object.")
        try:
            return AnalysisResult.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Response does not match the analysis schema: {exc}") from exc

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)
