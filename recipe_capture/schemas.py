"""Pydantic schemas for the recipe_capture API.

Request/response models for:
- URL acquisition
- Ingredient parse / normalize / merge / dedupe
- Unit conversion
"""

from typing import Optional, Literal

from pydantic import BaseModel, Field

from .models import AcquisitionMode, GroceryItem, StageReport


# --- Acquisition ---

class ParseUrlRequest(BaseModel):
    url: str = Field(..., min_length=1, max_length=2048)
    mode: AcquisitionMode = AcquisitionMode.FAST


class ErrorOut(BaseModel):
    error: str
    platform: Optional[str] = None
    stages: list[StageReport] = []


# --- Ingredients ---

class IngredientLinesRequest(BaseModel):
    lines: list[str] = Field(default_factory=list, max_length=500)


class DedupeRequest(IngredientLinesRequest):
    debug: bool = False


class MergeRequest(BaseModel):
    list_a: list[GroceryItem] = []
    list_b: list[GroceryItem] = []


# --- Units ---

class UnitConvertRequest(BaseModel):
    quantity: float = Field(..., ge=0)
    from_unit: str
    to_unit: str


class UnitConvertResponse(BaseModel):
    quantity: Optional[float]
    unit: str
    display: Optional[str] = None
    convertible: bool


class MeasurementDisplayRequest(BaseModel):
    quantity: float = Field(..., ge=0)
    unit: Optional[str] = None
    system: Literal["original", "metric", "imperial"] = "original"


class MeasurementDisplayResponse(BaseModel):
    quantity: str
    unit: str
    original: dict
    metric: dict
    imperial: dict
