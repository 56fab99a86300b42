"""Domain models for recipe_capture.

Value objects passed between the acquisition pipeline, the ingredient
parser and the merge/dedup engine:
- RawContent / ExtractedRecipe (per acquisition attempt)
- QuantityRange / ParsedIngredient (parser output)
- GroceryItem / MergedIngredient (merge input/output)
- StageReport / AcquisitionResult (pipeline output)
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Acquisition ---

class SourceKind(str, Enum):
    CAPTION = "caption"
    DESCRIPTION = "description"
    TRANSCRIPT = "transcript"
    FRAME_ANALYSIS = "frame-analysis"


class AcquisitionMode(str, Enum):
    FAST = "fast"
    FULL = "full"


class AcquisitionSource(str, Enum):
    CAPTIONS = "captions"
    AUDIO_TRANSCRIPT = "audio_transcript"
    VIDEO_ANALYSIS_FALLBACK = "video_analysis_fallback"
    CAPTIONS_ONLY = "captions_only"


class Stage(str, Enum):
    CAPTION_FETCH = "caption_fetch"
    CAPTION_CLEAN = "caption_clean"
    CAPTION_EXTRACT = "caption_extract"
    AUDIO_FETCH = "audio_fetch"
    AUDIO_TRANSCRIBE = "audio_transcribe"
    CONTENT_CLASSIFY = "content_classify"
    TRANSCRIPT_EXTRACT = "transcript_extract"
    VIDEO_FRAME_EXTRACT = "video_frame_extract"


class StageOutcome(str, Enum):
    SUCCESS = "success"
    EMPTY_RESULT = "empty_result"
    HARD_FAILURE = "hard_failure"
    SKIPPED = "skipped"


class RawContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    source_kind: SourceKind


class ExtractedRecipe(BaseModel):
    model_config = ConfigDict(frozen=True)

    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "ExtractedRecipe":
        return cls()

    @property
    def is_empty(self) -> bool:
        return len(self.ingredients) == 0


class StageReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: Stage
    outcome: StageOutcome
    detail: Optional[str] = None


class AcquisitionResult(BaseModel):
    platform: str
    source: AcquisitionSource
    title: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    needs_full_analysis: bool = False
    message: Optional[str] = None
    stages: list[StageReport] = Field(default_factory=list)

    def attempted(self, stage: Stage) -> bool:
        return any(
            r.stage == stage and r.outcome != StageOutcome.SKIPPED for r in self.stages
        )


# --- Ingredients ---

class UnitCategory(str, Enum):
    VOLUME = "volume"
    WEIGHT = "weight"
    NONE = "none"


class QuantityRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _ordered(self):
        if self.min > self.max:
            raise ValueError(f"range min {self.min} is greater than max {self.max}")
        return self

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class ParsedIngredient(BaseModel):
    """One structured ingredient line. Exactly one of quantity/range is set."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity: Optional[float] = None
    range: Optional[QuantityRange] = None
    unit: Optional[str] = ""
    preparation: Optional[str] = None
    notes: Optional[str] = None
    confidence: float = Field(1.0, ge=0.0, le=1.0)
    original: str = ""
    category: Optional[str] = None

    @model_validator(mode="after")
    def _one_amount(self):
        if (self.quantity is None) == (self.range is None):
            raise ValueError("exactly one of quantity or range must be set")
        return self

    @property
    def amount(self) -> float:
        """Scalar amount, midpoint for ranges."""
        if self.range is not None:
            return self.range.midpoint
        return self.quantity


class GroceryItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: float = 0.0
    unit: str = ""
    range: Optional[QuantityRange] = None
    display_quantity: Optional[str] = None
    category: Optional[str] = None

    @field_validator("unit", mode="before")
    @classmethod
    def _unit_not_none(cls, v):
        return v or ""

    @classmethod
    def from_parsed(cls, item: ParsedIngredient) -> "GroceryItem":
        from .services.unit_conversion import format_quantity_with_fractions, format_range

        if item.range is not None:
            return cls(
                name=item.name,
                quantity=item.range.midpoint,
                unit=item.unit or "",
                range=item.range,
                display_quantity=format_range(item.range.min, item.range.max),
                category=item.category,
            )
        return cls(
            name=item.name,
            quantity=item.quantity,
            unit=item.unit or "",
            display_quantity=format_quantity_with_fractions(item.quantity),
            category=item.category,
        )


class MergedIngredient(GroceryItem):
    merged: bool = False
