from types import MappingProxyType
from pydantic import BaseModel, Field, field_serializer, field_validator
from typing import Any, Dict, Mapping, Optional
from enum import Enum

class ComparisonOutcome(str, Enum):
    COMPARED = "compared"
    NO_BASELINE = "no_baseline"
    IO_ERROR = "io_error"

class ComparisonResult(BaseModel):
    passed: bool = Field(..., description="Whether the difference is within the threshold")
    diff_percentage: float = Field(..., ge=0.0, le=1.0, description="Differing pixels / baseline pixels")
    baseline_path: Optional[str] = Field(None, description="Path of the baseline image")
    actual_path: Optional[str] = Field(None, description="Path of the captured image")
    diff_path: Optional[str] = Field(None, description="Path of the generated diff image")
    metadata: Mapping[str, Any] = Field(default_factory=dict, validate_default=True,
                                        description="Caller supplied annotations, read-only")
    outcome: ComparisonOutcome = Field(ComparisonOutcome.COMPARED, description="How the comparison ended")
    error: Optional[str] = Field(None, description="Underlying cause for a failed load or write")

    class Config:
        frozen = True

    @field_validator('metadata', mode='after')
    @classmethod
    def _read_only_metadata(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer('metadata')
    def _serialize_metadata(self, value: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(value)

    @classmethod
    def failure(cls, outcome: ComparisonOutcome = ComparisonOutcome.IO_ERROR,
                error: Optional[str] = None) -> "ComparisonResult":
        """Safe failure: not passed, fully different, no image paths"""
        return cls(passed=False, diff_percentage=1.0, outcome=outcome, error=error)

    @property
    def missing_baseline(self) -> bool:
        return self.outcome == ComparisonOutcome.NO_BASELINE

    def with_metadata(self, key: str, value: Any) -> "ComparisonResult":
        """Return a copy of this result with one more metadata entry"""
        metadata = dict(self.metadata)
        metadata[key] = value
        return self.model_copy(update={'metadata': MappingProxyType(metadata)})

    def __str__(self) -> str:
        return (f"ComparisonResult(passed={self.passed}, diff={self.diff_percentage * 100:.2f}%, "
                f"baseline='{self.baseline_path}', actual='{self.actual_path}', diff_image='{self.diff_path}')")
