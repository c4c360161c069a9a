"""Comparison data structures produced by the diff evaluator and aggregator."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ComparisonPair(BaseModel):
    """Two images believed to show the same page at the same viewport."""
    identifier: str
    path_key: Optional[str] = None
    width_label: str = ""
    image_a: str
    image_b: str
    diff_path: str
    data_path: str


class ComparisonResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    identifier: str
    path_key: Optional[str] = None
    width_label: str = ""
    diff_percentage: float = Field(default=0.0, ge=0, le=100)
    diff_pixel_count: int = 0
    total_pixels: int = 0
    width: int = 0
    height: int = 0
    passed: bool = True
    error: Optional[str] = None


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    threshold: float
    total_comparisons: int = 0
    failed_comparisons: int = 0
    results: list[ComparisonResult] = Field(default_factory=list)

    @property
    def passed_comparisons(self) -> int:
        return self.total_comparisons - self.failed_comparisons

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_comparisons > 0 else 0

    def result_for(self, identifier: str) -> ComparisonResult | None:
        for result in self.results:
            if result.identifier == identifier:
                return result
        return None
