from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from classify.config import ClassifyConfig
from grouping.config import ColumnConfig, PaneConfig


@dataclass(frozen=True, slots=True)
class ToleranceParams:
    """
    One rung of the per-page tolerance ladder.

    y_tol / y_tol_tag are floors: the effective per-pane tolerance is the larger of the
    floor and the value derived from the pane's row pitch, so widening a rung never
    narrows a search window.
    """

    y_tol: float
    y_tol_tag: float
    x_group_eps: float
    gap_min: float

    def validate(self) -> None:
        if self.y_tol <= 0 or self.y_tol_tag <= 0:
            raise ValueError("y tolerances must be > 0")
        if self.x_group_eps <= 0:
            raise ValueError("x_group_eps must be > 0")
        if self.gap_min < 0:
            raise ValueError("gap_min must be >= 0")

    def to_dict(self) -> dict[str, float]:
        return {
            "y_tol": self.y_tol,
            "y_tol_tag": self.y_tol_tag,
            "x_group_eps": self.x_group_eps,
            "gap_min": self.gap_min,
        }


# Widen Y first, then relax the column merge epsilon and the pane anchor gap.
DEFAULT_LADDER: tuple[ToleranceParams, ...] = (
    ToleranceParams(y_tol=9.0, y_tol_tag=12.0, x_group_eps=8.0, gap_min=35.0),
    ToleranceParams(y_tol=11.0, y_tol_tag=14.0, x_group_eps=8.0, gap_min=35.0),
    ToleranceParams(y_tol=11.0, y_tol_tag=14.0, x_group_eps=10.0, gap_min=28.0),
)


@dataclass(frozen=True, slots=True)
class AssemblyConfig:
    pitch_fallback: float = 12.0

    # Tolerances derived from the per-pane row pitch: clamp(pitch * fraction, min, max).
    y_tol_fraction: float = 0.25
    y_tol_min: float = 7.0
    y_tol_max: float = 12.0
    y_tol_tag_fraction: float = 0.35
    y_tol_tag_min: float = 10.0
    y_tol_tag_max: float = 16.0

    tag_exclusion_radius: float = 14.0
    tag_value_max_dx: float = 30.0
    baseline_slack: float = 2.0  # Y offsets this small count as the same baseline when ranking value columns
    cross_pane_lookahead: int = 2

    def validate(self) -> None:
        if self.pitch_fallback <= 0:
            raise ValueError("pitch_fallback must be > 0")
        for name in ("y_tol_fraction", "y_tol_tag_fraction"):
            v = getattr(self, name)
            if not (0.0 < v < 1.0):
                raise ValueError(f"{name} must be within (0, 1)")
        if not (0 < self.y_tol_min <= self.y_tol_max):
            raise ValueError("require 0 < y_tol_min <= y_tol_max")
        if not (0 < self.y_tol_tag_min <= self.y_tol_tag_max):
            raise ValueError("require 0 < y_tol_tag_min <= y_tol_tag_max")
        if self.tag_exclusion_radius < 0 or self.tag_value_max_dx <= 0:
            raise ValueError("tag distances must be positive")
        if self.baseline_slack < 0:
            raise ValueError("baseline_slack must be >= 0")
        if self.cross_pane_lookahead < 0:
            raise ValueError("cross_pane_lookahead must be >= 0")


@dataclass(frozen=True, slots=True)
class SearchConfig:
    ladder: tuple[ToleranceParams, ...] = DEFAULT_LADDER
    stop_skip_rate: float = 0.25

    def validate(self) -> None:
        if not self.ladder:
            raise ValueError("ladder must contain at least one rung")
        for p in self.ladder:
            p.validate()
        if not (0.0 <= self.stop_skip_rate <= 1.0):
            raise ValueError("stop_skip_rate must be within [0, 1]")


@dataclass(frozen=True, slots=True)
class ExtractionConfig:
    """Every tunable of the extraction pipeline. Defaults are explicit constants."""

    classify: ClassifyConfig = field(default_factory=ClassifyConfig)
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    panes: PaneConfig = field(default_factory=PaneConfig)
    assembly: AssemblyConfig = field(default_factory=AssemblyConfig)
    search: SearchConfig = field(default_factory=SearchConfig)

    def validate(self) -> None:
        self.classify.validate()
        self.columns.validate()
        self.panes.validate()
        self.assembly.validate()
        self.search.validate()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
