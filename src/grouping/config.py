from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ColumnConfig:
    """
    Column clustering parameters.

    The merge epsilon is derived per page from the median gap between distinct X
    positions: eps = clamp(median_gap * eps_fraction, eps_min, eps_max). A caller hint
    can only tighten it, never widen it past the adaptive value.
    """

    eps_fraction: float = 0.55
    eps_min: float = 4.0
    eps_max: float = 10.0
    fallback_gap: float = 16.0  # used when a page has a single distinct X

    def validate(self) -> None:
        if not (0.0 < self.eps_fraction < 1.0):
            raise ValueError("eps_fraction must be within (0, 1)")
        if self.eps_min <= 0:
            raise ValueError("eps_min must be > 0")
        if self.eps_max < self.eps_min:
            raise ValueError("eps_max must be >= eps_min")
        if self.fallback_gap <= 0:
            raise ValueError("fallback_gap must be > 0")


@dataclass(frozen=True, slots=True)
class PaneConfig:
    kmeans_max_iter: int = 20

    def validate(self) -> None:
        if self.kmeans_max_iter <= 0:
            raise ValueError("kmeans_max_iter must be > 0")
