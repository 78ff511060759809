# toypattern/core/pattern.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

import numpy as np

from .exceptions import ConsistencyViolation, FeatureNotFound
from .header import Feature, Header, Version
from .points import Points


@dataclass(frozen=True, slots=True)
class Pattern:
    """
    A decoded pattern file: header + one Point per time step.

    Design goals:
    - immutable: built once by a decode pass, never updated
    - consistent: point width always equals the declared feature count
    - comparable: two decodes of the same bytes compare equal
    """
    header: Header = field(default_factory=Header)
    points: Points = field(default_factory=Points.empty, repr=False)

    def __post_init__(self) -> None:
        if len(self.points) > 0 and self.points.stride != len(self.header.features):
            raise ConsistencyViolation(len(self.header.features), self.points.stride)

    # Points are array-backed and unhashable, so Pattern is too.
    __hash__ = None  # type: ignore[assignment]

    # ---- header shortcuts ----
    @property
    def version(self) -> Version:
        return self.header.version

    @property
    def features(self) -> tuple[Feature, ...]:
        return self.header.features

    @property
    def interval(self) -> timedelta:
        return self.header.interval

    # ---- derived views ----
    def __len__(self) -> int:
        return len(self.points)

    @property
    def duration(self) -> timedelta:
        return self.header.interval * len(self.points)

    def timestamps(self) -> np.ndarray:
        """Start time of each point in seconds, relative to the first point."""
        step = self.header.interval.total_seconds()
        return np.arange(len(self.points), dtype=np.float64) * step

    def scaled(self) -> np.ndarray:
        """All strengths normalized to [0.0, 1.0] for this file's version."""
        return self.points.scale(self.header.version)

    def channel(self, feature: str) -> np.ndarray:
        """Raw strengths of one feature. Duplicated features resolve to the first."""
        try:
            index = self.header.features.index(Feature(feature))
        except ValueError as e:
            raise FeatureNotFound(feature) from e
        if len(self.points) == 0:
            return np.empty(0, dtype=self.points.strengths.dtype)
        return self.points.column(index)
