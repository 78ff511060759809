# toypattern/core/points.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

import numpy as np

from .exceptions import InvalidPoints, InvalidStrength
from .header import Version

# Declared numeric width of a strength value (unsigned 8-bit).
STRENGTH_DTYPE = np.uint8
STRENGTH_MAX = int(np.iinfo(STRENGTH_DTYPE).max)


def _clamp(f: float) -> float:
    if f < 0.0:
        return 0.0
    if f > 1.0:
        return 1.0
    return f


class Strength(int):
    """A single raw intensity value for one channel at one time step."""

    def __new__(cls, value: int) -> "Strength":
        self = super().__new__(cls, value)
        if not 0 <= self <= STRENGTH_MAX:
            raise InvalidStrength(f"strength {int(self)} outside 0..{STRENGTH_MAX}")
        return self

    def scale(self, version: Version) -> float:
        """Scale to [0.0, 1.0]. Values past the version's full scale clamp to 1.0."""
        return _clamp(int(self) / Version(version).full_scale)


class Point(tuple):
    """
    Strengths of all motors at one instant, in header feature order.

    Legacy files always produce single-element points.
    """

    def __new__(cls, strengths: Iterable[int] = ()) -> "Point":
        return super().__new__(cls, (Strength(s) for s in strengths))

    def scale(self, version: Version) -> list[float]:
        return [s.scale(version) for s in self]


@dataclass(frozen=True, slots=True, eq=False)
class Points:
    """
    Immutable sequence of Points, one per time step.

    Backed by a 2D uint8 array of shape (n_points, stride).
    """

    strengths: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        a = np.asarray(self.strengths)

        if a.ndim != 2:
            raise InvalidPoints(f"`strengths` must be 2D, got shape {a.shape}")
        if a.size > 0:
            if not np.issubdtype(a.dtype, np.integer):
                raise InvalidPoints(f"`strengths` must be integers, got {a.dtype}")
            if a.min() < 0 or a.max() > STRENGTH_MAX:
                raise InvalidPoints(f"`strengths` must fit 0..{STRENGTH_MAX}")

        a = a.astype(STRENGTH_DTYPE, copy=True)
        a.flags.writeable = False
        object.__setattr__(self, "strengths", a)

    @classmethod
    def from_points(cls, points: Sequence[Sequence[int]]) -> "Points":
        """Build from nested sequences. All rows must have the same length."""
        if len(points) == 0:
            return cls.empty()
        widths = {len(p) for p in points}
        if len(widths) != 1:
            raise InvalidPoints(f"points must have equal length, got widths {sorted(widths)}")
        return cls(np.array(points, dtype=np.int64))

    @classmethod
    def empty(cls, stride: int = 0) -> "Points":
        return cls(np.empty((0, stride), dtype=STRENGTH_DTYPE))

    # ---- sequence API ----
    def __len__(self) -> int:
        return int(self.strengths.shape[0])

    def __iter__(self) -> Iterator[Point]:
        for row in self.strengths:
            yield Point(row.tolist())

    def __getitem__(self, index: int) -> Point:
        return Point(self.strengths[index].tolist())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Points):
            return NotImplemented
        return np.array_equal(self.strengths, other.strengths)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Points(n={len(self)}, stride={self.stride})"

    @property
    def stride(self) -> int:
        return int(self.strengths.shape[1])

    def column(self, index: int) -> np.ndarray:
        """Strengths of a single channel across all time steps."""
        return self.strengths[:, index]

    def scale(self, version: Version) -> np.ndarray:
        full_scale = Version(version).full_scale
        return np.clip(self.strengths / full_scale, 0.0, 1.0)

    def tolist(self) -> list[list[int]]:
        return self.strengths.tolist()

    def to_numpy(self, *, copy: bool = False) -> np.ndarray:
        if copy:
            return self.strengths.copy()
        return self.strengths
