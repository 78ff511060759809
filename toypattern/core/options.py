# toypattern/core/options.py
from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidOptions


@dataclass(frozen=True, slots=True)
class ReaderOptions:
    """
    Knobs for a single decode pass.

    - chunk_size: bytes requested from the source per read
    - strict_stride: reject Standard groups wider than the first group
      instead of ignoring the extra values
    """
    chunk_size: int = 4096
    strict_stride: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise InvalidOptions("ReaderOptions.chunk_size must be an int.")
        if self.chunk_size <= 0:
            raise InvalidOptions("ReaderOptions.chunk_size must be positive.")
        if not isinstance(self.strict_stride, bool):
            raise InvalidOptions("ReaderOptions.strict_stride must be a bool.")
