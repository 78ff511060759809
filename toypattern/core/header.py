# toypattern/core/header.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import NewType

from .exceptions import InvalidHeader


class Version(IntEnum):
    """Pattern file format version, as declared by the `V` header field."""

    LEGACY = 0
    STANDARD = 1

    def __str__(self) -> str:
        return f"V:{int(self)}"

    @property
    def full_scale(self) -> int:
        """Raw strength value that maps to full intensity."""
        return _FULL_SCALE[self]


_FULL_SCALE = {
    Version.LEGACY: 100,
    Version.STANDARD: 20,
}


# Motor channel token from the `F` header field. Unknown tokens are kept as-is.
Feature = NewType("Feature", str)

# Known feature tokens. No validation is done against these.
AIR_PUMP = Feature("p")
ROTATE = Feature("r")
VIBRATE = Feature("v")
VIBRATE1 = Feature("v1")
VIBRATE2 = Feature("v2")

DEFAULT_FEATURES: tuple[Feature, ...] = (VIBRATE,)
DEFAULT_INTERVAL = timedelta(milliseconds=100)


@dataclass(frozen=True, slots=True)
class Header:
    """
    Everything before the `#` terminator of a Standard pattern file.

    Legacy files carry no header at all; they decode to the defaults below:
    one vibration channel stepping every 100 ms.
    """
    version: Version = Version.LEGACY
    device_type: str | None = None
    features: tuple[Feature, ...] = DEFAULT_FEATURES
    interval: timedelta = DEFAULT_INTERVAL
    content_hash: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.version, Version):
            raise InvalidHeader("Header.version must be a Version.")
        if not isinstance(self.interval, timedelta):
            raise InvalidHeader("Header.interval must be a timedelta.")

        features = tuple(self.features)
        if not features:
            raise InvalidHeader("Header.features must name at least one channel.")
        object.__setattr__(self, "features", features)

    @property
    def channels(self) -> int:
        return len(self.features)
