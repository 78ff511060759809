"""
Core domain objects for toypattern.

This module defines the format-agnostic data model of a pattern file:
- Header: version, device type, features, interval, content hash
- Strength / Point / Points: raw intensities, one Point per time step
- Pattern: validated header + points
- ReaderOptions: knobs for a decode pass

The core layer is independent from byte-level decoding.
"""

from .header import (
    Version,
    Feature,
    Header,
    AIR_PUMP,
    ROTATE,
    VIBRATE,
    VIBRATE1,
    VIBRATE2,
    DEFAULT_FEATURES,
    DEFAULT_INTERVAL,
)
from .points import Strength, Point, Points, STRENGTH_MAX
from .pattern import Pattern
from .options import ReaderOptions
from .exceptions import (
    PatternError,
    InvalidHeader,
    InvalidStrength,
    InvalidPoints,
    InvalidOptions,
    FeatureNotFound,
    TransportError,
    MalformedHeaderField,
    UnsupportedVersion,
    MalformedPointValue,
    StrideViolation,
    ConsistencyViolation,
    PatternDecodeError,
    Stage,
)


__all__ = [
    # header
    "Version",
    "Feature",
    "Header",
    "AIR_PUMP",
    "ROTATE",
    "VIBRATE",
    "VIBRATE1",
    "VIBRATE2",
    "DEFAULT_FEATURES",
    "DEFAULT_INTERVAL",

    # points
    "Strength",
    "Point",
    "Points",
    "STRENGTH_MAX",

    # pattern
    "Pattern",
    "ReaderOptions",

    # exceptions
    "PatternError",
    "InvalidHeader",
    "InvalidStrength",
    "InvalidPoints",
    "InvalidOptions",
    "FeatureNotFound",
    "TransportError",
    "MalformedHeaderField",
    "UnsupportedVersion",
    "MalformedPointValue",
    "StrideViolation",
    "ConsistencyViolation",
    "PatternDecodeError",
    "Stage",
]
