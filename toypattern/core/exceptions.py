# toypattern/core/exceptions.py
from __future__ import annotations

from enum import Enum


class PatternError(Exception):
    """Base error for all pattern-domain exceptions."""


# ---- Validation / construction errors ----
class InvalidHeader(PatternError):
    """Raised when a Header is constructed with invalid inputs."""


class InvalidStrength(PatternError, ValueError):
    """Raised when a Strength does not fit the declared numeric width."""


class InvalidPoints(PatternError):
    """Raised when Points are constructed from a malformed array."""


class InvalidOptions(PatternError):
    """Raised when ReaderOptions are constructed with invalid inputs."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class FeatureNotFound(PatternError, KeyError):
    """Raised when a requested feature is not declared by the header."""


# ---- Decode errors ----
class TransportError(PatternError):
    """The byte source failed or ended before a required terminator."""


class MalformedHeaderField(PatternError, ValueError):
    """A recognized header key carries a value of the wrong type."""

    def __init__(self, key: str, raw: bytes, reason: str = "not an integer") -> None:
        super().__init__(f"invalid {key} value {raw!r}: {reason}")
        self.key = key
        self.raw = raw


class UnsupportedVersion(MalformedHeaderField):
    """The V field is an integer but names no known version."""

    def __init__(self, raw: bytes) -> None:
        super().__init__("V", raw, reason="unknown version")


class MalformedPointValue(PatternError, ValueError):
    """A data token is not a non-negative integer within the numeric width."""

    def __init__(self, token: bytes, reason: str = "not an unsigned integer") -> None:
        super().__init__(f"invalid point {token!r}: {reason}")
        self.token = token


class StrideViolation(PatternError):
    """A data group does not have the width fixed by the first group."""

    def __init__(self, group: bytes, expected: int, got: int) -> None:
        if got < expected:
            msg = f"{group!r} doesn't have {expected} points (got {got})"
        else:
            msg = f"{group!r} has {got} points, expected {expected}"
        super().__init__(msg)
        self.group = group
        self.expected = expected
        self.got = got


class ConsistencyViolation(PatternError):
    """The point width does not match the number of declared features."""

    def __init__(self, features: int, stride: int) -> None:
        super().__init__(f"mismatch: {features} motors != {stride} in points")
        self.features = features
        self.stride = stride


class Stage(str, Enum):
    HEADER = "header"
    POINTS = "points"
    CONSISTENCY = "consistency"


class PatternDecodeError(PatternError):
    """Decoding failed; `stage` tells where, `cause` holds the underlying error."""

    def __init__(self, stage: Stage, cause: PatternError) -> None:
        super().__init__(f"cannot decode {stage.value}: {cause}")
        self.stage = stage
        self.cause = cause
