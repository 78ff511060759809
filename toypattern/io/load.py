# toypattern/io/load.py
from __future__ import annotations

import io
import logging
from pathlib import Path

from toypattern.core import (
    ConsistencyViolation,
    Header,
    Pattern,
    PatternDecodeError,
    PatternError,
    Points,
    ReaderOptions,
    Stage,
)
from toypattern.io.reader import ByteSource, PatternReader

logger = logging.getLogger(__name__)


def parse(source: ByteSource, options: ReaderOptions | None = None) -> Pattern:
    """Decode one pattern file from a byte source.

    Runs header decoding, then the point decoder for the header's version,
    then checks that the point width matches the declared features.

    Raises
    ------
    PatternDecodeError
        On any failure. `stage` is the step that failed and `cause` the
        underlying error. No partial pattern is returned.
    """
    with PatternReader(source, options) as reader:
        try:
            header: Header = reader.read_header()
        except PatternError as e:
            raise PatternDecodeError(Stage.HEADER, e) from e

        try:
            points: Points = reader.read_points(header.version)
        except PatternError as e:
            raise PatternDecodeError(Stage.POINTS, e) from e

    try:
        pattern = Pattern(header=header, points=points)
    except ConsistencyViolation as e:
        raise PatternDecodeError(Stage.CONSISTENCY, e) from e

    logger.debug(
        "decoded pattern",
        extra={"pattern_version": int(header.version), "pattern_points": len(points)},
    )
    return pattern


def parse_bytes(data: bytes, options: ReaderOptions | None = None) -> Pattern:
    return parse(io.BytesIO(data), options)


def load_pattern(path: str | Path, options: ReaderOptions | None = None) -> Pattern:
    path = Path(path)
    with path.open("rb") as f:
        try:
            return parse(f, options)
        except PatternDecodeError:
            logger.info("cannot decode pattern file", extra={"pattern_path": str(path)})
            raise
