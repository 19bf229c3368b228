"""
Time bucket keys for block meta rows.

A bucket key names a calendar day or month and which edge of it a row
tracks: ``day:first:YYYYMMDD``, ``day:last:YYYYMMDD``, ``month:first:YYYYMM``
and ``month:last:YYYYMM``.

Boundaries derived from a live block timestamp keep nanosecond precision
(``end_of_day`` is 23:59:59.999999999). Parsing a stored key only recovers
millisecond precision (``last`` resolves to 23:59:59.999), which is what
previously emitted ``at`` values hold.
"""

import calendar
import re
from datetime import datetime
from typing import Tuple

from block_meta.models.block import Block
from block_meta.utils.exceptions import InvalidKeyError, InvalidTimestampError, MissingFieldError
from block_meta.utils.timefmt import BlockInstant, MAX_NANOS

DAY = "day"
MONTH = "month"
FIRST = "first"
LAST = "last"

GRANULARITIES = (DAY, MONTH)
BOUNDARIES = {DAY: (FIRST, LAST), MONTH: (FIRST, LAST)}

LAST_MILLIS_NANOS = 999_000_000

_DAY_ANCHOR = re.compile(r"([0-9]{4})([0-9]{2})([0-9]{2})")
_MONTH_ANCHOR = re.compile(r"([0-9]{4})([0-9]{2})")


def _day_anchor(instant: BlockInstant) -> str:
    return f"{instant.year:04d}{instant.month:02d}{instant.day:02d}"


def _month_anchor(instant: BlockInstant) -> str:
    return f"{instant.year:04d}{instant.month:02d}"


def _next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


class BlockTimestamp:
    """Calendar bucket arithmetic around a single block instant"""

    def __init__(self, instant: BlockInstant):
        self.instant = instant

    @classmethod
    def from_block(cls, block: Block) -> "BlockTimestamp":
        if block.header is None:
            raise MissingFieldError("header")
        timestamp = block.header.timestamp
        if timestamp is None:
            raise MissingFieldError("header.timestamp")
        return cls(BlockInstant.from_unix(timestamp.seconds, timestamp.nanos))

    @classmethod
    def from_key(cls, key: str) -> "BlockTimestamp":
        return cls(parse_key(key))

    def start_of_day(self) -> BlockInstant:
        return BlockInstant.of(self.instant.year, self.instant.month, self.instant.day)

    def end_of_day(self) -> BlockInstant:
        return BlockInstant.of(self.instant.year, self.instant.month, self.instant.day, 23, 59, 59, MAX_NANOS)

    def start_of_month(self) -> BlockInstant:
        return BlockInstant.of(self.instant.year, self.instant.month, 1)

    def end_of_month(self) -> BlockInstant:
        """First instant of the next calendar month, minus one nanosecond."""
        year, month = _next_month(self.instant.year, self.instant.month)
        try:
            start_of_next_month = BlockInstant.of(year, month, 1)
        except InvalidTimestampError:
            raise InvalidTimestampError(f"no month follows {self.instant.year:04d}-{self.instant.month:02d}")
        return start_of_next_month.minus_nanoseconds(1)

    def start_of_day_key(self) -> str:
        return f"{DAY}:{FIRST}:{_day_anchor(self.instant)}"

    def end_of_day_key(self) -> str:
        return f"{DAY}:{LAST}:{_day_anchor(self.instant)}"

    def start_of_month_key(self) -> str:
        return f"{MONTH}:{FIRST}:{_month_anchor(self.instant)}"

    def end_of_month_key(self) -> str:
        return f"{MONTH}:{LAST}:{_month_anchor(self.instant)}"

    def __eq__(self, other):
        if not isinstance(other, BlockTimestamp):
            return NotImplemented
        return self.instant == other.instant

    def __hash__(self):
        return hash(self.instant)

    def __repr__(self):
        return f"BlockTimestamp({self.instant})"

    def __str__(self):
        return str(self.instant)


def start_of_day_key(instant: BlockInstant) -> str:
    return BlockTimestamp(instant).start_of_day_key()


def end_of_day_key(instant: BlockInstant) -> str:
    return BlockTimestamp(instant).end_of_day_key()


def start_of_month_key(instant: BlockInstant) -> str:
    return BlockTimestamp(instant).start_of_month_key()


def end_of_month_key(instant: BlockInstant) -> str:
    return BlockTimestamp(instant).end_of_month_key()


def parse_key(key: str) -> BlockInstant:
    """
    Resolve a bucket key to the boundary instant it denotes.

    Args:
        key: A bucket key such as ``day:first:20150701``

    Returns:
        00:00:00 of the bucket's first day for ``first`` keys, 23:59:59.999
        of its last day for ``last`` keys

    Raises:
        InvalidKeyError: on a wrong field count, unknown granularity or
            boundary, non-numeric anchor, or impossible calendar date
    """
    if not isinstance(key, str):
        raise InvalidKeyError(repr(key), "key must be a string")

    parts = key.split(":")
    if len(parts) != 3:
        raise InvalidKeyError(key, f"expected 3 fields, got {len(parts)}")

    granularity, boundary, anchor = parts
    if granularity not in GRANULARITIES:
        raise InvalidKeyError(key, f"unknown granularity {granularity!r}")
    if boundary not in BOUNDARIES[granularity]:
        raise InvalidKeyError(key, f"unknown boundary {boundary!r} for {granularity}")

    if granularity == DAY:
        match = _DAY_ANCHOR.fullmatch(anchor)
        if not match:
            raise InvalidKeyError(key, f"day anchor must be YYYYMMDD, got {anchor!r}")
        year, month, day = (int(g) for g in match.groups())
    else:
        match = _MONTH_ANCHOR.fullmatch(anchor)
        if not match:
            raise InvalidKeyError(key, f"month anchor must be YYYYMM, got {anchor!r}")
        year, month = (int(g) for g in match.groups())
        day = 1

    try:
        date = datetime(year, month, day)
    except ValueError as e:
        raise InvalidKeyError(key, str(e))

    if boundary == FIRST:
        return BlockInstant(date)

    if granularity == MONTH:
        day = calendar.monthrange(year, month)[1]
    return BlockInstant(datetime(year, month, day, 23, 59, 59), LAST_MILLIS_NANOS)
