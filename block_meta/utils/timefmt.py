"""
Shared timestamp formatting for block meta changelogs.

Every string rendering of an instant goes through this module, both the
naive text used for bucket boundaries (``at`` column) and the RFC3339 text
used for block header timestamps (``timestamp`` column).
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from block_meta.utils.exceptions import InvalidTimestampError

NANOS_PER_SECOND = 1_000_000_000
MAX_NANOS = NANOS_PER_SECOND - 1

_EPOCH = datetime(1970, 1, 1)


@dataclass(frozen=True, order=True)
class BlockInstant:
    """
    A naive UTC instant with nanosecond precision.

    ``moment`` is always truncated to the whole second, the sub-second part
    lives in ``nanosecond``.
    """

    moment: datetime
    nanosecond: int = 0

    def __post_init__(self):
        if self.moment.microsecond:
            raise InvalidTimestampError(f"moment must be truncated to the second, got {self.moment!r}")
        if not 0 <= self.nanosecond <= MAX_NANOS:
            raise InvalidTimestampError(f"nanosecond out of range: {self.nanosecond}")

    @classmethod
    def from_unix(cls, seconds: int, nanos: int = 0) -> "BlockInstant":
        if not 0 <= nanos <= MAX_NANOS:
            raise InvalidTimestampError(f"invalid nanos {nanos} for timestamp {seconds}")
        try:
            moment = _EPOCH + timedelta(seconds=seconds)
        except OverflowError:
            raise InvalidTimestampError(f"invalid date for timestamp {seconds}.{nanos:09d}")
        return cls(moment, nanos)

    @classmethod
    def of(cls, year, month, day, hour=0, minute=0, second=0, nanosecond=0) -> "BlockInstant":
        try:
            moment = datetime(year, month, day, hour, minute, second)
        except ValueError as e:
            raise InvalidTimestampError(str(e))
        return cls(moment, nanosecond)

    @property
    def year(self) -> int:
        return self.moment.year

    @property
    def month(self) -> int:
        return self.moment.month

    @property
    def day(self) -> int:
        return self.moment.day

    def minus_nanoseconds(self, nanos: int) -> "BlockInstant":
        total = self.nanosecond - nanos
        borrow_seconds, remainder = divmod(total, NANOS_PER_SECOND)
        return BlockInstant(self.moment + timedelta(seconds=borrow_seconds), remainder)

    def __str__(self) -> str:
        return format_naive(self)


def format_fraction(nanos: int) -> str:
    """Render a nanosecond count as ``.mmm``, ``.uuuuuu`` or ``.nnnnnnnnn`` (empty when zero)."""
    if nanos == 0:
        return ""
    if nanos % 1_000_000 == 0:
        return f".{nanos // 1_000_000:03d}"
    if nanos % 1_000 == 0:
        return f".{nanos // 1_000:06d}"
    return f".{nanos:09d}"


def _date_time(moment: datetime, separator: str) -> str:
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"{separator}{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


def format_naive(instant: BlockInstant) -> str:
    return _date_time(instant.moment, " ") + format_fraction(instant.nanosecond)


def format_rfc3339(instant: BlockInstant) -> str:
    return _date_time(instant.moment, "T") + format_fraction(instant.nanosecond) + "Z"


def format_unix_rfc3339(seconds: int, nanos: int) -> str:
    return format_rfc3339(BlockInstant.from_unix(seconds, nanos))


def to_hex(value: bytes) -> str:
    """Lowercase hex without ``0x`` prefix, empty bytes give an empty string"""
    return bytes(value).hex()
