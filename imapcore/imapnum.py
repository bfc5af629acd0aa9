"""Sets of message sequence numbers or UIDs (the IMAP sequence-set grammar).

The value 0 stands for "*", which is safe because real numbers are non-zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

MAX_NUM = 0xFFFFFFFF
_DIGITS = frozenset("0123456789")


class BadNumSetError(ValueError):
    """Raised when a number set value is malformed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"bad number set value {value!r}")
        self.value = value


@dataclass(frozen=True)
class NumRange:
    """A seq-number or seq-range.

    A single number has start == stop. "n:*" is stored as (n, 0); otherwise
    start <= stop always holds.
    """

    start: int
    stop: int

    def contains(self, q: int) -> bool:
        """Whether q is in the range; "*" only contains "*" and "n:*" contains "*"."""
        if q == 0:
            return self.stop == 0
        return self.start != 0 and self.start <= q and (q <= self.stop or self.stop == 0)

    def less(self, q: int) -> bool:
        """Whether the range precedes q and does not contain it."""
        return (self.stop < q or q == 0) and self.stop != 0

    def merge(self, other: NumRange) -> NumRange | None:
        """Return the union of two ranges if they overlap or touch, else None."""
        s, t = self, other
        if s == t:
            return s
        if s.start != 0 and t.start != 0:
            if s.start > t.start:
                s, t = t, s
            if (s.stop >= t.stop and t.stop != 0) or s.stop == 0:
                return s
            if s.stop + 1 >= t.start:
                return NumRange(s.start, t.stop)
            return None
        if s.start == 0:
            if t.stop == 0:
                return t
        elif s.stop == 0:
            return s
        return None

    def _nums(self) -> range:
        if self.start == 0 or self.stop == 0:
            raise ValueError("cannot enumerate a dynamic number set")
        return range(self.start, self.stop + 1)

    def __str__(self) -> str:
        if self.start == self.stop:
            return "*" if self.start == 0 else str(self.start)
        if self.stop == 0:
            return f"{self.start}:*"
        return f"{self.start}:{self.stop}"


class NumberSet:
    """A sorted, normalised set of number ranges. Empty by default."""

    __slots__ = ("_ranges",)

    def __init__(self, ranges: Iterable[NumRange] = ()) -> None:
        self._ranges: list[NumRange] = []
        for r in ranges:
            self._insert(r)

    def add_num(self, *args: int) -> None:
        """Insert numbers; 0 stands for "*"."""
        for num in args:
            self._insert(NumRange(num, num))

    def add_range(self, start: int, stop: int) -> None:
        """Insert a range; the bounds may be given in either order."""
        if (stop < start and stop != 0) or start == 0:
            self._insert(NumRange(stop, start))
        else:
            self._insert(NumRange(start, stop))

    def add_set(self, other: Iterable[NumRange]) -> None:
        """Insert every range of another set."""
        for r in list(other):
            self._insert(r)

    def dynamic(self) -> bool:
        """Whether the set contains "*" or an "n:*" range."""
        return bool(self._ranges) and self._ranges[-1].stop == 0

    def contains(self, q: int) -> bool:
        """Whether the non-zero number q is in the set ("n:*" holds all q >= n)."""
        _, found = self._search(q)
        return found and q != 0

    def nums(self) -> list[int]:
        """All numbers in the set. Raises ValueError if the set is dynamic."""
        result: list[int] = []
        for r in self._ranges:
            result.extend(r._nums())
        return result

    def _search(self, q: int) -> tuple[int, bool]:
        s = self._ranges
        lo, hi = 0, len(s) - 1
        while lo < hi:
            mid = (lo + hi) >> 1
            if s[mid].less(q):
                lo = mid + 1
            else:
                hi = mid
        if hi < 0 or s[lo].less(q):
            return len(s), False
        return lo, s[lo].contains(q)

    def _insert(self, v: NumRange) -> None:
        s = self._ranges
        i, _ = self._search(v.start)
        merged = False
        if i > 0:
            union = s[i - 1].merge(v)
            if union is not None:
                s[i - 1] = union
                merged = True
        if i == len(s):
            if not merged:
                s.append(v)
            return
        if merged:
            i -= 1
        else:
            union = s[i].merge(v)
            if union is None:
                s.insert(i, v)
                return
            s[i] = union
        j = i + 1
        while j < len(s):
            union = s[i].merge(s[j])
            if union is None:
                break
            s[i] = union
            j += 1
        del s[i + 1 : j]

    def __contains__(self, q: object) -> bool:
        return isinstance(q, int) and self.contains(q)

    def __iter__(self) -> Iterator[NumRange]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumberSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    def __str__(self) -> str:
        return ",".join(str(r) for r in self._ranges)


def _parse_num(value: str) -> int:
    if value == "*":
        return 0
    if value and value[0] != "0" and set(value) <= _DIGITS:
        num = int(value)
        if num <= MAX_NUM:
            return num
    raise BadNumSetError(value)


def parse_num_range(value: str) -> NumRange:
    """Parse "n" or "n:m", where either side may be "*"."""
    start_text, sep, stop_text = value.partition(":")
    try:
        if not sep:
            num = _parse_num(value)
            return NumRange(num, num)
        start = _parse_num(start_text)
        stop = _parse_num(stop_text)
    except BadNumSetError:
        raise BadNumSetError(value) from None
    if (stop < start and stop != 0) or start == 0:
        start, stop = stop, start
    return NumRange(start, stop)


def parse_set(value: str) -> NumberSet:
    """Parse a comma-separated sequence-set."""
    result = NumberSet()
    for part in value.split(","):
        r = parse_num_range(part)
        result.add_range(r.start, r.stop)
    return result