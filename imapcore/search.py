"""Search options, criteria and results."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from .numset import NumSet, SeqSet, UIDSet

_Date = Union[_dt.date, _dt.datetime]


@dataclass
class SearchOptions:
    """Options for the SEARCH command."""

    # Requires IMAP4rev2 or ESEARCH
    return_min: bool = False
    return_max: bool = False
    return_all: bool = False
    return_count: bool = False
    # Requires IMAP4rev2 or SEARCHRES
    return_save: bool = False


@dataclass
class SearchCriteriaHeaderField:
    """A header field the message must contain."""

    key: str
    value: str


class SearchCriteriaMetadataType(str, Enum):
    """Which metadata a MODSEQ criterion refers to."""

    ALL = "all"
    PRIVATE = "priv"
    SHARED = "shared"


@dataclass
class SearchCriteriaModSeq:
    """A MODSEQ search criterion (requires CONDSTORE)."""

    mod_seq: int
    metadata_name: str = ""
    metadata_type: Optional[SearchCriteriaMetadataType] = None


def _intersect_since(t1: Optional[_Date], t2: Optional[_Date]) -> Optional[_Date]:
    if t1 is None:
        return t2
    if t2 is None:
        return t1
    return t1 if t1 > t2 else t2


def _intersect_before(t1: Optional[_Date], t2: Optional[_Date]) -> Optional[_Date]:
    if t1 is None:
        return t2
    if t2 is None:
        return t1
    return t1 if t1 < t2 else t2


@dataclass
class SearchCriteria:
    """Criteria for the SEARCH command.

    All populated fields must match. ``not_`` and ``or_`` combine nested
    criteria; dates are None when unset and only their date part matters.
    """

    seq_num: list[SeqSet] = field(default_factory=list)
    uid: list[UIDSet] = field(default_factory=list)

    since: Optional[_Date] = None
    before: Optional[_Date] = None
    sent_since: Optional[_Date] = None
    sent_before: Optional[_Date] = None

    header: list[SearchCriteriaHeaderField] = field(default_factory=list)
    body: list[str] = field(default_factory=list)
    text: list[str] = field(default_factory=list)

    flag: list[str] = field(default_factory=list)
    not_flag: list[str] = field(default_factory=list)

    larger: int = 0
    smaller: int = 0

    not_: list[SearchCriteria] = field(default_factory=list)
    or_: list[Tuple[SearchCriteria, SearchCriteria]] = field(default_factory=list)

    mod_seq: Optional[SearchCriteriaModSeq] = None  # requires CONDSTORE

    def intersect(self, other: SearchCriteria) -> None:
        """Narrow these criteria in place so they also require ``other``."""
        self.seq_num.extend(other.seq_num)
        self.uid.extend(other.uid)

        self.since = _intersect_since(self.since, other.since)
        self.before = _intersect_before(self.before, other.before)
        self.sent_since = _intersect_since(self.sent_since, other.sent_since)
        self.sent_before = _intersect_before(self.sent_before, other.sent_before)

        self.header.extend(other.header)
        self.body.extend(other.body)
        self.text.extend(other.text)

        self.flag.extend(other.flag)
        self.not_flag.extend(other.not_flag)

        if self.larger == 0 or other.larger > self.larger:
            self.larger = other.larger
        if self.smaller == 0 or other.smaller < self.smaller:
            self.smaller = other.smaller

        self.not_.extend(other.not_)
        self.or_.extend(other.or_)


@dataclass
class SearchData:
    """The data returned by a SEARCH command."""

    all: Optional[NumSet] = None

    # requires IMAP4rev2 or ESEARCH
    uid: bool = False
    min: int = 0
    max: int = 0
    count: int = 0

    # requires CONDSTORE
    mod_seq: int = 0

    def all_seq_nums(self) -> list[int]:
        """``all`` as sequence numbers; empty if it is not a SeqSet."""
        if not isinstance(self.all, SeqSet):
            return []
        return _enumerate(self.all)

    def all_uids(self) -> list[int]:
        """``all`` as UIDs; empty if it is not a UIDSet."""
        if not isinstance(self.all, UIDSet):
            return []
        return _enumerate(self.all)


def _enumerate(num_set: NumSet) -> list[int]:
    try:
        return num_set.nums()
    except ValueError:
        raise ValueError("SearchData.all is a dynamic number set") from None