"""Typed sets of message sequence numbers and UIDs."""

from __future__ import annotations

from typing import Union

from .imapnum import NumberSet


class _MessageSet(NumberSet):
    """A number set whose kind (sequence numbers or UIDs) matters for equality."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NumberSet):
            return NotImplemented
        return type(self) is type(other) and list(self) == list(other)

    __hash__ = None  # type: ignore[assignment]


class SeqSet(_MessageSet):
    """A set of message sequence numbers."""

    __slots__ = ()


class UIDSet(_MessageSet):
    """A set of message UIDs."""

    __slots__ = ()

    def __str__(self) -> str:
        if is_search_res(self):
            return "$"
        return super().__str__()

    def dynamic(self) -> bool:
        """Whether the set holds "*", an "n:*" range, or is the SEARCHRES marker."""
        return super().dynamic() or is_search_res(self)


class _SearchResMarker(UIDSet):
    """The empty, immutable marker that stands for the last SEARCH result."""

    __slots__ = ()

    def _insert(self, v) -> None:  # type: ignore[override]
        raise TypeError("the SEARCHRES marker cannot be modified")


NumSet = Union[SeqSet, UIDSet]

_SEARCH_RES = _SearchResMarker()


def seq_set_num(*args: int) -> SeqSet:
    """Build a SeqSet from sequence numbers; 0 stands for "*"."""
    result = SeqSet()
    result.add_num(*args)
    return result


def uid_set_num(*args: int) -> UIDSet:
    """Build a UIDSet from UIDs; 0 stands for "*"."""
    result = UIDSet()
    result.add_num(*args)
    return result


def search_res() -> UIDSet:
    """Return the marker referencing the last SEARCH result, sent as '$'."""
    return _SEARCH_RES


def is_search_res(num_set: object) -> bool:
    """Whether num_set is the SEARCHRES marker returned by search_res()."""
    return num_set is _SEARCH_RES