"""Wire-level primitives shared by the IMAP encoder and decoder."""

from __future__ import annotations

import threading
from enum import IntEnum
from typing import Optional

from .imapnum import parse_set
from .numset import NumSet, SeqSet, UIDSet


class ConnSide(IntEnum):
    """The side of a connection."""

    CLIENT = 1
    SERVER = 2


class NumKind(IntEnum):
    """How a message number is interpreted."""

    SEQ = 1
    UID = 2


class ContinuationRequest:
    """A continuation request.

    The sender calls either done() or cancel(); the receiver calls wait().
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._err: Optional[BaseException] = None
        self._text = ""

    def _finish(self) -> None:
        if self._event.is_set():
            raise RuntimeError("imapwire: continuation request already completed")
        self._event.set()

    def cancel(self, err: Optional[BaseException] = None) -> None:
        """Cancel the request; wait() then raises err."""
        if self._event.is_set():
            raise RuntimeError("imapwire: continuation request already completed")
        if err is None:
            err = RuntimeError("imapwire: continuation request cancelled")
        self._err = err
        self._finish()

    def done(self, text: str) -> None:
        """Complete the request with the server's continuation text."""
        if self._event.is_set():
            raise RuntimeError("imapwire: continuation request already completed")
        self._text = text
        self._finish()

    def wait(self) -> str:
        """Block until the request completes and return its text."""
        self._event.wait()
        if self._err is not None:
            raise self._err
        return self._text


def num_set_kind(num_set: NumSet) -> NumKind:
    """Return whether a number set holds sequence numbers or UIDs."""
    if isinstance(num_set, SeqSet):
        return NumKind.SEQ
    if isinstance(num_set, UIDSet):
        return NumKind.UID
    raise TypeError(f"imap: invalid number set type {type(num_set).__name__}")


def parse_seq_set(value: str) -> SeqSet:
    """Parse a sequence-set string into a SeqSet."""
    return SeqSet(parse_set(value))