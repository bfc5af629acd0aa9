"""Reading IMAP data from a byte stream."""

from __future__ import annotations

import io
from typing import BinaryIO, Callable, Optional, Tuple, Union

from . import utf7
from .imapnum import parse_set
from .numset import NumSet, SeqSet, UIDSet, search_res
from .wire import ConnSide, NumKind

MAX_LIST_DEPTH = 1000

_MAX_UINT32 = 0xFFFFFFFF
_MAX_INT64 = (1 << 63) - 1
_MAX_UINT64 = (1 << 64) - 1

_NON_ATOM = frozenset(b'(){ %*"\\]')
_CR = ord("\r")
_LF = ord("\n")


def _byte(ch: Union[int, str]) -> int:
    return ord(ch) if isinstance(ch, str) else ch


def _to_str(data: bytes) -> str:
    return data.decode("utf-8", "surrogateescape")


def is_atom_char(ch: Union[int, str]) -> bool:
    """Whether the byte ch is an ATOM-CHAR."""
    b = _byte(ch)
    if b in _NON_ATOM:
        return False
    return not (b < 0x20 or 0x7F <= b <= 0x9F)


def _is_num_set_char(ch: int) -> bool:
    return ch == ord("*") or is_atom_char(ch)


class DecoderExpectError(ValueError):
    """Raised when the input does not hold the expected element."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"imapwire: {self.message}"


class LiteralReader:
    """Reads the payload of a literal, or of a quoted string standing in for one."""

    def __init__(self, size: int, decoder: Optional[Decoder] = None, data: bytes = b"") -> None:
        self.size = size
        self._decoder = decoder
        self._data = io.BytesIO(data)
        self._remaining = size

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes of the payload; all the rest if size is negative."""
        n = self._remaining if size is None or size < 0 else min(size, self._remaining)
        if self._decoder is not None:
            chunk = self._decoder._read_raw(n)
        else:
            chunk = self._data.read(n)
        self._remaining -= len(chunk)
        if self._remaining == 0:
            self._cancel()
        elif len(chunk) < n:
            self._cancel()
            raise EOFError("unexpected EOF in literal")
        return chunk

    def _cancel(self) -> None:
        if self._decoder is None:
            return
        self._decoder._literal = False
        self._decoder = None


class Decoder:
    """Reads IMAP data.

    Methods named after grammar elements return the element, or None/False if
    another element follows. The expect_* methods raise DecoderExpectError
    instead. Running out of input raises EOFError.
    """

    def __init__(self, reader: Union[BinaryIO, bytes, bytearray], side: ConnSide) -> None:
        if isinstance(reader, (bytes, bytearray)):
            reader = io.BytesIO(bytes(reader))
        self._reader = reader
        self.side = side
        # Called with (size, non_sync) before a literal is buffered; may raise.
        self.check_buffered_literal: Optional[Callable[[int, bool], None]] = None
        self._buf = bytearray()
        self._pos = 0
        self._literal = False
        self._crlf = False
        self._list_depth = 0

    # Low-level buffer handling

    def _read_chunk(self) -> bytes:
        read1 = getattr(self._reader, "read1", None)
        chunk = read1(4096) if read1 is not None else self._reader.read(1)
        return chunk or b""

    def _fill(self) -> bool:
        if self._pos < len(self._buf):
            return True
        chunk = self._read_chunk()
        if not chunk:
            return False
        tail = self._buf[-1:]  # keep one byte so it can be unread
        self._buf = bytearray(tail) + chunk
        self._pos = len(tail)
        return True

    def _peek_buffered(self) -> Optional[int]:
        if self._pos < len(self._buf):
            return self._buf[self._pos]
        return None

    def _read_raw(self, n: int) -> bytes:
        out = bytearray()
        while len(out) < n:
            if not self._fill():
                break
            take = min(n - len(out), len(self._buf) - self._pos)
            out += self._buf[self._pos : self._pos + take]
            self._pos += take
        return bytes(out)

    def _unread(self) -> None:
        if self._pos == 0:
            raise RuntimeError("imapwire: failed to unread byte")
        self._pos -= 1

    def _read_byte(self) -> int:
        self._crlf = False
        if self._literal:
            raise RuntimeError("imapwire: cannot decode while a literal is open")
        if not self._fill():
            raise EOFError("unexpected EOF")
        b = self._buf[self._pos]
        self._pos += 1
        return b

    def _accept(self, want: int) -> bool:
        if self._read_byte() != want:
            self._unread()
            return False
        return True

    # Grammar elements

    def eof(self) -> bool:
        """Whether the end of the input is reached."""
        return not self._fill()

    def expect(self, ok: bool, name: str) -> None:
        """Raise DecoderExpectError naming the expected element unless ok."""
        if ok:
            return
        msg = f"expected {name}"
        nxt = self._peek_buffered()
        if nxt is not None:
            msg += f", got {bytes([nxt])!r}"
        raise DecoderExpectError(msg)

    def sp(self) -> bool:
        """Consume a space; a parenthesised list may follow without one."""
        if self._accept(ord(" ")):
            b = self._read_byte()
            self._unread()
            return b not in (_CR, _LF)
        b = self._read_byte()
        self._unread()
        return b == ord("(")

    def expect_sp(self) -> None:
        self.expect(self.sp(), "SP")

    def crlf(self) -> bool:
        """Consume a line ending, tolerating a trailing space and a lone LF."""
        self._accept(ord(" "))
        self._accept(_CR)
        if not self._accept(_LF):
            return False
        self._crlf = True
        return True

    def expect_crlf(self) -> None:
        self.expect(self.crlf(), "CRLF")

    def take_while(self, valid: Callable[[int], bool]) -> Optional[str]:
        """Consume bytes while valid(byte) holds; None if there are none."""
        out = bytearray()
        while True:
            b = self._read_byte()
            if not valid(b):
                self._unread()
                break
            out.append(b)
        if not out:
            return None
        return _to_str(bytes(out))

    def atom(self) -> Optional[str]:
        return self.take_while(is_atom_char)

    def expect_atom(self) -> str:
        value = self.atom()
        self.expect(value is not None, "atom")
        return value  # type: ignore[return-value]

    def expect_nil(self) -> None:
        value = self.expect_atom()
        self.expect(value == "NIL", "NIL")

    def special(self, ch: Union[int, str]) -> bool:
        return self._accept(_byte(ch))

    def expect_special(self, ch: Union[int, str]) -> None:
        char = ch if isinstance(ch, str) else chr(ch)
        self.expect(self.special(ch), f"'{char}'")

    def text(self) -> Optional[str]:
        """Consume everything up to the end of the line."""
        out = bytearray()
        while True:
            b = self._read_byte()
            if b in (_CR, _LF):
                self._unread()
                break
            out.append(b)
        if not out:
            return None
        return _to_str(bytes(out))

    def expect_text(self) -> str:
        value = self.text()
        self.expect(value is not None, "text")
        return value  # type: ignore[return-value]

    def discard_until_byte(self, ch: Union[int, str]) -> None:
        """Skip input up to, not including, the byte ch."""
        want = _byte(ch)
        while self._read_byte() != want:
            pass
        self._unread()

    def discard_line(self) -> None:
        """Skip the rest of the current line, unless a line just ended."""
        if self._crlf:
            return
        self.text()
        self.crlf()

    def discard_value(self) -> None:
        """Skip a string, list or atom."""
        if self.string() is not None:
            return
        if self.list(self.discard_value):
            return
        if self.atom() is not None:
            return
        self.expect(False, "value")

    def _number_str(self) -> Optional[str]:
        return self.take_while(lambda b: 0x30 <= b <= 0x39)

    def number(self) -> Optional[int]:
        """Read a 32-bit unsigned number; None if absent or too large."""
        digits = self._number_str()
        if digits is None:
            return None
        value = int(digits)
        return value if value <= _MAX_UINT32 else None

    def expect_number(self) -> int:
        value = self.number()
        self.expect(value is not None, "number")
        return value  # type: ignore[return-value]

    def expect_body_fld_octets(self) -> int:
        """Read a body size, accepting the bogus "-1" some servers send as 0."""
        if self._accept(ord("-")):
            self.expect(self._accept(ord("1")), "-1 (body-fld-octets workaround)")
            return 0
        return self.expect_number()

    def number64(self) -> Optional[int]:
        """Read a 63-bit number; None if absent or too large."""
        digits = self._number_str()
        if digits is None:
            return None
        value = int(digits)
        return value if value <= _MAX_INT64 else None

    def expect_number64(self) -> int:
        value = self.number64()
        self.expect(value is not None, "number64")
        return value  # type: ignore[return-value]

    def mod_seq(self) -> Optional[int]:
        """Read a 64-bit unsigned mod-sequence value."""
        digits = self._number_str()
        if digits is None:
            return None
        value = int(digits)
        return value if value <= _MAX_UINT64 else None

    def expect_mod_seq(self) -> int:
        value = self.mod_seq()
        self.expect(value is not None, "mod-sequence-value")
        return value  # type: ignore[return-value]

    def _quoted_bytes(self) -> Optional[bytes]:
        if not self.special('"'):
            return None
        out = bytearray()
        while True:
            b = self._read_byte()
            if b == ord('"'):
                break
            if b == ord("\\"):
                b = self._read_byte()
            out.append(b)
        return bytes(out)

    def quoted(self) -> Optional[str]:
        data = self._quoted_bytes()
        return None if data is None else _to_str(data)

    def expect_astring(self) -> str:
        value = self.quoted()
        if value is not None:
            return value
        value = self.literal()
        if value is not None:
            return value
        return self.expect_atom()

    def string(self) -> Optional[str]:
        value = self.quoted()
        if value is not None:
            return value
        return self.literal()

    def expect_string(self) -> str:
        value = self.string()
        self.expect(value is not None, "string")
        return value  # type: ignore[return-value]

    def expect_nstring(self) -> Optional[str]:
        """Read a string, or NIL which gives None."""
        value = self.atom()
        if value is not None:
            self.expect(value == "NIL", "nstring")
            return None
        return self.expect_string()

    def expect_nstring_reader(self) -> Tuple[Optional[LiteralReader], bool]:
        """Read an nstring as a reader; NIL gives (None, True)."""
        value = self.atom()
        if value is not None:
            self.expect(value == "NIL", "nstring")
            return None, True
        data = self._quoted_bytes()
        if data is not None:
            return LiteralReader(len(data), data=data), True
        result = self.literal_reader()
        self.expect(result is not None, "nstring")
        return result  # type: ignore[return-value]

    def list(self, f: Callable[[], None]) -> bool:
        """Read a parenthesised list, calling f for each item."""
        if not self.special("("):
            return False
        if self.special(")"):
            return True
        self._list_depth += 1
        try:
            if self._list_depth >= MAX_LIST_DEPTH:
                raise ValueError("imapwire: exceeded max depth")
            while True:
                f()
                if self.special(")"):
                    return True
                self.expect_sp()
        finally:
            self._list_depth -= 1

    def expect_list(self, f: Callable[[], None]) -> None:
        self.expect(self.list(f), "(")

    def expect_nlist(self, f: Callable[[], None]) -> None:
        """Read a list, or NIL which is treated as an empty list."""
        value = self.atom()
        if value is not None:
            self.expect(value == "NIL", "NIL")
            return
        self.expect_list(f)

    def expect_mailbox(self) -> str:
        """Read a mailbox name, decoding modified UTF-7."""
        name = self.expect_astring()
        if name.casefold() == "inbox":
            return "INBOX"
        return utf7.decode(name.encode("utf-8", "surrogateescape"))

    def expect_uid(self) -> int:
        return self.expect_number()

    def expect_num_set(self, kind: NumKind) -> NumSet:
        """Read a sequence-set, or '$' for the last SEARCH result."""
        if self.special("$"):
            return search_res()
        value = self.take_while(_is_num_set_char)
        self.expect(value is not None, "sequence-set")
        ranges = parse_set(value)  # type: ignore[arg-type]
        if kind == NumKind.SEQ:
            return SeqSet(ranges)
        return UIDSet(ranges)

    def expect_uid_set(self) -> UIDSet:
        return self.expect_num_set(NumKind.UID)  # type: ignore[return-value]

    def literal(self) -> Optional[str]:
        """Read a literal fully into a string."""
        result = self.literal_reader()
        if result is None:
            return None
        lit, non_sync = result
        if self.check_buffered_literal is not None:
            try:
                self.check_buffered_literal(lit.size, non_sync)
            except BaseException:
                lit._cancel()
                raise
        return _to_str(lit.read())

    def literal_reader(self) -> Optional[Tuple[LiteralReader, bool]]:
        """Open a literal; returns (reader, non_sync) or None if none follows.

        The reader must be read to its end before decoding continues.
        """
        if not self.special("{"):
            return None
        size = self.expect_number64()
        non_sync = False
        if self.side == ConnSide.SERVER:
            non_sync = self._accept(ord("+"))
        self.expect_special("}")
        self.expect_crlf()
        self._literal = True
        return LiteralReader(size, decoder=self), non_sync

    def expect_literal_reader(self) -> Tuple[LiteralReader, bool]:
        result = self.literal_reader()
        self.expect(result is not None, "literal")
        return result  # type: ignore[return-value]