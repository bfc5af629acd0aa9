"""Writing IMAP data to a byte stream."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional, Union

from . import utf7
from .decoder import is_atom_char
from .numset import NumSet
from .wire import ConnSide, ContinuationRequest

_MAX_QUOTED = 4096


def _to_bytes(value: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return value.encode("utf-8", "surrogateescape")


def is_valid_flag(value: str) -> bool:
    """Whether value is a flag-keyword or flag-extension."""
    data = _to_bytes(value)
    for i, b in enumerate(data):
        if b == ord("\\"):
            if i != 0:
                return False
        elif not is_atom_char(b):
            return False
    return len(data) > 0


class LiteralWriter:
    """Receives the payload of a literal; exactly ``size`` bytes must be written."""

    def __init__(
        self,
        encoder: Optional[Encoder],
        size: int,
        error: Optional[BaseException] = None,
    ) -> None:
        self._encoder = encoder
        self._remaining = size
        self._error = error

    def write(self, data: Union[str, bytes, bytearray]) -> int:
        """Append data to the literal and return the number of bytes written."""
        if self._error is not None:
            raise self._error
        payload = _to_bytes(data)
        if self._remaining - len(payload) < 0:
            raise ValueError("wrote too many bytes in literal")
        assert self._encoder is not None
        self._encoder._buf += payload
        self._remaining -= len(payload)
        return len(payload)

    def close(self) -> None:
        """Finish the literal; raises if fewer bytes than announced were written."""
        if self._error is not None:
            raise self._error
        if self._encoder is not None:
            self._encoder._literal = False
        if self._remaining != 0:
            raise ValueError(
                f"wrote too few bytes in literal ({self._remaining} remaining)"
            )

    def __enter__(self) -> LiteralWriter:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.close()
        elif self._encoder is not None:
            self._encoder._literal = False


class ListEncoder:
    """Writes the items of a parenthesised list one at a time."""

    def __init__(self, encoder: Encoder) -> None:
        self._encoder: Optional[Encoder] = encoder
        self._count = 0

    def item(self) -> Encoder:
        """Start a new item and return the encoder to write it with."""
        if self._encoder is None:
            raise RuntimeError("imapwire: list already ended")
        if self._count > 0:
            self._encoder.sp()
        self._count += 1
        return self._encoder

    def end(self) -> None:
        """Close the list."""
        if self._encoder is None:
            raise RuntimeError("imapwire: list already ended")
        self._encoder.special(")")
        self._encoder = None


class Encoder:
    """Writes IMAP data.

    Most methods return the encoder so calls can be chained. Errors are kept
    until crlf() is called, which raises the first one; otherwise crlf() sends
    the buffered line to the writer and flushes it.
    """

    def __init__(self, writer: Any, side: ConnSide) -> None:
        self._writer = writer
        self.side = side
        # Allow raw UTF-8 in quoted strings (IMAP4rev2 or UTF8=ACCEPT).
        self.quoted_utf8 = False
        # Non-synchronizing literals for short payloads (client only).
        self.literal_minus = False
        # Non-synchronizing literals for all payloads (client only).
        self.literal_plus = False
        # Creates a continuation request for synchronizing literals (client only).
        self.new_continuation_request: Optional[
            Callable[[], Optional[ContinuationRequest]]
        ] = None
        self._buf = bytearray()
        self._err: Optional[BaseException] = None
        self._literal = False

    def _set_err(self, err: BaseException) -> None:
        if self._err is None:
            self._err = err

    def _write(self, data: bytes) -> Encoder:
        if self._err is not None:
            return self
        if self._literal:
            self._err = RuntimeError("imapwire: cannot encode while a literal is open")
            return self
        self._buf += data
        return self

    def _flush(self) -> None:
        data = bytes(self._buf)
        self._buf.clear()
        self._writer.write(data)
        flush = getattr(self._writer, "flush", None)
        if flush is not None:
            flush()

    def crlf(self) -> None:
        """Write CRLF and flush, raising the first error met on this line."""
        self._write(b"\r\n")
        if self._err is not None:
            raise self._err
        self._flush()

    def atom(self, value: str) -> Encoder:
        return self._write(_to_bytes(value))

    def sp(self) -> Encoder:
        return self._write(b" ")

    def special(self, ch: Union[str, int]) -> Encoder:
        data = bytes([ch]) if isinstance(ch, int) else _to_bytes(ch)
        return self._write(data)

    def quoted(self, value: Union[str, bytes]) -> Encoder:
        out = bytearray(b'"')
        for b in _to_bytes(value):
            if b in (ord('"'), ord("\\")):
                out.append(ord("\\"))
            out.append(b)
        out.append(ord('"'))
        return self._write(bytes(out))

    def string(self, value: Union[str, bytes]) -> Encoder:
        """Write a quoted string, or a literal when quoting cannot carry it."""
        data = _to_bytes(value)
        if not self._valid_quoted(data):
            self._string_literal(data)
            return self
        return self.quoted(data)

    def _valid_quoted(self, data: bytes) -> bool:
        if len(data) > _MAX_QUOTED:
            return False
        for b in data:
            if b in (0, 0x0D, 0x0A):
                return False
            if not self.quoted_utf8 and b > 0x7F:
                return False
        return True

    def _string_literal(self, data: bytes) -> None:
        sync: Optional[ContinuationRequest] = None
        if (
            self.side == ConnSide.CLIENT
            and (not self.literal_minus or len(data) > _MAX_QUOTED)
            and not self.literal_plus
        ):
            if self.new_continuation_request is not None:
                sync = self.new_continuation_request()
            if sync is None:
                self._set_err(RuntimeError("imapwire: cannot send synchronizing literal"))
                return
        writer = self.literal(len(data), sync)
        try:
            writer.write(data)
        except Exception as err:  # noqa: BLE001 - kept until crlf()
            self._set_err(err)
        try:
            writer.close()
        except Exception as err:  # noqa: BLE001 - kept until crlf()
            self._set_err(err)

    def mailbox(self, name: str) -> Encoder:
        """Write a mailbox name, encoding it as modified UTF-7 when needed."""
        if name.lower() == "inbox":
            return self.atom("INBOX")
        if self.quoted_utf8:
            encoded = utf7.escape(name)
        else:
            encoded = utf7.encode(name)
        return self.string(encoded)

    def num_set(self, num_set: NumSet) -> Encoder:
        text = str(num_set)
        if not text:
            self._set_err(ValueError("imapwire: cannot encode empty sequence set"))
            return self
        return self._write(text.encode("ascii"))

    def flag(self, flag: str) -> Encoder:
        if flag != "\\*" and not is_valid_flag(flag):
            self._set_err(ValueError(f"imapwire: invalid flag {flag!r}"))
            return self
        return self._write(_to_bytes(flag))

    def mailbox_attr(self, attr: str) -> Encoder:
        if not attr.startswith("\\") or not is_valid_flag(attr):
            self._set_err(ValueError(f"imapwire: invalid mailbox attribute {attr!r}"))
            return self
        return self._write(_to_bytes(attr))

    def number(self, value: int) -> Encoder:
        return self._write(str(int(value)).encode("ascii"))

    def number64(self, value: int) -> Encoder:
        return self._write(str(int(value)).encode("ascii"))

    def mod_seq(self, value: int) -> Encoder:
        return self._write(str(int(value)).encode("ascii"))

    def list(self, items: Iterable[Any], write_item: Callable[[Any], Any]) -> Encoder:
        """Write a parenthesised list, calling write_item for each item."""
        self.special("(")
        for i, item in enumerate(items):
            if i:
                self.sp()
            write_item(item)
        self.special(")")
        return self

    def begin_list(self) -> ListEncoder:
        self.special("(")
        return ListEncoder(self)

    def nil(self) -> Encoder:
        return self.atom("NIL")

    def text(self, value: str) -> Encoder:
        return self._write(_to_bytes(value))

    def uid(self, uid: int) -> Encoder:
        return self.number(uid)

    def literal(self, size: int, sync: Optional[ContinuationRequest]) -> LiteralWriter:
        """Start a literal of ``size`` bytes and return the writer for its payload.

        With a continuation request the literal is synchronizing: the line is
        flushed and the payload waits for the request to complete.
        """
        if sync is not None and self.side == ConnSide.SERVER:
            raise ValueError("imapwire: sync must be None on a server-side literal")

        self._write(b"{")
        self.number64(size)
        if sync is None and self.side == ConnSide.CLIENT:
            self._write(b"+")
        self._write(b"}")

        if sync is None:
            self._write(b"\r\n")
        else:
            try:
                self.crlf()
            except Exception as err:  # noqa: BLE001
                return LiteralWriter(None, size, err)
            try:
                sync.wait()
            except Exception as err:  # noqa: BLE001
                self._set_err(err)
                return LiteralWriter(None, size, err)

        self._literal = True
        return LiteralWriter(self, size)