"""Modified UTF-7 encoding used for IMAP mailbox names."""

from __future__ import annotations

import base64
import itertools
import struct

_MIN = 0x20  # lowest self-representing code point
_MAX = 0x7E  # highest self-representing code point

_B64_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+,"
)
_ALTCHARS = b"+,"


class InvalidUTF7Error(ValueError):
    """Raised when a string is not valid modified UTF-7."""

    def __init__(self, message: str = "invalid UTF-7") -> None:
        super().__init__(message)


def _is_printable(ch: str) -> bool:
    return _MIN <= ord(ch) <= _MAX


def _lenient_utf8(data: bytes) -> str:
    """Decode UTF-8, turning every byte that starts no valid sequence into U+FFFD."""
    chars = []
    i = 0
    n = len(data)
    while i < n:
        lead = data[i]
        if lead < 0x80:
            chars.append(chr(lead))
            i += 1
            continue
        if 0xC2 <= lead <= 0xDF:
            size = 2
        elif 0xE0 <= lead <= 0xEF:
            size = 3
        elif 0xF0 <= lead <= 0xF4:
            size = 4
        else:
            size = 0
        if size:
            try:
                ch = data[i : i + size].decode("utf-8")
            except UnicodeDecodeError:
                ch = ""
            if len(ch) == 1:
                chars.append(ch)
                i += size
                continue
        chars.append("\ufffd")
        i += 1
    return "".join(chars)


def _encode_segment(text: str) -> str:
    text = "".join("\ufffd" if 0xD800 <= ord(c) <= 0xDFFF else c for c in text)
    payload = base64.b64encode(text.encode("utf-16-be"), altchars=_ALTCHARS)
    return "&" + payload.decode("ascii").rstrip("=") + "-"


def encode(src: str | bytes) -> str:
    """Encode a string with modified UTF-7.

    Byte strings are read as UTF-8; malformed bytes become U+FFFD.
    """
    if isinstance(src, (bytes, bytearray)):
        src = _lenient_utf8(bytes(src))
    parts = []
    for printable, group in itertools.groupby(src, key=_is_printable):
        text = "".join(group)
        if printable:
            parts.append(text.replace("&", "&-"))
        else:
            parts.append(_encode_segment(text))
    return "".join(parts)


def _decode_segment(segment: str) -> str:
    if segment.endswith("="):
        raise InvalidUTF7Error()
    if any(c not in _B64_ALPHABET for c in segment):
        raise InvalidUTF7Error()
    if len(segment) % 4 == 1:
        raise InvalidUTF7Error()
    padded = segment + "=" * (-len(segment) % 4)
    data = base64.b64decode(padded, altchars=_ALTCHARS)
    if not data or len(data) % 2:
        raise InvalidUTF7Error()

    units = iter(struct.unpack(f">{len(data) // 2}H", data))
    chars = []
    for unit in units:
        if 0xD800 <= unit <= 0xDFFF:
            low = next(units, None)
            if low is None or not (0xD800 <= unit < 0xDC00 and 0xDC00 <= low < 0xE000):
                raise InvalidUTF7Error()
            chars.append(chr(0x10000 + ((unit - 0xD800) << 10) + (low - 0xDC00)))
        elif _MIN <= unit <= _MAX:
            raise InvalidUTF7Error()
        else:
            chars.append(chr(unit))
    return "".join(chars)


def decode(src: str | bytes) -> str:
    """Decode a modified UTF-7 string. Raw non-ASCII text is accepted as is."""
    if isinstance(src, (bytes, bytearray)):
        try:
            src = bytes(src).decode("utf-8")
        except UnicodeDecodeError:
            raise InvalidUTF7Error("invalid UTF-8") from None

    out = []
    ascii_mode = True
    i = 0
    length = len(src)
    while i < length:
        ch = src[i]
        code = ord(ch)
        if code < _MIN or _MAX < code < 0x80:
            raise InvalidUTF7Error()
        if ch != "&":
            out.append(ch)
            ascii_mode = True
            i += 1
            continue

        end = src.find("-", i + 1)
        segment = src[i + 1 :] if end < 0 else src[i + 1 : end]
        if "\r" in segment or "\n" in segment:
            raise InvalidUTF7Error()
        if end < 0:
            raise InvalidUTF7Error()  # implicit shift
        if not segment:
            out.append("&")
            ascii_mode = True
        else:
            if not ascii_mode:
                raise InvalidUTF7Error()  # null shift
            out.append(_decode_segment(segment))
            ascii_mode = False
        i = end + 1
    return "".join(out)


def escape(src: str) -> str:
    """Pass raw UTF-8 text through, escaping only the '&' shift marker."""
    return src.replace("&", "&-")