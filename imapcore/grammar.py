"""Shared grammar helpers: dates, flags, mailbox attributes and SASL payloads."""

from __future__ import annotations

import base64
import datetime as _dt
import re
from typing import Optional

from .decoder import Decoder, DecoderExpectError

FLAG_RECENT = "\\Recent"  # removed in IMAP4rev2
FLAG_WILDCARD = "\\*"

_FLAGS = (
    "\\Seen",
    "\\Answered",
    "\\Flagged",
    "\\Deleted",
    "\\Draft",
    "$Forwarded",
    "$MDNSent",
    "$Junk",
    "$NotJunk",
    "$Phishing",
    "$Important",
)

_MAILBOX_ATTRS = (
    "\\NonExistent",
    "\\Noinferiors",
    "\\Noselect",
    "\\HasChildren",
    "\\HasNoChildren",
    "\\Marked",
    "\\Unmarked",
    "\\Subscribed",
    "\\Remote",
    "\\All",
    "\\Archive",
    "\\Drafts",
    "\\Flagged",
    "\\Junk",
    "\\Sent",
    "\\Trash",
    "\\Important",
)

_CANON_FLAG = {flag.lower(): flag for flag in _FLAGS}
_CANON_MAILBOX_ATTR = {attr.lower(): attr for attr in _MAILBOX_ATTRS}

_MONTHS = {
    name: i
    for i, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun",
         "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}

_DATE_RE = re.compile(r"([0-9]{1,2})-([A-Za-z]{3})-([0-9]{4})")
_DATE_TIME_RE = re.compile(
    r" ?([0-9]{1,2})-([A-Za-z]{3})-([0-9]{4}) "
    r"([0-9]{1,2}):([0-9]{2}):([0-9]{2}) ([+-])([0-9]{2})([0-9]{2})"
)


def _month(name: str) -> int:
    try:
        return _MONTHS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown month {name!r}") from None


def _parse_date(value: str) -> _dt.date:
    match = _DATE_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as a date")
    day, month, year = match.groups()
    return _dt.date(int(year), _month(month), int(day))


def _parse_date_time(value: str) -> _dt.datetime:
    match = _DATE_TIME_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as a date-time")
    day, month, year, hour, minute, second, sign, tz_hour, tz_min = match.groups()
    offset = _dt.timedelta(hours=int(tz_hour), minutes=int(tz_min))
    if sign == "-":
        offset = -offset
    return _dt.datetime(
        int(year),
        _month(month),
        int(day),
        int(hour),
        int(minute),
        int(second),
        tzinfo=_dt.timezone(offset),
    )


def decode_date_time(dec: Decoder) -> Optional[_dt.datetime]:
    """Read a quoted date-time; None if no quoted string follows."""
    value = dec.quoted()
    if value is None:
        return None
    try:
        return _parse_date_time(value)
    except ValueError as err:
        raise ValueError(f"in date-time: {err}") from err


def expect_date_time(dec: Decoder) -> _dt.datetime:
    """Read a quoted date-time, raising if none follows."""
    value = decode_date_time(dec)
    dec.expect(value is not None, "date-time")
    return value  # type: ignore[return-value]


def expect_date(dec: Decoder) -> _dt.date:
    """Read a date such as "1-Feb-1994"."""
    value = dec.expect_astring()
    try:
        return _parse_date(value)
    except ValueError as err:
        raise ValueError(f"in date: {err}") from err


def canonical_flag(value: str) -> str:
    """Return the standard spelling of a well-known flag, else value itself."""
    return _CANON_FLAG.get(value.lower(), value)


def canonical_mailbox_attr(value: str) -> str:
    """Return the standard spelling of a well-known mailbox attribute."""
    return _CANON_MAILBOX_ATTR.get(value.lower(), value)


def expect_flag(dec: Decoder) -> str:
    """Read a flag, including the "\\*" permanent-flag wildcard."""
    is_system = dec.special("\\")
    if is_system and dec.special("*"):
        return FLAG_WILDCARD
    try:
        name = dec.expect_atom()
    except DecoderExpectError as err:
        raise DecoderExpectError(f"in flag: {err.message}") from err
    if is_system:
        name = "\\" + name
    return canonical_flag(name)


def expect_flag_list(dec: Decoder) -> list[str]:
    """Read a parenthesised list of flags."""
    flags: list[str] = []
    dec.expect_list(lambda: flags.append(expect_flag(dec)))
    return flags


def expect_mailbox_attr(dec: Decoder) -> str:
    """Read a mailbox attribute."""
    return canonical_mailbox_attr(expect_flag(dec))


def expect_mailbox_attr_list(dec: Decoder) -> list[str]:
    """Read a parenthesised list of mailbox attributes."""
    attrs: list[str] = []
    dec.expect_list(lambda: attrs.append(expect_mailbox_attr(dec)))
    return attrs


def encode_sasl(data: bytes) -> str:
    """Encode a SASL payload; an empty payload is sent as "="."""
    if not data:
        return "="
    return base64.b64encode(data).decode("ascii")


def decode_sasl(value: str) -> bytes:
    """Decode a SASL payload; "=" stands for an empty one."""
    if value == "=":
        return b""
    return base64.b64decode(value, validate=True)