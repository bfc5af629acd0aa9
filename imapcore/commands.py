"""Parsing the arguments of the SEARCH, STATUS and STORE commands."""

from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass, field
from typing import Optional

from .data import StatusOptions, StoreFlags, StoreFlagsOp, StoreOptions
from .decoder import Decoder, is_atom_char
from .grammar import FLAG_RECENT, expect_date, expect_flag
from .numset import NumSet, search_res
from .response import IMAPError, ResponseCode, StatusResponseType
from .search import SearchCriteria, SearchCriteriaHeaderField, SearchOptions
from .wire import NumKind, parse_seq_set

_SUPPORTED_CHARSETS = ("US-ASCII", "UTF-8")

_SEARCH_RETURN_OPTIONS = {
    "MIN": "return_min",
    "MAX": "return_max",
    "ALL": "return_all",
    "COUNT": "return_count",
    "SAVE": "return_save",
}

_STATUS_ITEMS = {
    "MESSAGES": "num_messages",
    "UIDNEXT": "uid_next",
    "UIDVALIDITY": "uid_validity",
    "UNSEEN": "num_unseen",
    "DELETED": "num_deleted",
    "SIZE": "size",
    "APPENDLIMIT": "append_limit",
    "DELETED-STORAGE": "deleted_storage",
}

_FLAG_KEYS = ("ANSWERED", "DELETED", "DRAFT", "FLAGGED", "RECENT", "SEEN")
_NOT_FLAG_KEYS = ("UNANSWERED", "UNDELETED", "UNDRAFT", "UNFLAGGED", "UNSEEN")
_HEADER_KEYS = ("BCC", "CC", "FROM", "SUBJECT", "TO")
_DATE_KEYS = ("SINCE", "BEFORE", "ON", "SENTSINCE", "SENTBEFORE", "SENTON")


def _client_bug_error(text: str) -> IMAPError:
    return IMAPError(StatusResponseType.BAD, ResponseCode.CLIENT_BUG, text)


@dataclass
class SearchCommand:
    """Parsed SEARCH arguments.

    ``extended`` is set when RETURN options were given, which asks for an
    ESEARCH response.
    """

    criteria: SearchCriteria
    options: SearchOptions
    extended: bool = False


@dataclass
class StatusCommand:
    """Parsed STATUS arguments; ``recent`` is set when RECENT was requested."""

    mailbox: str
    options: StatusOptions
    recent: bool = False


@dataclass
class StoreCommand:
    """Parsed STORE arguments."""

    num_set: NumSet
    flags: StoreFlags
    options: StoreOptions = field(default_factory=StoreOptions)


def _maybe_read_search_key_atom(dec: Decoder) -> Optional[str]:
    return dec.take_while(lambda ch: ch == ord("*") or is_atom_char(ch))


def search_key_flag(key: str) -> str:
    """Turn a search key such as "ANSWERED" into the system flag "\\Answered"."""
    return "\\" + key.lower().title()


def read_search_return_opts(dec: Decoder) -> SearchOptions:
    """Read the parenthesised list that follows RETURN."""
    dec.expect_sp()
    options = SearchOptions()

    def read_item() -> None:
        name = dec.expect_atom().upper()
        attr = _SEARCH_RETURN_OPTIONS.get(name)
        if attr is None:
            raise _client_bug_error("unknown SEARCH RETURN option")
        setattr(options, attr, True)

    dec.expect_list(read_item)
    return options


def read_search_key(dec: Decoder, criteria: SearchCriteria) -> None:
    """Read one search key, or a parenthesised list of keys, into criteria."""
    key = _maybe_read_search_key_atom(dec)
    if key is not None:
        read_search_key_with_atom(dec, criteria, key)
        return
    dec.expect_list(lambda: read_search_key(dec, criteria))


def _read_date_key(dec: Decoder, criteria: SearchCriteria, key: str) -> None:
    dec.expect_sp()
    day = expect_date(dec)
    next_day = day + _dt.timedelta(days=1)
    narrowed = SearchCriteria()
    if key == "SINCE":
        narrowed.since = day
    elif key == "BEFORE":
        narrowed.before = day
    elif key == "ON":
        narrowed.since = day
        narrowed.before = next_day
    elif key == "SENTSINCE":
        narrowed.sent_since = day
    elif key == "SENTBEFORE":
        narrowed.sent_before = day
    else:  # SENTON
        narrowed.sent_since = day
        narrowed.sent_before = next_day
    criteria.intersect(narrowed)


def read_search_key_with_atom(dec: Decoder, criteria: SearchCriteria, key: str) -> None:
    """Read the rest of the search key whose leading atom is key."""
    key = key.upper()
    if key == "ALL":
        return
    if key == "UID":
        dec.expect_sp()
        criteria.uid.append(dec.expect_uid_set())
    elif key in _FLAG_KEYS:
        criteria.flag.append(search_key_flag(key))
    elif key in _NOT_FLAG_KEYS:
        criteria.not_flag.append(search_key_flag(key[2:]))
    elif key == "NEW":
        criteria.flag.append(FLAG_RECENT)
        criteria.not_flag.append(search_key_flag("SEEN"))
    elif key == "OLD":
        criteria.not_flag.append(FLAG_RECENT)
    elif key in ("KEYWORD", "UNKEYWORD"):
        dec.expect_sp()
        flag = expect_flag(dec)
        if key == "KEYWORD":
            criteria.flag.append(flag)
        else:
            criteria.not_flag.append(flag)
    elif key in _HEADER_KEYS:
        dec.expect_sp()
        value = dec.expect_astring()
        criteria.header.append(SearchCriteriaHeaderField(key.lower().title(), value))
    elif key == "HEADER":
        dec.expect_sp()
        name = dec.expect_astring()
        dec.expect_sp()
        value = dec.expect_astring()
        criteria.header.append(SearchCriteriaHeaderField(name, value))
    elif key in _DATE_KEYS:
        _read_date_key(dec, criteria, key)
    elif key == "BODY":
        dec.expect_sp()
        criteria.body.append(dec.expect_astring())
    elif key == "TEXT":
        dec.expect_sp()
        criteria.text.append(dec.expect_astring())
    elif key in ("LARGER", "SMALLER"):
        dec.expect_sp()
        n = dec.expect_number64()
        if key == "LARGER":
            criteria.intersect(SearchCriteria(larger=n))
        else:
            criteria.intersect(SearchCriteria(smaller=n))
    elif key == "NOT":
        dec.expect_sp()
        negated = SearchCriteria()
        read_search_key(dec, negated)
        criteria.not_.append(negated)
    elif key == "OR":
        dec.expect_sp()
        left = SearchCriteria()
        read_search_key(dec, left)
        dec.expect_sp()
        right = SearchCriteria()
        read_search_key(dec, right)
        criteria.or_.append((left, right))
    elif key == "$":
        criteria.uid.append(search_res())
    else:
        criteria.seq_num.append(parse_seq_set(key))


def parse_search_args(dec: Decoder) -> SearchCommand:
    """Parse what follows the SEARCH command name, up to and including CRLF."""
    dec.expect_sp()
    options = SearchOptions()
    extended = False

    atom = _maybe_read_search_key_atom(dec)
    if atom is not None and atom.upper() == "RETURN":
        options = read_search_return_opts(dec)
        dec.expect_sp()
        extended = True
        atom = _maybe_read_search_key_atom(dec)

    if atom is not None and atom.upper() == "CHARSET":
        dec.expect_sp()
        charset = dec.expect_astring()
        dec.expect_sp()
        if charset.upper() not in _SUPPORTED_CHARSETS:
            raise IMAPError(
                StatusResponseType.NO,
                ResponseCode.BAD_CHARSET,
                "Only US-ASCII and UTF-8 are supported SEARCH charsets",
            )
        atom = _maybe_read_search_key_atom(dec)

    criteria = SearchCriteria()
    while True:
        if atom is not None:
            read_search_key_with_atom(dec, criteria, atom)
            atom = None
        else:
            read_search_key(dec, criteria)
        if not dec.sp():
            break

    dec.expect_crlf()

    # If no return option is specified, ALL is assumed
    if not (
        options.return_min
        or options.return_max
        or options.return_all
        or options.return_count
    ):
        options.return_all = True

    return SearchCommand(criteria=criteria, options=options, extended=extended)


def read_status_item(dec: Decoder, options: StatusOptions) -> bool:
    """Read one STATUS data item into options; returns True for RECENT."""
    name = dec.expect_atom().upper()
    if name == "RECENT":
        return True
    attr = _STATUS_ITEMS.get(name)
    if attr is None:
        raise IMAPError(StatusResponseType.BAD, "", "Unknown STATUS data item")
    setattr(options, attr, True)
    return False


def parse_status_args(dec: Decoder) -> StatusCommand:
    """Parse what follows the STATUS command name, up to and including CRLF."""
    dec.expect_sp()
    mailbox = dec.expect_mailbox()
    dec.expect_sp()

    options = StatusOptions()
    recent = False

    def read_item() -> None:
        nonlocal recent
        if read_status_item(dec, options):
            recent = True

    dec.expect_list(read_item)
    dec.expect_crlf()
    return StatusCommand(mailbox=mailbox, options=options, recent=recent)


def parse_store_args(dec: Decoder, num_kind: NumKind) -> StoreCommand:
    """Parse what follows the STORE command name, up to and including CRLF."""
    dec.expect_sp()
    num_set = dec.expect_num_set(num_kind)
    dec.expect_sp()
    item = dec.expect_atom()
    dec.expect_sp()

    flags: list[str] = []
    if not dec.list(lambda: flags.append(expect_flag(dec))):
        while True:
            flags.append(expect_flag(dec))
            if not dec.sp():
                break
    dec.expect_crlf()

    item = item.upper()
    silent = item.endswith(".SILENT")
    if silent:
        item = item[: -len(".SILENT")]

    if item.startswith("+"):
        op = StoreFlagsOp.ADD
        item = item[1:]
    elif item.startswith("-"):
        op = StoreFlagsOp.DEL
        item = item[1:]
    else:
        op = StoreFlagsOp.SET

    if item != "FLAGS":
        raise _client_bug_error("STORE can only change FLAGS")

    return StoreCommand(
        num_set=num_set,
        flags=StoreFlags(op=op, silent=silent, flags=flags),
    )