"""Status responses and the error raised for them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class StatusResponseType(str, Enum):
    """A generic status response type."""

    OK = "OK"
    NO = "NO"
    BAD = "BAD"
    PREAUTH = "PREAUTH"
    BYE = "BYE"


class ResponseCode(str, Enum):
    """A response code."""

    ALERT = "ALERT"
    ALREADY_EXISTS = "ALREADYEXISTS"
    AUTHENTICATION_FAILED = "AUTHENTICATIONFAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATIONFAILED"
    BAD_CHARSET = "BADCHARSET"
    CANNOT = "CANNOT"
    CLIENT_BUG = "CLIENTBUG"
    CONTACT_ADMIN = "CONTACTADMIN"
    CORRUPTION = "CORRUPTION"
    EXPIRED = "EXPIRED"
    HAS_CHILDREN = "HASCHILDREN"
    IN_USE = "INUSE"
    LIMIT = "LIMIT"
    NON_EXISTENT = "NONEXISTENT"
    NO_PERM = "NOPERM"
    OVER_QUOTA = "OVERQUOTA"
    PARSE = "PARSE"
    PRIVACY_REQUIRED = "PRIVACYREQUIRED"
    SERVER_BUG = "SERVERBUG"
    TRY_CREATE = "TRYCREATE"
    UNAVAILABLE = "UNAVAILABLE"
    UNKNOWN_CTE = "UNKNOWN-CTE"

    # METADATA
    TOO_MANY = "TOOMANY"
    NO_PRIVATE = "NOPRIVATE"

    # APPENDLIMIT
    TOO_BIG = "TOOBIG"


Code = Union[ResponseCode, str]


def _value(item: Union[Enum, str]) -> str:
    return item.value if isinstance(item, Enum) else str(item)


@dataclass
class StatusResponse:
    """A generic status response (RFC 9051 section 7.1)."""

    type: StatusResponseType
    code: Code = ""
    text: str = ""


class IMAPError(Exception):
    """An IMAP error caused by a status response."""

    def __init__(
        self,
        type: StatusResponseType,
        code: Code = "",
        text: str = "",
    ) -> None:
        super().__init__(type, code, text)
        self.type = type
        self.code = code
        self.text = text

    def __str__(self) -> str:
        parts = [f"imap: {_value(self.type)}"]
        if _value(self.code):
            parts.append(f"[{_value(self.code)}]")
        parts.append(self.text or "<unknown>")
        return " ".join(parts)