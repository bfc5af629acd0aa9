import pytest

from imapcore.response import (
    IMAPError,
    ResponseCode,
    StatusResponse,
    StatusResponseType,
)


def test_error_with_code():
    err = IMAPError(
        StatusResponseType.NO,
        ResponseCode.AUTHENTICATION_FAILED,
        "Authentication failed",
    )
    assert str(err) == "imap: NO [AUTHENTICATIONFAILED] Authentication failed"


def test_error_without_code():
    err = IMAPError(StatusResponseType.BAD, "", "STARTTLS not available")
    assert str(err) == "imap: BAD STARTTLS not available"


def test_error_without_text():
    err = IMAPError(StatusResponseType.NO)
    assert str(err) == "imap: NO <unknown>"


def test_error_with_custom_code_string():
    err = IMAPError(StatusResponseType.OK, "CLOSED", "Previous mailbox is now closed")
    assert str(err) == "imap: OK [CLOSED] Previous mailbox is now closed"


def test_error_is_raisable_and_keeps_fields():
    err = IMAPError(StatusResponseType.NO, ResponseCode.BAD_CHARSET, "bad")
    assert err.type is StatusResponseType.NO
    assert err.code is ResponseCode.BAD_CHARSET
    assert err.text == "bad"
    with pytest.raises(IMAPError, match=r"^imap: NO \[BADCHARSET\] bad$"):
        raise err


def test_response_code_lookup_by_wire_value():
    assert ResponseCode("UNKNOWN-CTE") is ResponseCode.UNKNOWN_CTE
    assert ResponseCode("TOOBIG") is ResponseCode.TOO_BIG
    with pytest.raises(ValueError):
        ResponseCode("NOT-A-CODE")


def test_status_response_defaults():
    resp = StatusResponse(StatusResponseType.PREAUTH)
    assert resp.code == ""
    assert resp.text == ""
    assert StatusResponseType("BYE") is StatusResponseType.BYE