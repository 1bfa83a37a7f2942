"""Unit tests for the error taxonomy and error body shape."""

from src.ff_common.errors import (
    AppError,
    AuthError,
    AuthErrorKind,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from src.ff_common.response import error_response


class TestAuthError:
    def test_expired_is_401_and_flagged(self) -> None:
        err = AuthError(AuthErrorKind.TOKEN_EXPIRED)
        assert err.http_status == 401
        assert err.is_expired
        assert err.message == "Token expired"

    def test_invalid_signature_is_403(self) -> None:
        err = AuthError(AuthErrorKind.INVALID_TOKEN)
        assert err.http_status == 403
        assert not err.is_expired

    def test_custom_message_overrides_default(self) -> None:
        err = AuthError(AuthErrorKind.INVALID_TOKEN, "Invalid token type")
        assert err.message == "Invalid token type"
        assert err.code == 1003

    def test_every_kind_has_a_distinct_code(self) -> None:
        codes = {AuthError(kind).code for kind in AuthErrorKind}
        assert len(codes) == len(AuthErrorKind)


def test_status_codes_by_family() -> None:
    assert ValidationError().http_status == 400
    assert NotFoundError("Goal", "g1").http_status == 404
    assert DatabaseError().http_status == 500
    assert isinstance(NotFoundError("Goal"), AppError)


def test_not_found_message_and_details() -> None:
    err = NotFoundError("Transaction", "abc")
    assert err.message == "Transaction not found"
    assert err.details == {"id": "abc"}


def test_error_response_omits_empty_fields() -> None:
    assert error_response("Boom") == {"error": "Boom"}
    assert error_response("Bad", 2001, [{"field": "amount"}]) == {
        "error": "Bad",
        "code": 2001,
        "details": [{"field": "amount"}],
    }
