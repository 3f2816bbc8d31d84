from campuschat.core.exceptions import (
    NotFoundException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)


def test_domain_exceptions_map_to_status_codes():
    assert ValidationException("bad").to_http_exception().status_code == 400
    assert NotFoundException("gone").to_http_exception().status_code == 404
    assert ServiceException("broken").to_http_exception().status_code == 500


def test_detail_carries_message_code_and_details():
    exc = ValidationException("too long", details={"max_length": 10})

    detail = exc.to_http_exception().detail

    assert detail == {
        "message": "too long",
        "code": "ValidationException",
        "details": {"max_length": 10},
    }


def test_service_exception_hides_details():
    exc = ServiceException("Failed to save", details={"sql": "INSERT ..."})

    assert exc.to_http_exception().detail["details"] == {}


def test_unauthorized_sets_bearer_challenge():
    http_exc = UnauthorizedException("who are you").to_http_exception()

    assert http_exc.status_code == 401
    assert http_exc.headers == {"WWW-Authenticate": "Bearer"}
