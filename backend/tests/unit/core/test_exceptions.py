"""
Unit Tests for the error hierarchy and the API error envelope
"""
from app.core.exceptions import (
    AcademiaError,
    CapacityExceededError,
    ConflictError,
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidStatusTransitionError,
    LibraryRuleError,
    OverpaymentError,
    SchoolAccessDeniedError,
    StudentNotFoundError,
    ValidationError,
    error_response,
)


class TestHttpStatus:
    def test_statuses_follow_error_family(self):
        assert AcademiaError("boom").http_status == 500
        assert InvalidCredentialsError().http_status == 401
        assert SchoolAccessDeniedError("abc").http_status == 403
        assert StudentNotFoundError("abc").http_status == 404
        assert ConflictError("taken").http_status == 409
        assert ValidationError("bad").http_status == 400
        assert LibraryRuleError("limit", rule="max_loans").http_status == 409
        assert OverpaymentError(10, 5).http_status == 400


class TestErrorCodes:
    def test_not_found_code_is_derived_from_resource(self):
        error = StudentNotFoundError("s-1")

        assert error.code == "STUDENT_NOT_FOUND"
        assert error.details == {"resource_type": "Student", "resource_id": "s-1"}
        assert "s-1" in error.message

    def test_duplicate_carries_field(self):
        error = DuplicateResourceError("Email is already registered", field="email")

        assert isinstance(error, ConflictError)
        assert error.code == "DUPLICATE_RESOURCE"
        assert error.details == {"field": "email"}

    def test_capacity_carries_limit(self):
        error = CapacityExceededError("full", limit=30)

        assert error.code == "CAPACITY_EXCEEDED"
        assert error.details == {"limit": 30}

    def test_status_transition(self):
        error = InvalidStatusTransitionError("resolved", "reported")

        assert error.code == "INVALID_STATUS_TRANSITION"
        assert error.details == {"current": "resolved", "requested": "reported"}

    def test_overpayment_details(self):
        error = OverpaymentError(150.0, 100.0)

        assert error.code == "OVERPAYMENT"
        assert error.details == {"amount": 150.0, "outstanding": 100.0}
        assert "100.00" in error.message


class TestErrorResponse:
    def test_envelope(self):
        body = error_response(ValidationError("Score cannot exceed the maximum score", field="score"))

        assert body == {
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Score cannot exceed the maximum score",
                "details": {"field": "score"},
            },
        }
