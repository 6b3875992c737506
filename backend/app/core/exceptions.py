"""
Domain errors.

Services raise these rather than HTTPException so that the admin, student
portal and mobile routers share one implementation. Every class fixes its
HTTP status and machine-readable code; app.main renders them as
``{"success": false, "error": {"code", "message", "details"}}``.

    if not department:
        raise DepartmentNotFoundError(department_id)
"""

from typing import Optional, Any, Dict


class AcademiaError(Exception):
    http_status: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if code:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


# --- 401 / 403 ---

class AuthenticationError(AcademiaError):
    http_status = 401
    code = "AUTH_FAILED"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message)


class AuthorizationError(AcademiaError):
    http_status = 403
    code = "NOT_AUTHORIZED"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class SchoolAccessDeniedError(AuthorizationError):
    """Acting inside a school the user does not belong to"""

    code = "SCHOOL_ACCESS_DENIED"

    def __init__(self, school_id: str):
        super().__init__("Access denied to this school")
        self.details = {"school_id": school_id}


# --- 404 ---

class ResourceNotFoundError(AcademiaError):
    """Code is derived from the resource type, e.g. FEE_ITEM_NOT_FOUND"""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            details={"resource_type": resource_type, "resource_id": resource_id},
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
        )


class SchoolNotFoundError(ResourceNotFoundError):
    def __init__(self, school_id: str):
        super().__init__("School", school_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class DepartmentNotFoundError(ResourceNotFoundError):
    def __init__(self, department_id: str):
        super().__init__("Department", department_id)


class StaffNotFoundError(ResourceNotFoundError):
    def __init__(self, staff_id: str):
        super().__init__("Staff", staff_id)


class StudentNotFoundError(ResourceNotFoundError):
    def __init__(self, student_id: str):
        super().__init__("Student", student_id)


# --- 409 ---

class ConflictError(AcademiaError):
    http_status = 409
    code = "CONFLICT"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class DuplicateResourceError(ConflictError):
    """A unique business key (school code, email, employee id...) is taken"""

    code = "DUPLICATE_RESOURCE"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class CapacityExceededError(ConflictError):
    code = "CAPACITY_EXCEEDED"

    def __init__(self, message: str, limit: int):
        super().__init__(message, details={"limit": limit})


class LibraryRuleError(ConflictError):
    """Loan limit, renewal limit or availability blocked a circulation request"""

    code = "LIBRARY_RULE_VIOLATION"

    def __init__(self, message: str, rule: str):
        super().__init__(message, details={"rule": rule})


# --- 400 ---

class ValidationError(AcademiaError):
    http_status = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class InvalidStatusTransitionError(ValidationError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")
        self.details = {"current": current, "requested": requested}


class PaymentError(AcademiaError):
    http_status = 400
    code = "PAYMENT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)


class OverpaymentError(PaymentError):
    code = "OVERPAYMENT"

    def __init__(self, amount: float, outstanding: float):
        super().__init__(f"Payment of {amount:.2f} exceeds outstanding balance of {outstanding:.2f}")
        self.details = {"amount": amount, "outstanding": outstanding}


def error_response(error: AcademiaError) -> Dict[str, Any]:
    """API error envelope"""
    return {"success": False, "error": error.to_dict()}
