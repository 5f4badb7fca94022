"""
Application error taxonomy.

Every error carries the HTTP status it maps to and renders as the JSON
envelope ``{"error", "message", "code"}`` (plus ``details`` when present).
"""

from typing import Any, Dict, Iterable, List, Optional


class AppError(Exception):
    status_code = 500
    code = "server_error"
    error = "Server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.error
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"error": self.error, "message": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    status_code = 400
    code = "validation_error"
    error = "Validation failed"


class Unauthenticated(AppError):
    status_code = 401
    code = "unauthenticated"
    error = "Authentication required"


class InvalidToken(Unauthenticated):
    code = "invalid_token"
    error = "Invalid or expired token"


class ProfileNotFound(Unauthenticated):
    code = "profile_not_found"
    error = "User profile not found"


class InvalidCredentials(Unauthenticated):
    code = "invalid_credentials"
    error = "Invalid username or password"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"
    error = "Insufficient permissions"


class ProtectedAccount(Forbidden):
    code = "protected_account"
    error = "The main admin account is protected"


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    error = "Not found"


class Conflict(AppError):
    status_code = 400
    code = "conflict"
    error = "Conflict"


class DuplicateUsername(Conflict):
    code = "duplicate_username"
    error = "Username already taken"


class DuplicateEmail(Conflict):
    code = "duplicate_email"
    error = "Email already in use"


class InvalidState(Conflict):
    code = "invalid_state"
    error = "Invalid state for this action"


class SelfActionForbidden(Conflict):
    code = "self_action_forbidden"
    error = "Cannot perform this action on your own account"


class ServerError(AppError):
    status_code = 500
    code = "server_error"
    error = "Server error"


def format_validation_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into JSON-safe ``{field, message}`` pairs."""
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({"field": ".".join(loc), "message": message})
    return formatted
