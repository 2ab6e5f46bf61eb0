"""
Error taxonomy for calls made by the console.

ValidationError is raised both for local pre-flight checks (never sent to the
backend) and for 400/422 responses. Every other class maps to a backend or
transport failure.
"""
from typing import Any, Dict, Optional


class ApiError(Exception):
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None, payload: Any = None):
        self.message = message or self.default_message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message)


class ValidationError(ApiError):
    default_message = "Invalid data"

    def __init__(self, message: Optional[str] = None, errors: Optional[Dict[str, str]] = None, **kwargs):
        self.errors = dict(errors or {})
        if message is None and self.errors:
            message = "; ".join(self.errors.values())
        super().__init__(message, **kwargs)


class Unauthorized(ApiError):
    default_message = "Authentication required"


class Forbidden(ApiError):
    default_message = "Not allowed"


class NotFound(ApiError):
    default_message = "Not found"


class ServerError(ApiError):
    default_message = "Something went wrong. Please try again."


class NetworkError(ApiError):
    default_message = "Could not reach the server"


def extract_message(payload: Any) -> Optional[str]:
    """Pull the human readable message out of an error body, if there is one."""
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, dict):
        return None
    for key in ("message", "error", "detail"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        # FastAPI request validation: list of {"loc", "msg", ...}
        if isinstance(value, list) and value:
            msgs = [item.get("msg") for item in value if isinstance(item, dict) and item.get("msg")]
            if msgs:
                return "; ".join(msgs)
    return None


def error_for_status(status_code: int, payload: Any = None) -> ApiError:
    message = extract_message(payload)
    if status_code == 401:
        cls = Unauthorized
    elif status_code == 403:
        cls = Forbidden
    elif status_code == 404:
        cls = NotFound
    elif status_code in (400, 409, 422):
        cls = ValidationError
    else:
        cls = ServerError
    return cls(message, status_code=status_code, payload=payload)
