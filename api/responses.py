"""
Standardized API response envelope.
Provides consistent response formatting across all endpoints.

Success: {"status": "success", "data"?, "message"?, "qr_code_url"?, "pagination"?}
Failure: {"status": "failed", "error": str} or {"status": "failed", "message": {field: [msgs]}}
Internal: {"status": "error", "message": str}
"""

from typing import Any, Mapping, Optional

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
STATUS_ERROR = "error"


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    qr_code_url: Optional[str] = None,
    pagination: Any = None,
) -> dict:
    """Create a success envelope; keys without a value are left out"""
    body: dict = {"status": STATUS_SUCCESS}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if qr_code_url is not None:
        body["qr_code_url"] = qr_code_url
    if pagination is not None:
        body["pagination"] = pagination
    return body


def failed_response(error: str) -> dict:
    """Create a failure envelope for a rejected request"""
    return {"status": STATUS_FAILED, "error": error}


def validation_failed_response(errors: Mapping[str, Any]) -> dict:
    """Create a failure envelope carrying a field -> messages map"""
    return {"status": STATUS_FAILED, "message": dict(errors)}


def error_response(message: str) -> dict:
    """Create an envelope for an internal failure"""
    return {"status": STATUS_ERROR, "message": message}
