from datetime import datetime, timezone
from typing import Any, Dict, Optional


class CatalogAPIError(Exception):
    """Base class for every failure surfaced by ``CatalogClient``.

    Carries the server's error body (``code``, ``message``, ``timestamp`` and
    the optional ``fieldErrors`` map) plus the HTTP status, when there was one.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None,
                 timestamp: Optional[str] = None, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.timestamp = timestamp or datetime.now(timezone.utc).isoformat()
        self.field_errors = field_errors or {}

    def __str__(self) -> str:
        if not self.field_errors:
            return self.message
        details = ", ".join(f"{k}: {v}" for k, v in self.field_errors.items())
        return f"{self.message} ({details})"


class ValidationError(CatalogAPIError):
    """Missing or invalid fields, duplicate SKU or name, bad query parameters."""


class NotFoundError(CatalogAPIError):
    """Unknown product id or SKU, or unknown category."""


class ConflictError(CatalogAPIError):
    """The request conflicts with current state, e.g. deleting a non-empty category."""


class NetworkError(CatalogAPIError):
    """The request never reached the server or no response came back."""


class UnknownServerError(CatalogAPIError):
    """Any other non-2xx response."""


_ERRORS_BY_STATUS = {
    400: ValidationError,
    422: ValidationError,
    404: NotFoundError,
    409: ConflictError,
}


def error_from_response(response: Any) -> CatalogAPIError:
    """Build the matching ``CatalogAPIError`` from a non-2xx response.

    Works with ``requests`` and ``httpx`` responses alike. Bodies that are not
    the catalog error shape (a proxy's HTML page, say) still yield a typed
    error with an ``HTTP_<status>`` code.
    """
    status = response.status_code
    cls = _ERRORS_BY_STATUS.get(status, UnknownServerError)
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        text = (response.text or "").strip()
        return cls(f"HTTP {status}: {text[:200]}" if text else f"HTTP {status}",
                   status_code=status, code=f"HTTP_{status}")
    return cls(
        body.get("message") or body.get("detail") or f"HTTP {status}",
        status_code=status,
        code=body.get("code") or f"HTTP_{status}",
        timestamp=body.get("timestamp"),
        field_errors=body.get("fieldErrors"),
    )
