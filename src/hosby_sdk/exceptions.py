"""
Exception classes for Hosby Python SDK

Every failure surfaced by the SDK is a ``HosbyError`` and can be rendered as
the normalized ``{"success": False, "status": ..., "message": ...}`` shape
returned by the Hosby API.
"""

from typing import Optional, Dict, Any


class HosbyError(Exception):
    """Base exception for all Hosby SDK errors"""

    success = False
    default_status = 500

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        status: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status = self.default_status if status is None else status
        self.extra = extra or {}

    def to_dict(self) -> Dict[str, Any]:
        """Render the error in the normalized API error shape."""
        result: Dict[str, Any] = {
            'success': False,
            'status': self.status,
            'message': self.message,
        }
        result.update(self.extra)
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class ConfigError(HosbyError):
    """Exception raised when client configuration is invalid"""
    default_status = 400

    def __init__(self, message: str, error_code: str = "CONFIG_ERROR", **kwargs):
        super().__init__(message, error_code, **kwargs)


class ValidationError(HosbyError):
    """Exception raised for invalid per-call arguments"""
    default_status = 400

    def __init__(self, message: str, error_code: str = "VALIDATION_ERROR", **kwargs):
        super().__init__(message, error_code, **kwargs)


class SigningError(HosbyError):
    """Exception raised when request signature generation fails"""

    def __init__(self, message: str, error_code: str = "SIGNING_FAILED", **kwargs):
        super().__init__(message, error_code, **kwargs)


class TokenError(HosbyError):
    """Exception raised for CSRF token fetch or parse failures"""

    def __init__(self, message: str, error_code: str = "CSRF_TOKEN_ERROR", **kwargs):
        super().__init__(message, error_code, **kwargs)


class TransportError(HosbyError):
    """Exception raised for network-level failures of the transport"""

    def __init__(self, message: str, error_code: str = "TRANSPORT_ERROR", **kwargs):
        super().__init__(message, error_code, **kwargs)


class ApiError(HosbyError):
    """Exception raised for non-2xx API responses"""

    def __init__(self, status: int, message: str, extra: Optional[Dict[str, Any]] = None,
                 error_code: str = "HTTP_ERROR"):
        super().__init__(message, error_code, status=status, extra=extra)
