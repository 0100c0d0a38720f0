"""
Custom Exceptions for the Civic Portal client
=============================================

Use these instead of generic Exception so callers can tell an
authentication problem from a failed API call.

Usage:
    from civicportal.exceptions import APIError

    try:
        issue = await issues.get(issue_id)
    except APIError as e:
        logger.error(f"Failed to fetch issue: {e}")
        raise

Note: an HTTP 401 is never raised. The interceptor tears the session down
and hands the caller ``None`` instead.
"""

from typing import Optional, Any, Dict


class PortalError(Exception):
    """Base exception for all Civic Portal client errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication Errors
# ============================================

class AuthenticationError(PortalError):
    """User authentication failed"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidTokenError(AuthenticationError):
    """JWT token could not be decoded"""

    def __init__(self, reason: str = "Invalid token"):
        super().__init__(reason)
        self.code = "INVALID_TOKEN"


# ============================================
# API Errors
# ============================================

class APIError(PortalError):
    """Backend answered with a non-2xx status other than 401"""

    def __init__(
        self,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code="API_ERROR", details=details)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class NotFoundError(APIError):
    """Requested resource does not exist"""

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=404, details=details)
        self.code = "NOT_FOUND"


class ValidationError(APIError):
    """Backend rejected the request payload"""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)
        self.code = "VALIDATION_ERROR"


class ForbiddenError(APIError):
    """Backend refused the call for the current role"""

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=403, details=details)
        self.code = "FORBIDDEN"


# ============================================
# Local State Errors
# ============================================

class SessionStorageError(PortalError):
    """Persisted session storage could not be written"""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Could not write session storage at {path}: {reason}",
            code="STORAGE_ERROR",
            details={"path": path}
        )


def error_for_status(status_code: int, message: str, details: Optional[Dict[str, Any]] = None) -> APIError:
    """Pick the most specific APIError subclass for a status code"""
    if status_code == 404:
        return NotFoundError(message, details)
    if status_code == 400:
        return ValidationError(message, details)
    if status_code == 403:
        return ForbiddenError(message, details)
    return APIError(message, status_code=status_code, details=details)
