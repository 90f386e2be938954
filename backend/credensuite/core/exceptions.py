"""
Custom Exceptions for CredenSuite
=================================

Every error the service raises on purpose derives from CredenSuiteError so the
API layer can turn it into a JSON body with a stable ``code``.

Usage:
    from credensuite.core.exceptions import MemberNotFoundError

    if not member:
        raise MemberNotFoundError(member_id)
"""

from typing import Optional, Any, Dict, List


class CredenSuiteError(Exception):
    """Base exception for all CredenSuite errors"""

    status_code: int = 500

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
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CredenSuiteError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class MemberNotFoundError(ResourceNotFoundError):
    """Member not found"""

    def __init__(self, member_id: str):
        super().__init__("Member", member_id)


class TemplateNotFoundError(ResourceNotFoundError):
    """Card template not found"""

    def __init__(self, template_id: str):
        super().__init__("Template", template_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(CredenSuiteError):
    """
    Input validation failed.

    Carries every violation at once as ``{"field": ..., "message": ...}``
    entries so the caller can fix the whole form in one round trip.
    """

    status_code = 400

    def __init__(self, message: str = "Validation failed", errors: Optional[List[Dict[str, str]]] = None):
        self.errors = errors or []
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={
                "errors": self.errors,
                "fields": [e["field"] for e in self.errors],
            },
        )


# ============================================
# Badge Rendering Errors
# ============================================

class BadgeRenderError(CredenSuiteError):
    """Headless browser or asset failure while producing a badge PDF"""

    def __init__(self, message: str, member_id: Optional[str] = None):
        super().__init__(message, code="BADGE_RENDER_FAILED")
        if member_id:
            self.details["member_id"] = member_id


class BadgeRenderTimeoutError(BadgeRenderError):
    """Badge page did not finish loading in time"""

    def __init__(self, timeout_seconds: float, member_id: Optional[str] = None):
        super().__init__(f"Badge rendering timed out after {timeout_seconds}s", member_id)
        self.code = "BADGE_RENDER_TIMEOUT"
        self.details["timeout_seconds"] = timeout_seconds


class DirectoryRenderError(CredenSuiteError):
    """Headless browser failure while producing the members directory PDF"""

    def __init__(self, message: str):
        super().__init__(message, code="DIRECTORY_RENDER_FAILED")


# ============================================
# Storage Errors
# ============================================

class StorageUnavailableError(CredenSuiteError):
    """Underlying database could not be reached or refused the operation"""

    status_code = 503

    def __init__(self, message: str = "Storage is unavailable", operation: Optional[str] = None):
        super().__init__(message, code="STORAGE_UNAVAILABLE")
        if operation:
            self.details["operation"] = operation


# ============================================
# Helper function for API responses
# ============================================

# Internal failures never leak their message to clients
GENERIC_MESSAGES = {
    "BADGE_RENDER_FAILED": "Failed to generate ID card",
    "BADGE_RENDER_TIMEOUT": "Failed to generate ID card",
    "DIRECTORY_RENDER_FAILED": "Failed to generate members directory",
    "STORAGE_UNAVAILABLE": "Service temporarily unavailable",
    "INTERNAL_ERROR": "An error occurred",
}


def error_response(error: CredenSuiteError, expose_internal: bool = False) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    body = error.to_dict()
    if error.status_code >= 500 and not expose_internal:
        body = {
            "code": error.code,
            "message": GENERIC_MESSAGES.get(error.code, GENERIC_MESSAGES["INTERNAL_ERROR"]),
            "details": {},
        }
    return {
        "success": False,
        "error": body
    }
