from typing import Optional, Dict, Any, List
import traceback
import sys


class BaseCatalogException(Exception):
    def __init__(self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace('Error', '').upper()
        self.details = details or {}

        # Capture stack trace for debugging
        self.traceback = traceback.format_exc() if sys.exc_info()[0] else None

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseCatalogException):
    """Raised when input validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class CredentialsError(BaseCatalogException):
    """Raised when database credentials are missing or unusable"""

    def __init__(self, message: str = "Database credentials are not available"):
        super().__init__(message, 401, "CREDENTIALS_ERROR")


class NotFoundError(BaseCatalogException):
    """Raised when a requested record is not found"""

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message += f" with ID: {resource_id}"
        super().__init__(message, 404, "NOT_FOUND")


class ConflictError(BaseCatalogException):
    """Raised when there's a conflict with the current state"""

    def __init__(self, message: str = "Resource conflict", conflict_field: Optional[str] = None):
        details = {"conflict_field": conflict_field} if conflict_field else {}
        super().__init__(message, 409, "CONFLICT", details)


class BusinessLogicError(BaseCatalogException):
    """Raised when catalog rules are violated"""

    def __init__(self, message: str, rule: Optional[str] = None):
        details = {"violated_rule": rule} if rule else {}
        super().__init__(message, 422, "BUSINESS_LOGIC_ERROR", details)


class ExternalServiceError(BaseCatalogException):
    """Raised when external service calls fail"""

    def __init__(self, service_name: str, message: str = "External service unavailable",
                 status: Optional[int] = None):
        details = {"service": service_name}
        if status is not None:
            details["status"] = status
        super().__init__(message, 503, "EXTERNAL_SERVICE_ERROR", details)


class StorageError(BaseCatalogException):
    """Raised when object storage operations fail"""

    def __init__(self, message: str = "Object storage operation failed", operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(
            "Media storage is unavailable. Please try again later.",
            503,
            "STORAGE_ERROR",
            details,
            internal_message=message
        )


class DatabaseError(BaseCatalogException):
    """Raised when database operations fail"""

    def __init__(self, message: str = "Database operation failed", operation: Optional[str] = None):
        # Don't expose internal database details to users
        user_message = "An internal error occurred. Please try again later."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "DATABASE_ERROR",
            details,
            internal_message=message  # Keep original message for logging
        )


class QueryExecutionError(DatabaseError):
    """Raised when the SQL gateway rejects a statement"""

    def __init__(self, message: str, sql: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, "EXECUTE")
        self.error_code = "QUERY_ERROR"
        self.sql = sql
        self.gateway_code = code
        if code:
            self.details["gateway_code"] = code
