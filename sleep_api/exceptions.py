"""
Standardized exception hierarchy for the sleep record service
Provides rich context, consistent logging, and the client-facing message
and HTTP status each error maps to
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import psycopg
from psycopg_pool import PoolTimeout

logger = logging.getLogger(__name__)


class SleepServiceError(Exception):
    """
    Base exception for all sleep service errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - Client-facing message, HTTP status and response body key
    - Structured context
    - Automatic logging

    Example:
        raise SleepServiceError(
            message="Failed to save sleep record",
            user_id="42",
            operation="create_record",
            context={"hours": 8}
        )
    """

    status_code: int = 500
    response_key: str = "message"
    log_level: int = logging.ERROR

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def response_body(self) -> Dict[str, str]:
        """Body returned to the HTTP client"""
        return {self.response_key: self.user_message}


# ==========================================
# Validation Errors (Client Input)
# ==========================================

class ValidationError(SleepServiceError):
    """
    Raised when a request payload fails the presence or type check

    Example:
        raise ValidationError(
            message="All fields are required",
            field="hours",
            value=0
        )
    """

    status_code = 400
    response_key = "error"
    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class RecordNotFoundError(SleepServiceError):
    """Requested record (or any record for a user) does not exist"""

    status_code = 404
    log_level = logging.INFO

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=message,
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


class InternalError(SleepServiceError):
    """
    Unexpected storage-layer fault

    The cause is logged with its traceback; only the generic user_message
    reaches the client.
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("user_message", "Internal server error")
        super().__init__(message=message, **kwargs)


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(SleepServiceError):
    """Invalid or missing configuration"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The service is not properly configured.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    user_message: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> InternalError:
    """
    Wrap a storage fault (psycopg, pool, anything else) into an InternalError

    Args:
        error: Original exception
        operation: What operation was being performed
        user_message: Generic message returned to the client
        user_id: User ID if applicable
        context: Additional context

    Example:
        try:
            records = await store.find_by_user(user_id)
        except Exception as e:
            raise wrap_storage_exception(
                e,
                operation="list_records",
                user_message="An error occurred while fetching sleep records",
                user_id=str(user_id)
            ) from e
    """
    if isinstance(error, (psycopg.OperationalError, PoolTimeout)):
        message = f"Database connection failed: {str(error)}"
    elif isinstance(error, psycopg.Error):
        message = f"Database query failed: {str(error)}"
    else:
        message = f"{operation} failed: {str(error)}"

    return InternalError(
        message=message,
        user_id=user_id,
        operation=operation,
        context=context,
        cause=error,
        user_message=user_message
    )
