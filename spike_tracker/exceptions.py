"""
Standardized exception hierarchy for spike-tracker
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class SpikeTrackerError(Exception):
    """
    Base exception for all spike-tracker errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise SpikeTrackerError(
            message="Failed to save log",
            user_id="device-abc",
            operation="log_event",
            context={"log_id": "abc-123"}
        )
    """

    log_level = logging.ERROR

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
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class InvalidInputError(SpikeTrackerError):
    """
    Raised when a required field is missing or out of range

    Examples:
    - Missing device id
    - Intensity outside 1-5
    - Negative step count

    Example:
        raise InvalidInputError(
            message="Intensity must be between 1 and 5",
            field="intensity",
            value=9,
            user_id="device-abc"
        )
    """

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
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={**(kwargs.pop("context", None) or {}), "field": field, "value": value},
            **kwargs
        )


# ==========================================
# Action Completion Errors
# ==========================================

class ActionCompletionError(SpikeTrackerError):
    """
    Base class for rejected action-completion requests

    Both subclasses are user-recoverable: the request is rejected and
    never retried.
    """

    log_level = logging.INFO

    def __init__(self, message: str, log_id: Optional[str] = None, **kwargs):
        self.log_id = log_id
        kwargs.setdefault("context", {"log_id": log_id})
        super().__init__(message=message, **kwargs)


class AlreadyCompletedError(ActionCompletionError):
    """Action for this log was already marked completed"""

    def __init__(self, message: str = "Action already completed", **kwargs):
        super().__init__(
            message=message,
            user_message="You already completed this action.",
            **kwargs
        )


class ActionExpiredError(ActionCompletionError):
    """Completion window for this log has closed"""

    def __init__(
        self,
        message: str = "Action expired (must complete within 30 mins)",
        elapsed_seconds: Optional[float] = None,
        **kwargs
    ):
        self.elapsed_seconds = elapsed_seconds
        super().__init__(
            message=message,
            user_message="This action has expired. Log your next spike to get a new one.",
            **kwargs
        )


# ==========================================
# Store Errors
# ==========================================

class RecordNotFoundError(SpikeTrackerError):
    """Requested record does not exist"""

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={**(kwargs.pop("context", None) or {}), "record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# External API Errors
# ==========================================

class ExternalAPIError(SpikeTrackerError):
    """
    Base class for external API failures
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        user_message: Optional[str] = None,
        **kwargs
    ):
        self.service = service
        self.status_code = status_code
        super().__init__(
            message=message,
            user_message=user_message or f"We're having trouble connecting to {service or 'an external service'}. Please try again later.",
            context={**(kwargs.pop("context", None) or {}), "service": service, "status_code": status_code},
            **kwargs
        )


class InsightGenerationError(ExternalAPIError):
    """AI insight generator failed or is unavailable"""

    log_level = logging.WARNING

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("service", "insight generator")
        super().__init__(
            message=message,
            user_message="Personalized insights are unavailable right now.",
            **kwargs
        )


class InsightParseError(InsightGenerationError):
    """AI insight generator returned output that is not a valid insight"""

    def __init__(self, message: str, raw_output: Optional[str] = None, **kwargs):
        self.raw_output = raw_output
        super().__init__(message=message, **kwargs)


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(SpikeTrackerError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={**(kwargs.pop("context", None) or {}), "config_key": config_key},
            **kwargs
        )

