"""
Perfect Plumbing Ops Exceptions

Exception classes for validation, lifecycle and backend error handling.
"""

from typing import Any, Dict, List, Optional


class PlumbingOpsError(Exception):
    """Base exception for all service-layer errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(PlumbingOpsError):
    """Exception for missing or invalid configuration"""
    pass


class InvalidInputError(PlumbingOpsError):
    """Exception for input rejected locally, before any backend request"""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class InvalidTransitionError(PlumbingOpsError):
    """Exception for a job status change outside the lifecycle"""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move job from '{current}' to '{target}'")
        self.current = current
        self.target = target


class BackendRequestError(PlumbingOpsError):
    """Exception for any failure returned by the data layer"""

    def __init__(self, message: str, operation: Optional[str] = None,
                 code: Optional[str] = None):
        super().__init__(message)
        self.operation = operation
        self.code = code


class RecordNotFoundError(BackendRequestError):
    """Exception for a single-record read that matched nothing"""
    pass


class ReferentialConstraintError(BackendRequestError):
    """Exception for foreign key violations"""
    pass


class CustomerInUseError(ReferentialConstraintError):
    """Exception for deleting a customer that still has jobs"""
    pass


class PaymentRecordingError(BackendRequestError):
    """
    Exception for a failed step of the payment/invoice/status sequence.

    Records written before the failing step are kept on the exception;
    nothing is rolled back.
    """

    def __init__(self, message: str, step: str, completed: Optional[Dict[str, Any]] = None,
                 code: Optional[str] = None):
        super().__init__(message, operation=f"record_payment.{step}", code=code)
        self.step = step
        self.completed = completed or {}
