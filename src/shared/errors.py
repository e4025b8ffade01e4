"""
Exceptions raised by the logistics client.

Every error carries enough context (field name, offending sub-type,
HTTP status) to fix the call site without provider-side debugging:
the provider only ever answers with a rejection code.
"""

from typing import Iterable, Optional, Tuple


class LogisticsError(Exception):
    """Base exception for logistics errors."""
    def __init__(self, message: str, code: str = None, http_status: int = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status


class PreconditionError(LogisticsError, ValueError):
    """Caller broke a precondition (empty HashKey/HashIV, builder already signed)."""
    pass


class ValidationError(LogisticsError, ValueError):
    """A required field is missing, too long or out of range."""
    def __init__(
        self,
        field: str,
        message: str = None,
        alternatives: Iterable[str] = (),
        **kwargs
    ):
        self.field = field
        self.alternatives: Tuple[str, ...] = tuple(alternatives)
        if message is None:
            if self.alternatives:
                message = f"One of {', '.join(self.alternatives)} is required"
            else:
                message = f"{field} is required"
        super().__init__(message, **kwargs)

    @classmethod
    def too_long(cls, field: str, max_length: int) -> "ValidationError":
        return cls(field, f"{field} exceeds the maximum length of {max_length}")

    @classmethod
    def negative(cls, field: str) -> "ValidationError":
        return cls(field, f"{field} must not be negative")


class IncompatibleVariantError(ValidationError):
    """A logistics sub-type was assigned to an operation that cannot carry it."""
    def __init__(
        self,
        field: str,
        sub_type: str,
        allowed: Iterable[str] = (),
        operation: Optional[str] = None
    ):
        self.sub_type = sub_type
        self.allowed: Tuple[str, ...] = tuple(sorted(allowed))
        self.operation = operation

        target = operation or "this operation"
        if self.allowed:
            expected = ", ".join(self.allowed)
            message = f"{field} {sub_type!r} is not supported by {target} (expected one of: {expected})"
        else:
            message = f"{target} does not take a {field} ({sub_type!r} given)"
        super().__init__(field, message)


class SignatureMismatch(LogisticsError):
    """CheckMacValue verification failed."""
    def __init__(self, message: str = "CheckMacValue verification failed", **kwargs):
        super().__init__(message, **kwargs)


class ParseError(LogisticsError):
    """Response body matched neither wire format."""
    pass


class TransportError(LogisticsError):
    """HTTP exchange with the provider failed."""
    pass


class UnknownOperationError(LogisticsError, KeyError):
    """No builder is registered under the requested identifier."""
    def __init__(self, identifier: str):
        super().__init__(f"No logistics operation registered as {identifier!r}")
        self.identifier = identifier

    def __str__(self) -> str:
        return self.message
