"""
errors.py

Error classes for insensitive access.

Every error carries a short code and a plain-language message, formatted
as ``[I001] Key not found: 'Foo'``. Each class also derives from the
built-in exception a dict user would expect (``KeyError``, ``TypeError``,
``ValueError``) so existing ``except`` clauses keep working.
"""

from typing import Any


class InsensitiveAccessError(Exception):
    """
    Base class for all insensitive access errors.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "I000",
    ):
        self.message = message
        self.error_code = error_code
        super().__init__(self.format())

    def format(self) -> str:
        """Format as human-readable error message."""
        return f"[{self.error_code}] {self.message}"

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.format()


class KeyNotFoundError(InsensitiveAccessError, KeyError):
    """Raised by fetch() when a key is absent and no fallback was given."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(
            message=f"Key not found: {key!r}",
            error_code="I001",
        )


class NotConvertibleError(InsensitiveAccessError, TypeError):
    """Raised when insensitive access is injected into a non-mapping."""

    def __init__(self, value: Any):
        self.value = value
        self.value_type = type(value).__name__
        super().__init__(
            message=f"Cannot inject insensitive access into {self.value_type}: "
                    f"expected a mutable mapping",
            error_code="I002",
        )


class UnknownNormalizerError(InsensitiveAccessError, ValueError):
    """Raised when a key normalizer is requested by an unregistered name."""

    def __init__(self, name: str, available: Any = ()):
        self.name = name
        self.available = sorted(available)
        detail = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(
            message=f"Unknown key normalizer {name!r}{detail}",
            error_code="I003",
        )


class RecordRegistrationError(InsensitiveAccessError, TypeError):
    """Raised when a type cannot be used as an insensitive record."""

    def __init__(self, record_type: Any, reason: str):
        self.record_type = record_type
        self.reason = reason
        name = getattr(record_type, "__name__", type(record_type).__name__)
        super().__init__(
            message=f"{name} {reason}",
            error_code="I004",
        )


class UnknownRecordFieldError(InsensitiveAccessError, KeyError):
    """Raised when record data contains keys that match no field."""

    def __init__(self, record_type: type, keys: Any):
        self.record_type = record_type
        self.keys = list(keys)
        listed = ", ".join(repr(k) for k in self.keys)
        super().__init__(
            message=f"{record_type.__name__} has no field matching {listed}",
            error_code="I005",
        )
