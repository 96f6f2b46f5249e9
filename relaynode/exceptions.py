"""Standardized exception hierarchy for relaynode.

Every failure that can happen while serving a request is expressed as one of
these exceptions. The HTTP layer maps them onto status codes; nothing raised
inside a request handler is allowed to escape that request.

Usage:
    from relaynode.exceptions import ValidationError, NodeOperationError

    try:
        address = parse_socket_address(text)
    except ValidationError as e:
        logger.warning("invalid_address", error=str(e), context=e.context)
"""

from __future__ import annotations

from typing import Any


class RelayNodeError(Exception):
    """Base exception for all relaynode errors.

    Attributes:
        message: Human-readable error message
        context: Additional context for debugging (dict)
        original_error: Original exception if wrapped
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize exception with rich context.

        Args:
            message: Human-readable error description
            context: Additional structured data for debugging
            original_error: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def __str__(self) -> str:
        """Format exception with context for logging."""
        base = self.message
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base = f"{base} ({ctx_str})"
        if self.original_error:
            base = f"{base} [caused by: {type(self.original_error).__name__}]"
        return base

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# =============================================================================
# Validation & Input Errors
# =============================================================================


class ValidationError(RelayNodeError):
    """Raised when request input cannot be turned into engine arguments.

    Covers unparsable addresses, invalid hex, wrong-length byte strings and
    malformed invoices.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize validation error.

        Args:
            message: Error description
            field: Name of the invalid field
            value: The invalid value (truncated in logs)
            constraint: Validation constraint that was violated
            **kwargs: Additional context
        """
        context = kwargs.get("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        if constraint:
            context["constraint"] = constraint
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.field = field


class ConfigurationError(RelayNodeError):
    """Raised when process configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error description
            setting: Name of the problematic setting
            expected: Expected value or type
            **kwargs: Additional context
        """
        context = kwargs.get("context", {})
        if setting:
            context["setting"] = setting
        if expected:
            context["expected"] = expected
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.setting = setting


class SeedMismatchError(ConfigurationError):
    """Raised when the seed does not match the one the data directory was created with."""


# =============================================================================
# Node Engine Errors
# =============================================================================


class NodeError(RelayNodeError):
    """Base class for failures reported by the node engine."""


class NodeStartupError(NodeError):
    """Raised when the node cannot be built or started. Fatal at launch."""


class NodeOperationError(NodeError):
    """Raised when a node operation fails while serving a request."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.get("context", {})
        if operation:
            context["operation"] = operation
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.operation = operation


class PaymentNotFoundError(NodeError):
    """Raised when the engine knows no payment for a given hash."""

    def __init__(self, payment_hash: str, **kwargs: Any) -> None:
        context = kwargs.get("context", {})
        context["payment_hash"] = payment_hash
        kwargs["context"] = context
        super().__init__(f"No payment found for hash {payment_hash}", **kwargs)
        self.payment_hash = payment_hash


__all__ = [
    "RelayNodeError",
    # Validation
    "ValidationError",
    "ConfigurationError",
    "SeedMismatchError",
    # Node
    "NodeError",
    "NodeStartupError",
    "NodeOperationError",
    "PaymentNotFoundError",
]
