"""
VaultWard Custom Exceptions

Structured exception hierarchy for the VaultWard safety pipeline.
All VaultWard-specific exceptions inherit from VaultWardError.

Exception hierarchy:
    VaultWardError
    +-- ToolExecutionError              (tool continuation failed after its retry)
    +-- ReflectionError                 (reflection evaluator misconfiguration)
    +-- PendingOperationNotFoundError   (unknown or already resolved correlation id)
    +-- OperationContextError           (stored operation cannot be deserialized)
    +-- ProviderError                   (LLM provider failure)
    |   +-- ProviderUnavailableError    (provider not reachable / not configured)
    |   +-- ProviderTimeoutError        (request timeout)
    +-- RegistryError                   (invalid risk registry definition)
    +-- VaultWardAPIError               (API layer error)
"""

from __future__ import annotations


class VaultWardError(Exception):
    """Base exception for all VaultWard errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ToolExecutionError(VaultWardError):
    """Raised when a tool continuation fails, including after its single retry.

    Propagates out of the agent's raw stream and is surfaced to the client
    as an error event that terminates the turn.
    """

    def __init__(
        self,
        tool_name: str,
        message: str,
        attempts: int = 1,
        details: dict | None = None,
    ):
        super().__init__(
            f"Tool '{tool_name}' execution failed: {message}",
            details={"tool_name": tool_name, "attempts": attempts, **(details or {})},
        )
        self.tool_name = tool_name
        self.attempts = attempts


class ReflectionError(VaultWardError):
    """Raised when the reflection evaluator cannot be constructed or configured.

    Evaluation failures at runtime never raise; they fail open.
    """

    pass


class PendingOperationNotFoundError(VaultWardError):
    """Raised when a correlation id is unknown or was already confirmed/cancelled."""

    def __init__(self, correlation_id: str):
        super().__init__(
            f"Pending operation '{correlation_id}' not found or already processed",
            details={"correlation_id": correlation_id},
        )
        self.correlation_id = correlation_id


class OperationContextError(VaultWardError):
    """Raised when a stored pending operation is corrupt or has the wrong shape."""

    def __init__(self, correlation_id: str, message: str, details: dict | None = None):
        super().__init__(
            f"Invalid stored operation context for '{correlation_id}': {message}",
            details={"correlation_id": correlation_id, **(details or {})},
        )
        self.correlation_id = correlation_id


class ProviderError(VaultWardError):
    """Base exception for LLM provider errors."""

    def __init__(self, provider_name: str, message: str, details: dict | None = None):
        super().__init__(
            f"Provider '{provider_name}' error: {message}",
            details={"provider": provider_name, **(details or {})},
        )
        self.provider_name = provider_name


class ProviderUnavailableError(ProviderError):
    """Raised when a provider cannot be reached or is not configured."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when a provider request times out."""

    def __init__(self, provider_name: str, timeout_seconds: float, details: dict | None = None):
        super().__init__(
            provider_name,
            f"request timed out after {timeout_seconds:.1f}s",
            details={"timeout_seconds": timeout_seconds, **(details or {})},
        )
        self.timeout_seconds = timeout_seconds


class RegistryError(VaultWardError):
    """Raised when a risk registry definition cannot be loaded."""

    pass


class VaultWardAPIError(VaultWardError):
    """Raised for API layer errors (FastAPI endpoints)."""

    def __init__(self, message: str, status_code: int = 500, details: dict | None = None):
        super().__init__(
            message,
            details={"status_code": status_code, **(details or {})},
        )
        self.status_code = status_code
