from __future__ import annotations

from typing import Any, Optional


class SchedulerError(Exception):
    """Base class for errors raised by the scheduler."""


class ConfigError(SchedulerError):
    """Configuration is missing or malformed."""


class ValidationError(SchedulerError):
    """The trigger payload was rejected before any provider call."""


class InvalidPayload(ValidationError):
    def __init__(self) -> None:
        super().__init__("Error: Event payload must be a JSON object.")


class MissingInstanceId(ValidationError):
    def __init__(self) -> None:
        super().__init__("Error: Instance ID is required.")


class InvalidAction(ValidationError):
    def __init__(self, action: Any) -> None:
        self.action = action
        super().__init__(f"Error: Invalid action '{action}'.")


class ProviderError(SchedulerError):
    """Structured error reported by the compute provider.

    ``code`` is the provider's error code (for EC2 the ``Error.Code`` of the
    response, or the botocore exception name for transport failures) and
    ``str(error)`` is the provider's own error text, unmodified.
    """

    def __init__(self, code: str, message: str, *, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.operation = operation
