from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfigurationError(DomainError):
    """Raised when an operation depends on configuration that is missing or unusable."""


class NotFoundError(DomainError):
    """Raised when a referenced punch, employer or config does not exist."""


class SafetyLimitExceeded(DomainError):
    """Raised when a cycle loop runs past its iteration bound (likely corrupt configuration)."""

    def __init__(self, message: str, *, employer_id: int, limit: int):
        super().__init__(message)
        self.employer_id = employer_id
        self.limit = limit


class StepFailedError(DomainError):
    """A collaborator call failed in the middle of a multi-step operation.

    Carries which step was in progress so an operator can resume safely.
    The original failure is chained as ``__cause__``.
    """

    def __init__(self, operation: str, *, employer_id: int, step: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{operation} failed for employer {employer_id} at {step}{detail}")
        self.operation = operation
        self.employer_id = employer_id
        self.step = step
