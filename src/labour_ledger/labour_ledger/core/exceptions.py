from __future__ import annotations

from typing import Mapping, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.errors = dict(errors or {})


class FutureDateError(ValidationError):
    """Raised when attendance is written for a date after today."""


class InvalidStatus(ValidationError):
    """Raised when a status value is outside the closed set."""


class DuplicateNationalIdError(ValidationError):
    """Raised when a national id is already registered for the tenant."""


class NotFoundError(DomainError):
    """Raised when a worker, category or record id does not exist."""


class DuplicateActiveRecordError(DomainError):
    """Raised when a non-voided record already exists for (worker, date)."""


class AlreadyVoidedError(DomainError):
    """Raised when voiding a record that is already voided."""


class BulkMarkError(DomainError):
    """Raised when a bulk mark could not be applied as a whole.

    ``result`` reports which entries were created, left unchanged, failed or
    were skipped because the batch was aborted.
    """

    def __init__(self, message: str, *, result):
        super().__init__(message)
        self.result = result

    @property
    def first_failure(self):
        return self.result.failures[0] if self.result.failures else None


class StoreError(Exception):
    """Base exception raised by record store implementations."""


class StoreUnavailable(StoreError):
    """Raised when the backing store cannot be reached or fails remotely."""


class UniqueViolation(StoreError):
    """Raised when a write hits a unique index of the store."""

    def __init__(self, message: str, *, index: Optional[str] = None):
        super().__init__(message)
        self.index = index
