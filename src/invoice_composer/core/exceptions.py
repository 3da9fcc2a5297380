"""Custom exceptions for invoice-composer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from invoice_composer.items.store import ValidationResult


class InvoiceComposerError(Exception):
    """Base exception for all invoice-composer errors."""

    pass


class DraftValidationError(InvoiceComposerError):
    """Raised when a draft fails pre-submission validation."""

    def __init__(self, result: ValidationResult) -> None:
        super().__init__(result.message or "Draft is not valid for submission")
        self.result = result


class SuggestionError(InvoiceComposerError):
    """Raised when the suggestion catalog cannot be queried."""

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


class TemplateSaveError(InvoiceComposerError):
    """Raised when an explicit template save fails."""

    def __init__(self, message: str, last_error: Exception | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error


class SubmissionError(InvoiceComposerError):
    """Raised when the persistence collaborator rejects an invoice.

    The draft is left untouched so the submission can be retried.
    """

    def __init__(self, message: str, last_error: Exception | None = None) -> None:
        super().__init__(message)
        self.last_error = last_error


class ConfigurationError(InvoiceComposerError):
    """Raised when composer configuration is invalid."""

    pass
