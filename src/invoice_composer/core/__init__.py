"""Core configuration, errors and collaborator interfaces."""

from invoice_composer.core.config import ComposerConfig
from invoice_composer.core.exceptions import (
    ConfigurationError,
    DraftValidationError,
    InvoiceComposerError,
    SubmissionError,
    SuggestionError,
    TemplateSaveError,
)
from invoice_composer.core.ports import (
    CatalogSearch,
    InvoiceRepository,
    Notifier,
    TemplateLookup,
    TemplateRepository,
    UsageRecorder,
)

__all__ = [
    "ComposerConfig",
    "InvoiceComposerError",
    "DraftValidationError",
    "SuggestionError",
    "TemplateSaveError",
    "SubmissionError",
    "ConfigurationError",
    "CatalogSearch",
    "UsageRecorder",
    "TemplateLookup",
    "TemplateRepository",
    "InvoiceRepository",
    "Notifier",
]
