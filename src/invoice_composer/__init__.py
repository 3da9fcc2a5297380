"""
invoice-composer: Line item composition and tax preview for GST invoicing.
"""

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
from invoice_composer.core.session import CompositionSession

# Line items
from invoice_composer.items import (
    LineItemStore,
    LinePreview,
    TaxPreview,
    ValidationResult,
    apply_candidate,
    apply_user_edit,
    compute_tax_preview,
)

# Data model
from invoice_composer.schemas import (
    AutoDescription,
    Candidate,
    CandidateOrigin,
    ClassificationCode,
    CodeKind,
    ComplianceFlags,
    InvoiceDraft,
    LineItem,
    SearchState,
    SubmissionReceipt,
    Template,
    TemplateKind,
    UnsetDescription,
    UserDescription,
)

# Suggestions
from invoice_composer.suggestions import (
    DebouncedSearch,
    SuggestionCursor,
    SuggestionSource,
    group_candidates,
)

# Templates
from invoice_composer.templates import (
    LearningReport,
    TemplateCatalog,
    TemplateLearningEngine,
    TemplateManager,
    apply_candidate_to_template,
    is_duplicate,
    is_template_worthy,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "CompositionSession",
    "ComposerConfig",
    "InvoiceComposerError",
    "DraftValidationError",
    "SuggestionError",
    "TemplateSaveError",
    "SubmissionError",
    "ConfigurationError",
    # Collaborators
    "CatalogSearch",
    "UsageRecorder",
    "TemplateLookup",
    "TemplateRepository",
    "InvoiceRepository",
    "Notifier",
    # Data model
    "LineItem",
    "ClassificationCode",
    "CodeKind",
    "UnsetDescription",
    "AutoDescription",
    "UserDescription",
    "SearchState",
    "Candidate",
    "CandidateOrigin",
    "Template",
    "TemplateKind",
    "InvoiceDraft",
    "ComplianceFlags",
    "SubmissionReceipt",
    # Suggestions
    "SuggestionSource",
    "group_candidates",
    "DebouncedSearch",
    "SuggestionCursor",
    # Line items
    "apply_candidate",
    "apply_user_edit",
    "LineItemStore",
    "ValidationResult",
    "TaxPreview",
    "LinePreview",
    "compute_tax_preview",
    # Templates
    "TemplateCatalog",
    "TemplateLearningEngine",
    "LearningReport",
    "is_template_worthy",
    "is_duplicate",
    "TemplateManager",
    "apply_candidate_to_template",
]
