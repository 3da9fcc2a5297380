"""Suggestion lookup: catalog search, debouncing and list navigation."""

from invoice_composer.suggestions.cursor import SuggestionCursor
from invoice_composer.suggestions.debounce import DebouncedSearch
from invoice_composer.suggestions.source import SuggestionSource, group_candidates

__all__ = [
    "SuggestionSource",
    "group_candidates",
    "DebouncedSearch",
    "SuggestionCursor",
]
