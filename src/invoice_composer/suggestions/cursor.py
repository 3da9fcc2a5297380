"""Keyboard navigation over a rendered suggestion list."""

from __future__ import annotations

from collections.abc import Sequence

from invoice_composer.schemas.candidate import Candidate


class SuggestionCursor:
    """Tracks the highlighted suggestion for arrow-key navigation.

    Moving past either end wraps around.
    """

    def __init__(self, candidates: Sequence[Candidate] = ()) -> None:
        self._candidates: list[Candidate] = list(candidates)
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def candidates(self) -> list[Candidate]:
        return list(self._candidates)

    @property
    def current(self) -> Candidate | None:
        """The highlighted candidate, or None for an empty list."""
        if not self._candidates:
            return None
        return self._candidates[self._index]

    def reset(self, candidates: Sequence[Candidate]) -> None:
        """Show a new list and highlight its first entry."""
        self._candidates = list(candidates)
        self._index = 0

    def move_next(self) -> Candidate | None:
        if self._candidates:
            self._index = (self._index + 1) % len(self._candidates)
        return self.current

    def move_previous(self) -> Candidate | None:
        if self._candidates:
            self._index = (self._index - 1) % len(self._candidates)
        return self.current

    def __len__(self) -> int:
        return len(self._candidates)
