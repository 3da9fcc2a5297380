"""Line item store: the ordered, editable rows of an invoice draft."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from pydantic import BaseModel, Field

from invoice_composer.core.config import ComposerConfig
from invoice_composer.items.autofill import apply_user_edit, merge_item
from invoice_composer.schemas.line_item import LineItem

logger = logging.getLogger(__name__)

StoreListener = Callable[[tuple[LineItem, ...]], None]


class ValidationResult(BaseModel):
    """Outcome of pre-submission validation; only the first problem is reported."""

    is_valid: bool = Field(description="Whether the draft can be submitted")
    message: str | None = Field(default=None, description="What is wrong, for display")
    item_index: int | None = Field(
        default=None,
        description="Index of the offending item, None for draft-level problems",
    )
    field: str | None = Field(default=None, description="Name of the offending field")

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(is_valid=True)

    @classmethod
    def failure(
        cls,
        message: str,
        field: str,
        item_index: int | None = None,
    ) -> ValidationResult:
        return cls(is_valid=False, message=message, field=field, item_index=item_index)


class LineItemStore:
    """Ordered collection of line items; never empty.

    The store does not apply autofill rules itself. Callers resolve a
    suggestion through :func:`~invoice_composer.items.autofill.apply_candidate`
    first, or apply direct user edits with :meth:`edit_item`.

    Listeners registered with :meth:`subscribe` run synchronously after
    every mutation with a snapshot of the items.

    Example:
        ```python
        store = LineItemStore()
        store.subscribe(lambda items: print(compute_tax_preview(items).display()))

        store.edit_item(0, description="Logo Design", rate=5000, gst_rate=18)
        store.add_item()
        store.remove_item(1)

        result = store.validate_for_submit(buyer_id=42)
        ```
    """

    def __init__(
        self,
        items: list[LineItem] | None = None,
        config: ComposerConfig | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            items: Initial items; a single blank item when omitted or empty.
            config: Supplies defaults for new items.
        """
        self.config = config or ComposerConfig()
        self._items: list[LineItem] = list(items) if items else [self.new_item()]
        self._listeners: list[StoreListener] = []

    def new_item(self) -> LineItem:
        """Create a blank item with configured defaults."""
        return LineItem(
            unit=self.config.default_unit,
            gst_rate=self.config.default_gst_rate,
            quantity=self.config.default_quantity,
        )

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    def add_item(self) -> int:
        """Append a blank item and return its index."""
        self._items.append(self.new_item())
        self._notify()
        return len(self._items) - 1

    def remove_item(self, index: int) -> bool:
        """Remove the item at index.

        An invoice always keeps at least one row, so removing the last
        remaining item (or an index that does not exist) does nothing.

        Returns:
            True if an item was removed.
        """
        if len(self._items) <= 1 or not 0 <= index < len(self._items):
            return False
        del self._items[index]
        self._notify()
        return True

    def patch_item(self, index: int, partial: Mapping[str, Any]) -> LineItem:
        """Shallow-merge fields into the item at index.

        Raises:
            IndexError: If index is out of range.
            pydantic.ValidationError: If a field is unknown or invalid.
        """
        item = self._get(index)
        return self.replace_item(index, merge_item(item, partial))

    def edit_item(self, index: int, **fields: Any) -> LineItem:
        """Apply a direct user edit to the item at index."""
        item = self._get(index)
        return self.replace_item(index, apply_user_edit(item, **fields))

    def replace_item(self, index: int, item: LineItem) -> LineItem:
        """Put a fully resolved item at index."""
        self._get(index)
        self._items[index] = item
        self._notify()
        return item

    def reset(self) -> None:
        """Discard all items and start over with one blank item."""
        self._items = [self.new_item()]
        self._notify()

    def validate_for_submit(self, buyer_id: int | None) -> ValidationResult:
        """Check the draft can be submitted, reporting the first problem.

        Items are checked in order for a description, a positive quantity
        and a positive rate; then the draft must reference a buyer.
        """
        for i, item in enumerate(self._items):
            position = i + 1
            if not item.description.strip():
                return ValidationResult.failure(
                    f"Please enter description for item {position}", "description", i
                )
            if item.quantity <= 0:
                return ValidationResult.failure(
                    f"Please enter a valid quantity for item {position}", "quantity", i
                )
            if item.rate <= 0:
                return ValidationResult.failure(
                    f"Please enter a valid rate for item {position}", "rate", i
                )

        if buyer_id is None:
            return ValidationResult.failure("Please select a customer", "buyer_id")

        return ValidationResult.ok()

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _get(self, index: int) -> LineItem:
        if not 0 <= index < len(self._items):
            raise IndexError(f"No line item at index {index}")
        return self._items[index]

    def _notify(self) -> None:
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> LineItem:
        return self._get(index)

    def __iter__(self) -> Iterator[LineItem]:
        return iter(self.items)
