"""Autofill policy: how a selected suggestion fills a line item.

Rules, applied in order:

1. ``description``, ``classification_code``, ``gst_rate`` and ``unit`` are
   always taken from the candidate.
2. ``rate`` is only filled while the item has no rate yet (``0``).
3. ``invoice_description`` is only filled while it is unset. Once it holds
   an automatic or user value, no suggestion ever changes it again.
4. ``template_id`` points at the originating template for user templates
   and is cleared for catalog suggestions.

Direct user edits go through :func:`apply_user_edit` and are not
restricted; a user edit of the invoice description makes it permanently
user-owned, even when the edit leaves it empty.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from invoice_composer.schemas.candidate import Candidate
from invoice_composer.schemas.line_item import (
    AutoDescription,
    LineItem,
    SearchState,
    UnsetDescription,
    UserDescription,
)

EMPTY_RATE = 0.0


def item_description_for(candidate: Candidate) -> str:
    """Text placed in the editable description field."""
    return candidate.description or candidate.name


def invoice_description_for(candidate: Candidate) -> str:
    """Text printed on the invoice when the field is filled automatically.

    Templates carry a description written for invoices; catalog entries
    print their short name.
    """
    if candidate.is_user_template:
        return candidate.description or candidate.name
    return candidate.name or candidate.description


def apply_candidate(item: LineItem, candidate: Candidate) -> LineItem:
    """Return a copy of item filled from candidate.

    Total and side-effect free. Applying the same candidate twice gives the
    same item as applying it once.
    """
    description = item_description_for(candidate)
    updates: dict[str, Any] = {
        "description": description,
        "classification_code": candidate.code,
        "gst_rate": candidate.gst_rate,
        "unit": candidate.default_unit,
        "template_id": candidate.template_id if candidate.is_user_template else None,
        "search_state": SearchState(query=description, is_open=False),
    }

    if item.rate == EMPTY_RATE and candidate.default_rate is not None:
        updates["rate"] = candidate.default_rate

    if isinstance(item.invoice_description, UnsetDescription):
        updates["invoice_description"] = AutoDescription(value=invoice_description_for(candidate))

    return item.model_copy(update=updates)


def merge_item(item: LineItem, partial: Mapping[str, Any]) -> LineItem:
    """Shallow-merge fields into item and validate the result.

    Raises:
        pydantic.ValidationError: If a field is unknown or a value invalid.
    """
    data = item.model_dump()
    data.update(partial)
    return LineItem.model_validate(data)


def apply_user_edit(item: LineItem, **fields: Any) -> LineItem:
    """Apply fields typed directly by the user.

    A plain string for ``invoice_description`` is recorded as a user value,
    which blocks any later automatic assignment.

    Raises:
        ValueError: If the edit tries to unset the invoice description.
        pydantic.ValidationError: If a field is unknown or a value invalid.
    """
    if "invoice_description" in fields:
        value = fields["invoice_description"]
        if value is None or isinstance(value, UnsetDescription):
            raise ValueError("A user edit cannot unset the invoice description")
        if isinstance(value, str):
            fields["invoice_description"] = UserDescription(value=value)
    return merge_item(item, fields)
