"""Tests for the tax preview calculator."""

import pytest

from invoice_composer import LineItem, TaxPreview, compute_tax_preview


class TestComputeTaxPreview:
    """Tests for compute_tax_preview."""

    def test_mixed_items(self) -> None:
        """Test subtotal, tax and total with discount and mixed rates."""
        items = [
            LineItem(description="a", quantity=2, rate=100, discount_percent=0, gst_rate=18),
            LineItem(description="b", quantity=1, rate=50, discount_percent=10, gst_rate=5),
        ]

        preview = compute_tax_preview(items)

        assert preview.subtotal == pytest.approx(245.0)
        assert preview.tax == pytest.approx(38.25)
        assert preview.total == pytest.approx(283.25)

    def test_per_item_figures(self) -> None:
        """Test each item gets its own taxable value and tax."""
        items = [
            LineItem(quantity=2, rate=100, gst_rate=18),
            LineItem(quantity=1, rate=50, discount_percent=10, gst_rate=5),
        ]

        lines = compute_tax_preview(items).lines

        assert [line.index for line in lines] == [0, 1]
        assert lines[0].taxable_value == pytest.approx(200.0)
        assert lines[0].tax == pytest.approx(36.0)
        assert lines[1].taxable_value == pytest.approx(45.0)
        assert lines[1].tax == pytest.approx(2.25)

    def test_empty_and_blank_items(self) -> None:
        """Test items without a rate contribute nothing."""
        preview = compute_tax_preview([LineItem(), LineItem(gst_rate=18)])

        assert preview.subtotal == 0
        assert preview.tax == 0
        assert preview.total == 0

    def test_full_discount(self) -> None:
        """Test a 100% discount zeroes the line."""
        preview = compute_tax_preview([LineItem(quantity=3, rate=10, discount_percent=100, gst_rate=28)])

        assert preview.total == pytest.approx(0.0)

    def test_always_provisional(self) -> None:
        """Test the preview never claims to be final."""
        assert compute_tax_preview([]).is_provisional is True


class TestRounding:
    """Rounding is applied for display only."""

    def test_running_totals_unrounded(self) -> None:
        """Test many small amounts do not accumulate rounding error."""
        items = [LineItem(quantity=1, rate=0.333, gst_rate=18) for _ in range(3)]

        preview = compute_tax_preview(items)

        assert preview.subtotal == pytest.approx(0.999)
        assert preview.tax == pytest.approx(0.17982)
        assert preview.rounded() == {"subtotal": 1.0, "tax": 0.18, "total": 1.18}

    def test_display(self) -> None:
        """Test display formats two decimals."""
        preview = TaxPreview(subtotal=245, tax=38.25)

        assert preview.display() == {"subtotal": "245.00", "tax": "38.25", "total": "283.25"}
