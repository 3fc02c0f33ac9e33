"""
Tests for document numbers and date helpers.
"""
from datetime import date

import pytest

from texawave.utils.dates import add_months, month_bounds, previous_month, is_sunday
from texawave.utils.numbering import (
    generate_credit_note_number,
    generate_document_number,
    generate_recurring_invoice_number,
    generate_so_number
)


class TestDocumentNumbers:

    def test_invoice_number_uses_count_and_year(self):
        assert generate_document_number("invoice", 4, date(2025, 3, 1)) == "INV-25-0005"

    def test_quotation_prefix(self):
        assert generate_document_number("quotation", 0, date(2026, 1, 2)) == "SQFY-26-0001"

    def test_unknown_type(self):
        with pytest.raises(KeyError):
            generate_document_number("receipt_voucher", 0)

    def test_sales_orders_start_at_1001(self):
        assert generate_so_number(0) == "SO-1001"
        assert generate_so_number(41) == "SO-1042"

    def test_credit_note_full_year(self):
        assert generate_credit_note_number(0, date(2025, 1, 1)) == "CN-2025-0001"

    def test_recurring_invoice_keeps_last_six_digits(self):
        assert generate_recurring_invoice_number(1234567890123, date(2025, 6, 1)) == "RINV-25-890123"


class TestDates:

    def test_add_months_clamps_day(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)

    def test_previous_month_across_year(self):
        assert previous_month("2025-01") == "2024-12"

    def test_month_bounds(self):
        assert month_bounds("2024-02") == ("2024-02-01", "2024-02-29")

    def test_sunday(self):
        assert is_sunday("2025-01-05")
        assert not is_sunday("2025-01-06")
