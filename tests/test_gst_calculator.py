"""
Tests for GST line and invoice totals.
"""
from texawave.utils.gst_calculator import (
    calculate_invoice_totals,
    calculate_line_item,
    calculate_order_totals
)

RATES = {"cgst": 9.0, "sgst": 9.0, "igst": 18.0}
INTRA_STATE = {"cgst": True, "sgst": True, "igst": False}
INTER_STATE = {"cgst": False, "sgst": False, "igst": True}


class TestLineItem:

    def test_percent_discount_and_intra_state_tax(self):
        line = calculate_line_item({"qty": 10, "rate": 100, "discount_percent": 10}, "INR", RATES, INTRA_STATE)
        assert line["amount"] == 1000.0
        assert line["discount"] == 100.0
        assert line["taxable_value"] == 900.0
        assert line["cgst_amount"] == 81.0
        assert line["sgst_amount"] == 81.0
        assert line["igst_amount"] == 0.0
        assert line["total"] == 1062.0

    def test_percent_discount_wins_over_fixed(self):
        line = calculate_line_item(
            {"qty": 1, "rate": 1000, "discount": 300, "discount_percent": 5}, "INR", RATES, INTRA_STATE
        )
        assert line["discount"] == 50.0

    def test_fixed_discount(self):
        line = calculate_line_item({"qty": 1, "rate": 1000, "discount": 50}, "INR", RATES, INTRA_STATE)
        assert line["taxable_value"] == 950.0

    def test_inter_state_uses_igst(self):
        line = calculate_line_item({"qty": 2, "rate": 250}, "INR", RATES, INTER_STATE)
        assert line["igst_amount"] == 90.0
        assert line["cgst_amount"] == 0.0
        assert line["total"] == 590.0

    def test_foreign_currency_is_not_taxed(self):
        line = calculate_line_item({"qty": 2, "rate": 250}, "USD", RATES, INTRA_STATE)
        assert line["cgst_amount"] == line["sgst_amount"] == line["igst_amount"] == 0.0
        assert line["total"] == 500.0


class TestInvoiceTotals:

    def test_fixed_transport_is_taxed(self):
        totals = calculate_invoice_totals(
            [{"qty": 10, "rate": 100}], "INR", RATES, INTRA_STATE, "fixed", 100.0
        )
        assert totals["transport_charge"] == 100.0
        assert totals["taxable"] == 1100.0
        assert totals["taxable_amount"] == 1000.0
        assert totals["cgst"] == 99.0
        assert totals["sgst"] == 99.0
        assert totals["total"] == 1298.0

    def test_percent_transport_over_taxable_lines(self):
        totals = calculate_invoice_totals(
            [{"qty": 10, "rate": 100, "discount_percent": 10}],
            "INR", RATES, INTRA_STATE, "percent", 0.0, 10.0
        )
        assert totals["transport_charge"] == 90.0
        assert totals["taxable"] == 990.0
        assert totals["cgst"] == 89.1
        assert totals["total"] == 1168.2

    def test_foreign_currency_totals(self):
        totals = calculate_invoice_totals([{"qty": 3, "rate": 10}], "EUR", RATES, INTRA_STATE, "fixed", 5.0)
        assert totals["cgst"] == totals["sgst"] == totals["igst"] == 0.0
        assert totals["total"] == 35.0


class TestOrderTotals:

    def test_inr_order(self):
        totals = calculate_order_totals([{"qty": 2, "rate": 500}], "INR", 9.0, 9.0, 5.0)
        assert totals["subtotal"] == 1000.0
        assert totals["cgst_amount"] == 90.0
        assert totals["sgst_amount"] == 90.0
        assert totals["transport_charge"] == 50.0
        assert totals["grand_total"] == 1230.0

    def test_given_line_amount_is_kept(self):
        totals = calculate_order_totals([{"qty": 2, "rate": 500, "amount": 900}], "INR", 0, 0, 0)
        assert totals["subtotal"] == 900.0

    def test_export_order_has_no_gst(self):
        totals = calculate_order_totals([{"qty": 2, "rate": 500}], "USD", 9.0, 9.0, 5.0)
        assert totals["cgst_amount"] == 0.0
        assert totals["grand_total"] == 1050.0
