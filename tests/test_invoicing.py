"""
Tests for invoices, credit notes, customer receipts and vendor bills.
"""
import pytest

from texawave.database import Collections
from texawave.exceptions import BusinessLogicError, NotFoundError, ValidationError
from texawave.models.bill import BillCreate
from texawave.models.credit_note import CreditNoteApply, CreditNoteCreate
from texawave.models.invoice import InvoiceCreate
from texawave.models.payment import PaymentMadeCreate, PaymentReceivedCreate
from texawave.services.credit_note_service import CreditNoteService, calculate_tax_lines
from texawave.services.invoice_service import InvoiceService, invoice_balance, payment_update
from texawave.services.payment_service import PaymentReceivedService
from texawave.services.purchase_service import PurchaseService, bill_status

from conftest import create_contact, create_invoice


@pytest.fixture
def customer(seed):
    return seed(Collections.CUSTOMERS, create_contact(contact_id="cust-1"))


@pytest.fixture
def vendor(seed):
    return seed(Collections.VENDORS, create_contact(contact_id="vend-1", name="Coimbatore Yarns"))


@pytest.fixture
def invoices(repos):
    return InvoiceService(repos.invoices, repos.customers, repos.orders)


@pytest.fixture
def credit_notes(repos):
    return CreditNoteService(repos.credit_notes, repos.invoices, repos.customers)


@pytest.fixture
def receipts(repos):
    return PaymentReceivedService(repos.payments_received, repos.invoices, repos.customers)


@pytest.fixture
def purchases(repos):
    return PurchaseService(repos.bills, repos.payments_made, repos.vendors)


def order_doc(order_id="so-1", status="QC Completed", invoice_status="notgenerated"):
    return {
        "id": order_id,
        "so_number": "SO-1001",
        "customer_id": "cust-1",
        "status": status,
        "invoice_status": invoice_status,
        "items": [{"product_name": "Elastic tape", "qty": 10, "rate": 100}]
    }


def invoice_request(**overrides):
    payload = {
        "customer_id": "cust-1",
        "invoice_date": "2025-03-01",
        "items": [{"description": "Elastic tape 20mm", "qty": 10, "rate": 100}]
    }
    payload.update(overrides)
    return InvoiceCreate(**payload)


class TestPaymentHelpers:

    def test_balance_never_negative(self):
        assert invoice_balance({"total": 100, "paid_amount": 150}) == 0.0

    def test_partial_then_paid(self):
        invoice = {"total": 1000, "paid_amount": 400}
        assert payment_update(invoice, 100) == {"paid_amount": 500, "balance": 500, "payment_status": "Partial"}
        assert payment_update(invoice, 600)["payment_status"] == "Paid"


class TestInvoices:

    @pytest.mark.asyncio
    async def test_direct_invoice(self, invoices, customer):
        invoice = await invoices.create_invoice(invoice_request(items=[
            {"description": "Elastic tape 20mm", "qty": 10, "rate": 100},
            {"description": "Sample", "qty": 0, "rate": 5}
        ]), "user-1")

        assert invoice["invoice_number"] == "INV-25-0001"
        assert invoice["due_date"] == "2025-03-31"
        assert len(invoice["items"]) == 1
        assert invoice["total"] == 1180.0
        assert invoice["balance"] == 1180.0
        assert invoice["payment_status"] == "Unpaid"
        assert invoice["customer_gstin"] == customer["gstin"]

    @pytest.mark.asyncio
    async def test_needs_a_line_with_quantity(self, invoices, customer):
        with pytest.raises(ValidationError):
            await invoices.create_invoice(invoice_request(items=[{"description": "Sample", "qty": 0}]), "user-1")

    def test_order_mode_requires_order(self):
        with pytest.raises(ValueError):
            invoice_request(mode="order")

    @pytest.mark.asyncio
    async def test_order_mode_marks_order_invoiced(self, invoices, customer, seed, stored):
        seed(Collections.SALES_ORDERS, order_doc())

        invoice = await invoices.create_invoice(invoice_request(mode="order", order_id="so-1"), "user-1")

        order = stored(Collections.SALES_ORDERS, id="so-1")[0]
        assert invoice["so_number"] == "SO-1001"
        assert order["status"] == "Invoice Generated"
        assert order["invoice_status"] == "generated"
        assert order["invoice_id"] == invoice["id"]

        with pytest.raises(BusinessLogicError):
            await invoices.create_invoice(invoice_request(mode="order", order_id="so-1"), "user-1")

    @pytest.mark.asyncio
    async def test_order_before_qc_cannot_be_invoiced(self, invoices, customer, seed):
        seed(Collections.SALES_ORDERS, order_doc(status="In Production"))
        with pytest.raises(BusinessLogicError):
            await invoices.create_invoice(invoice_request(mode="order", order_id="so-1"), "user-1")

    @pytest.mark.asyncio
    async def test_unknown_order(self, invoices, customer):
        with pytest.raises(NotFoundError):
            await invoices.create_invoice(invoice_request(mode="order", order_id="missing"), "user-1")

    @pytest.mark.asyncio
    async def test_paid_invoice_cannot_be_deleted(self, invoices, seed):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1", paid_amount=100.0, payment_status="Partial"))
        with pytest.raises(BusinessLogicError):
            await invoices.delete_invoice("inv-1")

    @pytest.mark.asyncio
    async def test_delete_unpaid(self, invoices, seed, stored):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1"))
        assert await invoices.delete_invoice("inv-1") is True
        assert stored(Collections.INVOICES) == []

    @pytest.mark.asyncio
    async def test_number_not_reused_after_delete(self, invoices, customer):
        first = await invoices.create_invoice(invoice_request(), "user-1")
        second = await invoices.create_invoice(invoice_request(), "user-1")
        await invoices.delete_invoice(first["id"])

        third = await invoices.create_invoice(invoice_request(), "user-1")

        assert second["invoice_number"] == "INV-25-0002"
        assert third["invoice_number"] == "INV-25-0003"

    @pytest.mark.asyncio
    async def test_list_by_payment_status_and_dates(self, invoices, seed):
        seed(
            Collections.INVOICES,
            create_invoice(invoice_id="a", invoice_date="2025-01-10"),
            create_invoice(invoice_id="b", invoice_date="2025-02-10", payment_status="Paid", paid_amount=1180.0),
            create_invoice(invoice_id="c", invoice_date="2025-03-10"),
        )

        unpaid = await invoices.list_invoices(payment_status="Unpaid")
        february_on = await invoices.list_invoices(date_from="2025-02-01")

        assert sorted(i["id"] for i in unpaid) == ["a", "c"]
        assert sorted(i["id"] for i in february_on) == ["b", "c"]
        assert {i["id"]: i["balance"] for i in february_on} == {"b": 0.0, "c": 1180.0}


class TestCreditNotes:

    def test_line_amount_includes_tax(self):
        totals = calculate_tax_lines([{"qty": 2, "rate": 100, "tax_percent": 18}])
        assert totals["items"][0]["amount"] == 236.0
        assert totals["sub_total"] == 200.0
        assert totals["tax_amount"] == 36.0
        assert totals["total"] == 236.0

    async def create_note(self, credit_notes, rate=100):
        return await credit_notes.create_credit_note(CreditNoteCreate(
            customer_id="cust-1",
            reason="Damaged Goods",
            items=[{"description": "Torn webbing", "qty": 2, "rate": rate, "tax_percent": 18}]
        ), "user-1")

    @pytest.mark.asyncio
    async def test_create(self, credit_notes, customer):
        note = await self.create_note(credit_notes)

        assert note["credit_note_number"].startswith("CN-")
        assert note["credit_note_number"].endswith("-0001")
        assert note["status"] == "Open"
        assert note["balance"] == 236.0

    @pytest.mark.asyncio
    async def test_unknown_reason(self, credit_notes, customer):
        with pytest.raises(ValidationError):
            await credit_notes.create_credit_note(CreditNoteCreate(
                customer_id="cust-1", reason="Changed my mind", items=[{"description": "x", "rate": 1}]
            ), "user-1")

    @pytest.mark.asyncio
    async def test_item_needs_description(self, credit_notes, customer):
        with pytest.raises(ValidationError):
            await credit_notes.create_credit_note(CreditNoteCreate(
                customer_id="cust-1", reason="Other", items=[{"description": "  ", "rate": 1}]
            ), "user-1")

    @pytest.mark.asyncio
    async def test_from_invoice_copies_lines_and_tax(self, credit_notes, customer, seed):
        invoice = create_invoice(invoice_id="inv-1", number="INV-25-0007")
        invoice.update({
            "apply_cgst": True, "apply_sgst": True, "apply_igst": False,
            "cgst_percent": 9.0, "sgst_percent": 9.0, "igst_percent": 18.0,
            "items": [{"description": "Elastic tape", "qty": 2, "rate": 100}]
        })
        seed(Collections.INVOICES, invoice)

        note = await credit_notes.from_invoice("inv-1", "Goods Returned", "user-1")

        assert note["invoice_number"] == "INV-25-0007"
        assert note["items"][0]["tax_percent"] == 18.0
        assert note["total"] == 236.0

    @pytest.mark.asyncio
    async def test_apply_fully_uses_note(self, credit_notes, customer, seed, stored):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1", total=1180.0))
        note = await self.create_note(credit_notes)

        applied = await credit_notes.apply_to_invoice(note["id"], CreditNoteApply(invoice_id="inv-1"), "user-1")

        assert applied["status"] == "Applied"
        assert applied["balance"] == 0.0
        assert applied["applications"][0]["amount"] == 236.0
        invoice = stored(Collections.INVOICES, id="inv-1")[0]
        assert invoice["paid_amount"] == 236.0
        assert invoice["payment_status"] == "Partial"

        with pytest.raises(BusinessLogicError):
            await credit_notes.apply_to_invoice(note["id"], CreditNoteApply(invoice_id="inv-1"), "user-1")

    @pytest.mark.asyncio
    async def test_apply_capped_at_invoice_balance(self, credit_notes, customer, seed, stored):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1", total=100.0))
        note = await self.create_note(credit_notes)

        applied = await credit_notes.apply_to_invoice(
            note["id"], CreditNoteApply(invoice_id="inv-1", amount=200), "user-1"
        )

        assert applied["status"] == "Open"
        assert applied["balance"] == 136.0
        assert stored(Collections.INVOICES, id="inv-1")[0]["payment_status"] == "Paid"

    @pytest.mark.asyncio
    async def test_apply_to_other_customer_invoice(self, credit_notes, customer, seed):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-9", customer_id="cust-9"))
        note = await self.create_note(credit_notes)

        with pytest.raises(BusinessLogicError):
            await credit_notes.apply_to_invoice(note["id"], CreditNoteApply(invoice_id="inv-9"), "user-1")

    @pytest.mark.asyncio
    async def test_void(self, credit_notes, customer, seed):
        fresh = await self.create_note(credit_notes)
        voided = await credit_notes.void_credit_note(fresh["id"])
        assert voided["status"] == "Void"
        assert voided["balance"] == 0.0

        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1"))
        used = await self.create_note(credit_notes, rate=10)
        await credit_notes.apply_to_invoice(used["id"], CreditNoteApply(invoice_id="inv-1"), "user-1")
        with pytest.raises(BusinessLogicError):
            await credit_notes.void_credit_note(used["id"])


class TestPaymentsReceived:

    @pytest.fixture
    def open_book(self, seed, customer):
        seed(
            Collections.INVOICES,
            create_invoice(invoice_id="inv-1", total=1000.0, invoice_date="2025-01-05"),
            create_invoice(invoice_id="inv-2", total=500.0, paid_amount=200.0, payment_status="Partial",
                           invoice_date="2025-01-01"),
            create_invoice(invoice_id="inv-3", total=300.0, paid_amount=300.0, payment_status="Paid"),
        )

    @pytest.mark.asyncio
    async def test_open_invoices(self, receipts, open_book):
        invoices = await receipts.open_invoices("cust-1")

        assert [i["id"] for i in invoices] == ["inv-2", "inv-1"]
        assert invoices[0]["balance"] == 300.0

    @pytest.mark.asyncio
    async def test_allocations_and_excess(self, receipts, open_book, stored):
        payment = await receipts.record_payment(PaymentReceivedCreate(
            customer_id="cust-1",
            amount=2000,
            bank_charges=50,
            payment_date="2025-04-01",
            allocations=[
                {"invoice_id": "inv-1", "amount": 1000},
                {"invoice_id": "inv-2", "amount": 400},
                {"invoice_id": "inv-3", "amount": 100}
            ]
        ), "user-1")

        assert payment["payment_number"] == "RCPT-25-0001"
        assert [a["amount"] for a in payment["allocations"]] == [1000.0, 300.0]
        assert payment["allocated_amount"] == 1300.0
        assert payment["excess_amount"] == 650.0
        assert stored(Collections.INVOICES, id="inv-1")[0]["payment_status"] == "Paid"
        assert stored(Collections.INVOICES, id="inv-2")[0]["paid_amount"] == 500.0
        assert stored(Collections.INVOICES, id="inv-3")[0]["paid_amount"] == 300.0

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, receipts, customer):
        with pytest.raises(ValidationError):
            await receipts.record_payment(PaymentReceivedCreate(customer_id="cust-1", amount=0), "user-1")

    @pytest.mark.asyncio
    async def test_allocations_capped_at_amount_received(self, receipts, customer, seed, stored):
        seed(Collections.INVOICES, create_invoice(invoice_id="inv-1"))

        with pytest.raises(ValidationError):
            await receipts.record_payment(PaymentReceivedCreate(
                customer_id="cust-1",
                amount=100,
                allocations=[{"invoice_id": "inv-1", "amount": 500}]
            ), "user-1")

        assert stored(Collections.INVOICES, id="inv-1")[0]["paid_amount"] == 0
        assert stored(Collections.PAYMENTS_RECEIVED) == []


class TestPurchases:

    def test_bill_status(self):
        assert bill_status(100, 0) == "Open"
        assert bill_status(100, 40) == "Partially Paid"
        assert bill_status(100, 100) == "Paid"

    async def create_bill(self, purchases, paid_amount=0):
        return await purchases.create_bill(BillCreate(
            vendor_id="vend-1",
            vendor_bill_number="CY/123",
            bill_date="2025-02-01",
            items=[{"description": "Polyester yarn", "qty": 10, "rate": 50, "tax_percent": 12}],
            paid_amount=paid_amount
        ), "user-1")

    @pytest.mark.asyncio
    async def test_create_bill(self, purchases, vendor):
        bill = await self.create_bill(purchases)

        assert bill["bill_number"] == "BILL-25-0001"
        assert bill["total"] == 560.0
        assert bill["status"] == "Open"
        assert bill["balance"] == 560.0

    @pytest.mark.asyncio
    async def test_paid_amount_capped_at_total(self, purchases, vendor):
        bill = await self.create_bill(purchases, paid_amount=1000)
        assert bill["paid_amount"] == 560.0
        assert bill["status"] == "Paid"

    @pytest.mark.asyncio
    async def test_payments_settle_bill(self, purchases, vendor, stored):
        bill = await self.create_bill(purchases)

        first = await purchases.record_payment(PaymentMadeCreate(vendor_id="vend-1", bill_id=bill["id"], amount=300), "user-1")
        assert first["applied_amount"] == 300.0
        assert stored(Collections.BILLS, id=bill["id"])[0]["status"] == "Partially Paid"

        second = await purchases.record_payment(PaymentMadeCreate(vendor_id="vend-1", bill_id=bill["id"], amount=500), "user-1")
        assert second["applied_amount"] == 260.0
        assert stored(Collections.BILLS, id=bill["id"])[0]["status"] == "Paid"

        with pytest.raises(BusinessLogicError):
            await purchases.record_payment(PaymentMadeCreate(vendor_id="vend-1", bill_id=bill["id"], amount=10), "user-1")

    @pytest.mark.asyncio
    async def test_bill_of_other_vendor(self, purchases, vendor, seed):
        bill = await self.create_bill(purchases)
        seed(Collections.VENDORS, create_contact(contact_id="vend-2", name="Other Mills"))

        with pytest.raises(BusinessLogicError):
            await purchases.record_payment(PaymentMadeCreate(vendor_id="vend-2", bill_id=bill["id"], amount=10), "user-1")

    @pytest.mark.asyncio
    async def test_delete_only_without_payments(self, purchases, vendor):
        paid = await self.create_bill(purchases)
        await purchases.record_payment(PaymentMadeCreate(vendor_id="vend-1", bill_id=paid["id"], amount=100), "user-1")
        with pytest.raises(BusinessLogicError):
            await purchases.delete_bill(paid["id"])

        unpaid = await self.create_bill(purchases)
        assert await purchases.delete_bill(unpaid["id"]) is True
