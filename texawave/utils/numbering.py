"""
Document numbering.
Numbers follow {PREFIX}-{YY}-{sequence:04d} where the sequence is the
count of existing documents of the same type plus one.
"""
from datetime import date
from typing import Optional

DOCUMENT_PREFIXES = {
    "quotation": "SQFY",
    "sales_order": "SOFY",
    "invoice": "INV",
    "delivery_challan": "DC",
    "credit_note": "CN",
    "payment_received": "RCPT",
    "retainer_invoice": "RET",
    "recurring_invoice": "REC",
    "bill": "BILL",
}

SALES_ORDER_BASE = 1001


def generate_document_number(doc_type: str, existing_count: int, on: Optional[date] = None) -> str:
    """
    Build the next document number for a document type.

    Args:
        doc_type: Key of DOCUMENT_PREFIXES
        existing_count: Number of documents already stored
        on: Date whose year is embedded (defaults to today)

    Raises:
        KeyError: If doc_type is unknown
    """
    prefix = DOCUMENT_PREFIXES[doc_type]
    year = (on or date.today()).strftime("%y")
    return f"{prefix}-{year}-{existing_count + 1:04d}"


def generate_so_number(existing_count: int) -> str:
    """Sales order numbers start at SO-1001."""
    return f"SO-{existing_count + SALES_ORDER_BASE:04d}"


def generate_credit_note_number(existing_count: int, on: Optional[date] = None) -> str:
    """Credit notes carry the full year: CN-2025-0001."""
    year = (on or date.today()).year
    return f"CN-{year}-{existing_count + 1:04d}"


def generate_recurring_invoice_number(sequence: int, on: Optional[date] = None) -> str:
    """Invoices raised from recurring profiles: RINV-YY-NNNNNN (last six digits of sequence)."""
    year = (on or date.today()).strftime("%y")
    return f"RINV-{year}-{sequence % 1_000_000:06d}"
