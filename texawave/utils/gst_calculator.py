"""
GST calculation for invoices and sales orders.

CGST/SGST apply to intra-state supplies, IGST to inter-state ones. Taxes
are charged only on INR invoices and only when the matching apply flag is
set. Transport charges are taxed at the same rates as the goods.
"""
from typing import Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)

TAX_CURRENCY = "INR"


def _money(value: float) -> float:
    return round(float(value), 2)


def _tax_components(
    taxable: float,
    currency: str,
    rates: Dict[str, float],
    flags: Dict[str, bool]
) -> Dict[str, float]:
    """Compute cgst/sgst/igst amounts for a taxable value."""
    result = {"cgst": 0.0, "sgst": 0.0, "igst": 0.0}
    if currency != TAX_CURRENCY:
        return result
    for tax in result:
        pct = float(rates.get(tax, 0) or 0)
        if flags.get(tax) and pct > 0:
            result[tax] = taxable * pct / 100
    return result


def calculate_line_item(
    item: Dict[str, Any],
    currency: str = TAX_CURRENCY,
    rates: Optional[Dict[str, float]] = None,
    flags: Optional[Dict[str, bool]] = None
) -> Dict[str, Any]:
    """
    Calculate amounts for one invoice line.

    amount = qty × rate; a percentage discount wins over a fixed one;
    taxable = amount − discount; each tax rounded to 2 decimals.

    Args:
        item: Line with qty, rate, discount, discount_percent
        currency: Invoice currency
        rates: {"cgst": %, "sgst": %, "igst": %}
        flags: {"cgst": bool, "sgst": bool, "igst": bool}

    Returns:
        The line enriched with amount, discount, taxable_value, tax amounts and total
    """
    rates = rates or {}
    flags = flags or {}

    qty = float(item.get("qty", 0) or 0)
    rate = float(item.get("rate", 0) or 0)
    discount_percent = float(item.get("discount_percent", 0) or 0)

    amount = qty * rate
    if discount_percent > 0:
        discount = amount * discount_percent / 100
    else:
        discount = float(item.get("discount", 0) or 0)
    taxable_value = amount - discount

    taxes = _tax_components(taxable_value, currency, rates, flags)

    line = dict(item)
    line.update({
        "qty": qty,
        "rate": rate,
        "discount_percent": discount_percent,
        "amount": _money(amount),
        "discount": _money(discount),
        "taxable_value": _money(taxable_value),
        "cgst_percent": float(rates.get("cgst", 0) or 0),
        "sgst_percent": float(rates.get("sgst", 0) or 0),
        "igst_percent": float(rates.get("igst", 0) or 0),
        "cgst_amount": _money(taxes["cgst"]),
        "sgst_amount": _money(taxes["sgst"]),
        "igst_amount": _money(taxes["igst"]),
    })
    line["total"] = _money(
        taxable_value + line["cgst_amount"] + line["sgst_amount"] + line["igst_amount"]
    )
    return line


def calculate_transport_charge(
    lines: List[Dict[str, Any]],
    charge_type: str = "fixed",
    charge: float = 0.0,
    charge_percent: float = 0.0
) -> float:
    """Fixed charge, or a percentage of the summed line taxable values."""
    if charge_type == "percent":
        items_total = sum(line["taxable_value"] for line in lines)
        return items_total * float(charge_percent or 0) / 100
    return float(charge or 0)


def calculate_invoice_totals(
    items: List[Dict[str, Any]],
    currency: str = TAX_CURRENCY,
    rates: Optional[Dict[str, float]] = None,
    flags: Optional[Dict[str, bool]] = None,
    transport_charge_type: str = "fixed",
    transport_charge: float = 0.0,
    transport_charge_percent: float = 0.0
) -> Dict[str, Any]:
    """
    Calculate every line and the invoice totals.

    Returns:
        Dict with items, transport_charge, taxable (incl. transport),
        taxable_amount (goods only), cgst, sgst, igst and total
    """
    rates = rates or {}
    flags = flags or {}

    lines = [calculate_line_item(item, currency, rates, flags) for item in items]
    transport = calculate_transport_charge(
        lines, transport_charge_type, transport_charge, transport_charge_percent
    )

    items_taxable = sum(line["taxable_value"] for line in lines)
    taxable = items_taxable + transport

    cgst = sgst = igst = 0.0
    if currency == TAX_CURRENCY:
        transport_taxes = _tax_components(transport, currency, rates, flags) if transport > 0 else {}
        cgst = sum(line["cgst_amount"] for line in lines) + transport_taxes.get("cgst", 0.0)
        sgst = sum(line["sgst_amount"] for line in lines) + transport_taxes.get("sgst", 0.0)
        igst = sum(line["igst_amount"] for line in lines) + transport_taxes.get("igst", 0.0)

    total = taxable + cgst + sgst + igst

    return {
        "items": lines,
        "transport_charge": _money(transport),
        "taxable": _money(taxable),
        "taxable_amount": _money(taxable - transport),
        "cgst": _money(cgst),
        "sgst": _money(sgst),
        "igst": _money(igst),
        "total": _money(total),
    }


def calculate_order_totals(
    items: List[Dict[str, Any]],
    currency: str = TAX_CURRENCY,
    cgst_percent: float = 9.0,
    sgst_percent: float = 9.0,
    transport_percent: float = 0.0
) -> Dict[str, Any]:
    """
    Totals for a manually entered sales order.

    subtotal = Σ line amounts (qty × rate when amount is missing);
    CGST/SGST only on INR orders; transport is a percentage of subtotal.
    """
    lines = []
    for item in items:
        line = dict(item)
        qty = float(line.get("qty", 0) or 0)
        rate = float(line.get("rate", 0) or 0)
        if line.get("amount") is None:
            line["amount"] = _money(qty * rate)
        lines.append(line)

    subtotal = sum(float(line.get("amount", 0) or 0) for line in lines)
    is_inr = currency == TAX_CURRENCY
    cgst = subtotal * cgst_percent / 100 if is_inr else 0.0
    sgst = subtotal * sgst_percent / 100 if is_inr else 0.0
    transport = subtotal * float(transport_percent or 0) / 100

    return {
        "items": lines,
        "subtotal": _money(subtotal),
        "cgst_amount": _money(cgst),
        "sgst_amount": _money(sgst),
        "transport_charge": _money(transport),
        "grand_total": _money(subtotal + cgst + sgst + transport),
    }
