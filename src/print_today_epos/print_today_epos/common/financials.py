from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping

from ..core.constants import VAT_RATE
from ..core.enums import DiscountType, PaymentStatus
from ..core.exceptions import ValidationError
from .validators import require_non_empty, require_non_negative

PENNY = Decimal("0.01")


def to_money(value: Any) -> Decimal:
    """Quantise an amount to pence."""
    return Decimal(str(value if value is not None else 0)).quantize(PENNY, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    """One line of a job sheet or quotation.

    `price` is the line total (not a unit price).
    """

    description: str
    quantity: Decimal
    price: Decimal
    vat_applied: bool = False

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "price": self.price,
            "vat_applied": self.vat_applied,
        }


@dataclass(frozen=True)
class Totals:
    sub_total: Decimal
    vat_amount: Decimal
    total_amount: Decimal


def parse_line_item(raw: Mapping[str, Any]) -> LineItem:
    if not isinstance(raw, Mapping):
        raise ValidationError("Each item must be an object.")
    return LineItem(
        description=require_non_empty(raw.get("description"), "Description"),
        quantity=require_non_negative(raw.get("quantity", 0), "Quantity"),
        price=to_money(require_non_negative(raw.get("price", 0), "Price")),
        vat_applied=bool(raw.get("vat_applied", raw.get("vatApplied", False))),
    )


def parse_line_items(raw_items: Any) -> tuple[LineItem, ...]:
    if not raw_items:
        raise ValidationError("At least one item is required.")
    return tuple(item if isinstance(item, LineItem) else parse_line_item(item) for item in raw_items)


def compute_totals(items: Iterable[LineItem]) -> Totals:
    sub_total = Decimal("0")
    vat_amount = Decimal("0")
    for item in items:
        sub_total += item.price
        if item.vat_applied:
            vat_amount += item.price * VAT_RATE
    sub_total = to_money(sub_total)
    vat_amount = to_money(vat_amount)
    return Totals(sub_total=sub_total, vat_amount=vat_amount, total_amount=sub_total + vat_amount)


@dataclass(frozen=True)
class InvoiceTotals:
    sub_total: Decimal
    discount_amount: Decimal
    sub_total_after_discount: Decimal
    vat_amount: Decimal
    total_amount: Decimal


def compute_invoice_totals(
    items: Iterable[LineItem], discount_type: DiscountType, discount_value: Decimal
) -> InvoiceTotals:
    """Totals for a generated invoice.

    The discount is spread over the lines in proportion to their price, so VAT
    is charged on each VAT-flagged line after its share of the discount.
    """

    items = list(items)
    sub_total = sum((item.price for item in items), Decimal("0"))
    if discount_type == DiscountType.PERCENTAGE:
        if discount_value > 100:
            raise ValidationError("Discount percentage cannot exceed 100.")
        discount = sub_total * discount_value / 100
    else:
        discount = discount_value
    if discount > sub_total:
        raise ValidationError("Discount cannot exceed the subtotal.")

    vat_amount = Decimal("0")
    for item in items:
        if item.vat_applied and sub_total > 0:
            share = discount * item.price / sub_total
            vat_amount += (item.price - share) * VAT_RATE

    sub_total = to_money(sub_total)
    discount = to_money(discount)
    after_discount = sub_total - discount
    vat_amount = to_money(vat_amount)
    return InvoiceTotals(
        sub_total=sub_total,
        discount_amount=discount,
        sub_total_after_discount=after_discount,
        vat_amount=vat_amount,
        total_amount=after_discount + vat_amount,
    )


def derive_payment_status(paid_amount: Decimal, total_amount: Decimal) -> PaymentStatus:
    if paid_amount <= 0:
        return PaymentStatus.UNPAID
    if paid_amount < total_amount:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.PAID


def line_items_from_documents(raw_items: Any) -> tuple[LineItem, ...]:
    """Rebuild stored line items without re-validating them."""
    out: list[LineItem] = []
    for raw in raw_items or []:
        out.append(
            LineItem(
                description=str(raw.get("description") or ""),
                quantity=Decimal(str(raw.get("quantity", 0))),
                price=to_money(raw.get("price", 0)),
                vat_applied=bool(raw.get("vat_applied", raw.get("vatApplied", False))),
            )
        )
    return tuple(out)


def line_items_to_documents(items: Iterable[LineItem]) -> list[dict]:
    return [item.to_dict() for item in items]
