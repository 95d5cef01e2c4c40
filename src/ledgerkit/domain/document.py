"""Invoice and bill status derivation and aging.

Status and amount due are always derived from the document's line items and
payment list; they are never stored, so they cannot drift from the payments.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.domain import errors
from ledgerkit.domain.currency import round_amount
from ledgerkit.domain.entities import (
    AgingBucket,
    AgingReport,
    AgingReportLine,
    BillableDocument,
    DocumentStatus,
    LineItem,
    Payment,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

UNKNOWN_COUNTERPARTY = "(none)"


def line_total(item: LineItem, currency: str) -> Decimal:
    """Amount of one line: (quantity x unit price - discount) plus tax.

    ``tax_rate`` is a percentage (16 means 16%) applied after the discount.
    The result is rounded half-up to the currency's minor unit.

    Raises:
        ValidationError: If the discount exceeds quantity x unit price
    """
    net = Decimal(item.quantity) * Decimal(item.unit_price) - Decimal(item.discount)
    if net < ZERO:
        raise errors.ValidationError(f"Discount on line '{item.description}' exceeds its amount")
    return round_amount(net + net * Decimal(item.tax_rate) / HUNDRED, currency)


def document_total(document: BillableDocument) -> Decimal:
    return sum((line_total(item, document.currency) for item in document.items), ZERO)


def amount_paid(document: BillableDocument, as_of: Optional[date] = None) -> Decimal:
    """Sum of payments, optionally only those made on or before ``as_of``."""
    return sum(
        (p.amount for p in document.payments if as_of is None or p.payment_date <= as_of),
        ZERO,
    )


def amount_due(document: BillableDocument, as_of: Optional[date] = None) -> Decimal:
    """Outstanding amount, never below zero."""
    return max(document_total(document) - amount_paid(document, as_of), ZERO)


def document_status(document: BillableDocument, as_of: Optional[date] = None) -> DocumentStatus:
    """Derive PENDING, PARTIAL or PAID from the total and the payments.

    A document whose payments cover its total is PAID, including a document
    with a zero total and an overpaid one.
    """
    paid = amount_paid(document, as_of)
    if paid >= document_total(document):
        return DocumentStatus.PAID
    if paid > 0:
        return DocumentStatus.PARTIAL
    return DocumentStatus.PENDING


def record_payment(document: BillableDocument, payment: Payment) -> BillableDocument:
    """Return a copy of ``document`` with ``payment`` appended.

    Raises:
        ValidationError: If the amount is not positive, has more precision
            than the document currency allows, or exceeds the amount due
    """
    amount = Decimal(payment.amount)
    if amount <= 0:
        raise errors.ValidationError(errors.non_positive_amount(amount))
    if amount != round_amount(amount, document.currency):
        raise errors.ValidationError(
            f"Payment {amount} has more precision than {document.currency} allows"
        )
    due = amount_due(document)
    if amount > due:
        raise errors.ValidationError(
            f"Payment of {amount} exceeds amount due {due} on "
            f"{document.document_type.value} {document.document_id}"
        )
    return replace(document, payments=document.payments + (payment,))


def remove_payment(document: BillableDocument, index: int) -> BillableDocument:
    """Return a copy of ``document`` without the payment at ``index``.

    Raises:
        NotFoundError: If there is no payment at ``index``
    """
    if not 0 <= index < len(document.payments):
        raise errors.NotFoundError(
            f"Payment {index} not found on {document.document_type.value} {document.document_id}"
        )
    payments = document.payments[:index] + document.payments[index + 1 :]
    return replace(document, payments=payments)


def aging_bucket(document: BillableDocument, as_of: date) -> AgingBucket:
    """Classify a document by days past its due date."""
    days_overdue = (as_of - document.due_date).days
    if days_overdue <= 0:
        return AgingBucket.CURRENT
    if days_overdue <= 30:
        return AgingBucket.DAYS_1_30
    if days_overdue <= 60:
        return AgingBucket.DAYS_31_60
    if days_overdue <= 90:
        return AgingBucket.DAYS_61_90
    return AgingBucket.DAYS_91_PLUS


def aging_report(documents: Iterable[BillableDocument], as_of: date) -> AgingReport:
    """Group unpaid amounts by counterparty and aging bucket.

    Only payments made on or before ``as_of`` count, and documents issued
    after ``as_of`` are left out. Fully paid documents contribute nothing.
    Amounts are summed as given; callers pass documents of one currency.
    """
    per_counterparty: dict[str, dict[AgingBucket, Decimal]] = {}
    totals = {bucket: ZERO for bucket in AgingBucket}

    for document in documents:
        if document.issue_date > as_of:
            continue
        due = amount_due(document, as_of)
        if due <= 0:
            continue
        bucket = aging_bucket(document, as_of)
        counterparty = document.counterparty or UNKNOWN_COUNTERPARTY
        buckets = per_counterparty.setdefault(counterparty, {b: ZERO for b in AgingBucket})
        buckets[bucket] += due
        totals[bucket] += due

    lines = tuple(
        AgingReportLine(counterparty=name, buckets=per_counterparty[name])
        for name in sorted(per_counterparty)
    )
    return AgingReport(as_of=as_of, lines=lines, totals=totals)
