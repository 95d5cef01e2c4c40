"""Domain model entities for ledgerkit.

These are pure data classes representing ledger concepts, independent of the
database schema. Storage rows are converted to these by
``ledgerkit.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class LedgerGroup(str, Enum):
    """Top-level accounting classification of a category."""

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    SHARES = "SHARES"
    DIVIDENDS = "DIVIDENDS"


class LedgerState(str, Enum):
    """Side of a posting."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    @property
    def opposite(self) -> "LedgerState":
        return LedgerState.CREDIT if self is LedgerState.DEBIT else LedgerState.DEBIT


class EntryMode(str, Enum):
    SINGLE_ENTRY = "SINGLE_ENTRY"
    DOUBLE_ENTRY = "DOUBLE_ENTRY"


class GroupStatus(str, Enum):
    """Lifecycle of a journal entry: BALANCED -> POSTED -> REVERSED."""

    BALANCED = "BALANCED"
    POSTED = "POSTED"
    REVERSED = "REVERSED"


class VoucherType(str, Enum):
    DEPOSIT = "DEPOSIT"
    PAYMENT = "PAYMENT"
    RECEIPT = "RECEIPT"


class VoucherTo(str, Enum):
    CLIENT = "CLIENT"
    VENDOR = "VENDOR"
    STAFF = "STAFF"
    OTHER = "OTHER"


class VoucherStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DocumentType(str, Enum):
    """Kinds of business documents a transaction can point back to."""

    INVOICE = "INVOICE"
    BILL = "BILL"
    INVOICE_PAYMENT = "INVOICE_PAYMENT"
    BILL_PAYMENT = "BILL_PAYMENT"
    VOUCHER = "VOUCHER"
    OTHER = "OTHER"


class DocumentStatus(str, Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


class AgingBucket(str, Enum):
    """Time-since-due classification of an unpaid document."""

    CURRENT = "CURRENT"
    DAYS_1_30 = "1-30"
    DAYS_31_60 = "31-60"
    DAYS_61_90 = "61-90"
    DAYS_91_PLUS = "91+"


class AccountPurpose(str, Enum):
    """Well-known system accounts resolved by get-or-create."""

    CASH = "CASH"
    BANK = "BANK"
    RECEIVABLE = "RECEIVABLE"
    PAYABLE = "PAYABLE"
    SALES_INCOME = "SALES_INCOME"
    GENERAL_EXPENSE = "GENERAL_EXPENSE"
    TAX_PAYABLE = "TAX_PAYABLE"
    RETAINED_EARNINGS = "RETAINED_EARNINGS"
    EXCHANGE_DIFFERENCE = "EXCHANGE_DIFFERENCE"


@dataclass(frozen=True)
class DocumentRef:
    """Weak reference from a ledger entry back to its business document.

    The ledger never dereferences it; resolution happens in the calling layer.
    """

    document_type: DocumentType
    document_id: str

    def __str__(self) -> str:
        return f"{self.document_type.value}:{self.document_id}"


@dataclass(frozen=True)
class LedgerAccountCategory:
    """Category domain entity mapping a name to a ledger group."""

    id: int
    name: str
    ledger_group: LedgerGroup
    ledger_sub_group: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class LedgerAccount:
    """Chart of accounts entry."""

    id: int
    name: str
    number: Optional[str]
    category_id: int
    parent_id: Optional[int]
    currency: str
    system_account: bool
    editable: bool
    hidden: bool
    archived: bool
    purpose: Optional[AccountPurpose]
    created_at: datetime


@dataclass(frozen=True)
class LedgerTransaction:
    """A single ledger record.

    SINGLE_ENTRY records use ``ledger_account_id`` and ``transaction_state``;
    DOUBLE_ENTRY records use ``debit_account_id`` and ``credit_account_id``.
    """

    id: int
    entry_mode: EntryMode
    amount: Decimal
    currency: str
    exchange_rate: Decimal
    base_amount: Decimal
    transaction_date: date
    ledger_account_id: Optional[int]
    transaction_state: Optional[LedgerState]
    debit_account_id: Optional[int]
    credit_account_id: Optional[int]
    verified: bool
    verified_by: Optional[str]
    archived: bool
    description: Optional[str]
    related_to: Optional[DocumentRef]
    payment_method: Optional[str]
    group_id: Optional[int]
    reversal_of_id: Optional[int]
    reversed_by_id: Optional[int]
    created_at: datetime

    def legs(self) -> list[tuple[int, LedgerState]]:
        """Return (account_id, side) pairs this record posts to."""
        if self.entry_mode == EntryMode.SINGLE_ENTRY:
            return [(self.ledger_account_id, self.transaction_state)]
        return [
            (self.debit_account_id, LedgerState.DEBIT),
            (self.credit_account_id, LedgerState.CREDIT),
        ]

    def side_for(self, account_id: int) -> Optional[LedgerState]:
        for leg_account_id, side in self.legs():
            if leg_account_id == account_id:
                return side
        return None


@dataclass(frozen=True)
class LedgerTransactionGroup:
    """A journal entry binding balanced member transactions."""

    id: int
    transaction_date: date
    currency: str
    description: Optional[str]
    reference: Optional[str]
    status: GroupStatus
    reversal_of_id: Optional[int]
    reversed_by_id: Optional[int]
    created_at: datetime
    transactions: tuple[LedgerTransaction, ...] = ()

    @property
    def total_debit(self) -> Decimal:
        return group_totals(self.transactions)[0]

    @property
    def total_credit(self) -> Decimal:
        return group_totals(self.transactions)[1]

    @property
    def balanced(self) -> bool:
        total_debit, total_credit = group_totals(self.transactions)
        return total_debit == total_credit


def group_totals(
    transactions, use_base: bool = False
) -> tuple[Decimal, Decimal]:
    """Sum debit and credit sides of a set of transactions.

    A DOUBLE_ENTRY record counts on both sides; a SINGLE_ENTRY record counts on
    its state's side.
    """
    total_debit = Decimal("0")
    total_credit = Decimal("0")
    for txn in transactions:
        value = txn.base_amount if use_base else txn.amount
        for _, side in txn.legs():
            if side == LedgerState.DEBIT:
                total_debit += value
            else:
                total_credit += value
    return total_debit, total_credit


@dataclass(frozen=True)
class JournalLine:
    """Input line for a multi-line journal entry."""

    account_id: int
    side: LedgerState
    amount: Decimal
    description: Optional[str] = None


@dataclass(frozen=True)
class Voucher:
    """Payment/receipt/deposit wrapper around one ledger transaction."""

    id: int
    transaction_id: int
    voucher_type: VoucherType
    voucher_to: VoucherTo
    beneficiary_name: Optional[str]
    reference: Optional[str]
    status: VoucherStatus
    version: int
    approved_by: Optional[str]
    created_at: datetime
    transaction: Optional[LedgerTransaction] = None

    @property
    def amount(self) -> Optional[Decimal]:
        return self.transaction.amount if self.transaction else None

    @property
    def debit_account_id(self) -> Optional[int]:
        return self.transaction.debit_account_id if self.transaction else None

    @property
    def credit_account_id(self) -> Optional[int]:
        return self.transaction.credit_account_id if self.transaction else None

    @property
    def editable(self) -> bool:
        return self.status == VoucherStatus.PENDING


@dataclass(frozen=True)
class LedgerHalt:
    """Marker that stops automated posting for a tenant."""

    reason: str
    created_at: datetime


@dataclass(frozen=True)
class TrialBalanceLine:
    account_id: int
    account_name: str
    ledger_group: LedgerGroup
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class TrialBalance:
    as_of: date
    lines: tuple[TrialBalanceLine, ...]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class RunningBalanceLine:
    transaction: LedgerTransaction
    side: LedgerState
    delta: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountActivity:
    """Opening/movement/closing figures for one account over a period."""

    account_id: int
    account_name: str
    ledger_group: LedgerGroup
    opening_balance: Decimal
    debit_movement: Decimal
    credit_movement: Decimal
    closing_balance: Decimal


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")


@dataclass(frozen=True)
class Payment:
    amount: Decimal
    payment_date: date
    method: Optional[str] = None
    reference: Optional[str] = None


@dataclass(frozen=True)
class BillableDocument:
    """Invoice or bill as seen by status derivation.

    Status is never stored here; see ``ledgerkit.domain.document``.
    """

    document_type: DocumentType
    document_id: str
    issue_date: date
    due_date: date
    currency: str
    items: tuple[LineItem, ...] = ()
    payments: tuple[Payment, ...] = ()
    counterparty: Optional[str] = None


@dataclass(frozen=True)
class AgingReportLine:
    counterparty: str
    buckets: dict = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum(self.buckets.values(), Decimal("0"))


@dataclass(frozen=True)
class AgingReport:
    as_of: date
    lines: tuple[AgingReportLine, ...]
    totals: dict = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum(self.totals.values(), Decimal("0"))
