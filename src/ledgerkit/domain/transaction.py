"""Ledger transaction engine."""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from ledgerkit.config import DEFAULT_BASE_CURRENCY
from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.currency import normalize_currency, round_amount, to_base_amount
from ledgerkit.domain.entities import (
    DocumentRef,
    EntryMode,
    LedgerState,
    LedgerTransaction,
    VoucherStatus,
)
from ledgerkit.domain.integrity import ensure_posting_allowed

logger = logging.getLogger(__name__)

# Exchange rates are stored with eight decimal places.
RATE_QUANTUM = Decimal("0.00000001")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Convert ``value`` to Decimal without going through binary floats.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError):
            raise errors.ValidationError(f"Invalid {field}: {value!r}")
    if not result.is_finite():
        raise errors.ValidationError(f"Invalid {field}: {value!r}")
    return result


class TransactionService:
    """Service for posting, reversing and verifying ledger transactions."""

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize transaction service.

        Args:
            db: Database instance
            base_currency: Tenant base currency for ``base_amount``
        """
        self.db = db
        self.base_currency = normalize_currency(base_currency)
        self.accounts = AccountService(db, base_currency=self.base_currency)

    def valuation(
        self, amount: Any, currency: Optional[str], exchange_rate: Any
    ) -> dict[str, Any]:
        """Validate an amount and compute its base-currency value.

        Returns:
            Dict with amount, currency, exchange_rate and base_amount

        Raises:
            ValidationError: If amount or rate is not positive, the amount has
                more decimals than the currency allows, or a base-currency
                amount carries a rate other than 1
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise errors.ValidationError(errors.non_positive_amount(amount))
        try:
            currency = normalize_currency(currency or self.base_currency)
        except ValueError as e:
            raise errors.ValidationError(str(e))
        if amount != round_amount(amount, currency):
            raise errors.ValidationError(
                f"Amount {amount} has more precision than {currency} allows"
            )

        exchange_rate = to_decimal(exchange_rate, "exchange rate")
        if exchange_rate <= 0:
            raise errors.ValidationError(f"Exchange rate must be greater than zero, got {exchange_rate}")
        if exchange_rate != exchange_rate.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP):
            raise errors.ValidationError(
                f"Exchange rate {exchange_rate} has more than 8 decimal places"
            )
        if currency == self.base_currency and exchange_rate != 1:
            raise errors.ValidationError(
                f"Exchange rate for base currency {currency} must be 1, got {exchange_rate}"
            )

        base_amount = to_base_amount(amount, exchange_rate, self.base_currency)
        if base_amount <= 0:
            raise errors.ValidationError(
                f"Amount {amount} {currency} rounds to zero in {self.base_currency}"
            )
        return {
            "amount": amount,
            "currency": currency,
            "exchange_rate": exchange_rate,
            "base_amount": base_amount,
        }

    def single_entry_fields(
        self,
        account_id: int,
        state: LedgerState,
        amount: Any,
        currency: Optional[str] = None,
        exchange_rate: Any = 1,
        transaction_date: Optional[date] = None,
        description: Optional[str] = None,
        related_to: Optional[DocumentRef] = None,
        payment_method: Optional[str] = None,
    ) -> dict[str, Any]:
        """Validate a single-entry posting and return its storage fields."""
        try:
            state = LedgerState(state)
        except ValueError:
            raise errors.ValidationError(f"Invalid transaction state: {state!r}")
        self.accounts.require_postable_account(account_id)
        fields = self.valuation(amount, currency, exchange_rate)
        fields.update(
            entry_mode=EntryMode.SINGLE_ENTRY,
            ledger_account_id=account_id,
            transaction_state=state,
            transaction_date=transaction_date or date.today(),
            description=description,
            related_to=related_to,
            payment_method=payment_method,
        )
        return fields

    def double_entry_fields(
        self,
        debit_account_id: int,
        credit_account_id: int,
        amount: Any,
        currency: Optional[str] = None,
        exchange_rate: Any = 1,
        transaction_date: Optional[date] = None,
        description: Optional[str] = None,
        related_to: Optional[DocumentRef] = None,
        payment_method: Optional[str] = None,
    ) -> dict[str, Any]:
        """Validate a double-entry posting and return its storage fields."""
        if debit_account_id == credit_account_id:
            raise errors.ValidationError(
                f"Debit and credit account must differ (both are {debit_account_id})"
            )
        self.accounts.require_postable_account(debit_account_id)
        self.accounts.require_postable_account(credit_account_id)
        fields = self.valuation(amount, currency, exchange_rate)
        fields.update(
            entry_mode=EntryMode.DOUBLE_ENTRY,
            debit_account_id=debit_account_id,
            credit_account_id=credit_account_id,
            transaction_date=transaction_date or date.today(),
            description=description,
            related_to=related_to,
            payment_method=payment_method,
        )
        return fields

    def post_single_entry(
        self,
        account_id: int,
        state: LedgerState,
        amount: Any,
        currency: Optional[str] = None,
        exchange_rate: Any = 1,
        transaction_date: Optional[date] = None,
        description: Optional[str] = None,
        related_to: Optional[DocumentRef] = None,
        payment_method: Optional[str] = None,
    ) -> LedgerTransaction:
        """Record one account on one side with no counter-leg.

        No balancing check is made; the caller is responsible for posting the
        matching entries.

        Raises:
            ValidationError: If amount or exchange rate is not positive
            NotFoundError: If the account does not exist
            ConflictError: If the account is archived
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        fields = self.single_entry_fields(
            account_id,
            state,
            amount,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=transaction_date,
            description=description,
            related_to=related_to,
            payment_method=payment_method,
        )
        transaction_id = self.db.create_transaction(**fields)
        logger.info(
            "Posted single entry %s: %s %s %s to account %s",
            transaction_id,
            fields["transaction_state"].value,
            fields["amount"],
            fields["currency"],
            account_id,
        )
        return self.require_transaction(transaction_id)

    def post_double_entry(
        self,
        debit_account_id: int,
        credit_account_id: int,
        amount: Any,
        currency: Optional[str] = None,
        exchange_rate: Any = 1,
        transaction_date: Optional[date] = None,
        description: Optional[str] = None,
        related_to: Optional[DocumentRef] = None,
        payment_method: Optional[str] = None,
    ) -> LedgerTransaction:
        """Record a balanced debit and credit leg as one transaction.

        Raises:
            ValidationError: If the accounts are the same or amount <= 0
            NotFoundError: If either account does not exist
            ConflictError: If either account is archived
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        fields = self.double_entry_fields(
            debit_account_id,
            credit_account_id,
            amount,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=transaction_date,
            description=description,
            related_to=related_to,
            payment_method=payment_method,
        )
        transaction_id = self.db.create_transaction(**fields)
        logger.info(
            "Posted double entry %s: %s %s debit %s credit %s",
            transaction_id,
            fields["amount"],
            fields["currency"],
            debit_account_id,
            credit_account_id,
        )
        return self.require_transaction(transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> LedgerTransaction:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        related_to: Optional[DocumentRef] = None,
        include_archived: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[LedgerTransaction]:
        """List transactions in posting order (transaction_date, then ID).

        ``start_date`` is exclusive and ``end_date`` inclusive.
        """
        return self.db.list_transactions(
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
            related_to=related_to,
            include_archived=include_archived,
            limit=limit,
            offset=offset,
        )

    def reverse_transaction(
        self,
        transaction_id: int,
        reversal_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> LedgerTransaction:
        """Post the mirror image of a transaction.

        The reversal swaps debit and credit (or negates the single-entry
        state) and keeps amount, currency, rate and base amount. The original
        stays untouched apart from its ``reversed_by_id`` link.

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If it is archived, already reversed, belongs to a
                transaction group, or backs a voucher that is not approved
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        txn = self.require_transaction(transaction_id)
        if txn.archived:
            raise errors.ConflictError(f"Transaction {transaction_id} is archived")
        if txn.reversed_by_id is not None:
            raise errors.ConflictError(
                f"Transaction {transaction_id} was already reversed by {txn.reversed_by_id}"
            )
        if txn.group_id is not None:
            raise errors.ConflictError(
                f"Transaction {transaction_id} belongs to group {txn.group_id}; reverse the group instead"
            )
        voucher = self.db.get_voucher_by_transaction(transaction_id)
        if voucher is not None and voucher.status != VoucherStatus.APPROVED:
            raise errors.ConflictError(
                f"Transaction {transaction_id} belongs to voucher {voucher.id} "
                f"({voucher.status.value}); only approved vouchers can be reversed"
            )

        fields = mirror_fields(txn)
        fields.update(
            transaction_date=reversal_date or txn.transaction_date,
            description=description or f"Reversal of transaction {txn.id}",
        )
        reversal_id = self.db.create_reversal(transaction_id, **fields)
        logger.info("Reversed transaction %s with %s", transaction_id, reversal_id)
        return self.require_transaction(reversal_id)

    def verify_transaction(self, transaction_id: int, approver: Optional[str] = None) -> LedgerTransaction:
        """Mark a transaction verified. Verifying twice is a no-op.

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is archived or backs a pending
                voucher
        """
        txn = self.require_transaction(transaction_id)
        if txn.archived:
            raise errors.ConflictError(f"Transaction {transaction_id} is archived")
        voucher = self.db.get_voucher_by_transaction(transaction_id)
        if voucher is not None and voucher.status == VoucherStatus.PENDING:
            raise errors.ConflictError(
                f"Transaction {transaction_id} belongs to pending voucher {voucher.id}; approve the voucher instead"
            )
        if self.db.verify_transaction(transaction_id, approver):
            logger.info("Transaction %s verified by %s", transaction_id, approver)
        return self.require_transaction(transaction_id)

    def archive_transaction(self, transaction_id: int) -> None:
        """Soft-delete an unverified transaction.

        Group members, vouchers and reversal pairs have their own workflows and
        are never archived here.

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is verified or owned by one of
                those workflows
        """
        txn = self.require_transaction(transaction_id)
        if txn.archived:
            return
        if txn.group_id is not None:
            raise errors.ConflictError(
                f"Transaction {transaction_id} belongs to group {txn.group_id}; reverse the group instead"
            )
        if txn.reversed_by_id is not None or txn.reversal_of_id is not None:
            raise errors.ConflictError(
                f"Transaction {transaction_id} is part of a reversal pair and cannot be archived"
            )
        voucher = self.db.get_voucher_by_transaction(transaction_id)
        if voucher is not None:
            raise errors.ConflictError(
                f"Transaction {transaction_id} belongs to voucher {voucher.id}; reject the voucher instead"
            )
        if txn.verified or not self.db.archive_transaction(transaction_id):
            raise errors.ConflictError(
                f"Transaction {transaction_id} is verified; correct it with a reversal"
            )
        logger.info("Archived transaction %s", transaction_id)


def mirror_fields(txn: LedgerTransaction) -> dict[str, Any]:
    """Storage fields for a transaction with its sides flipped."""
    fields: dict[str, Any] = {
        "entry_mode": txn.entry_mode,
        "amount": txn.amount,
        "currency": txn.currency,
        "exchange_rate": txn.exchange_rate,
        "base_amount": txn.base_amount,
        "transaction_date": txn.transaction_date,
        "description": txn.description,
        "related_to": txn.related_to,
        "payment_method": txn.payment_method,
    }
    if txn.entry_mode == EntryMode.SINGLE_ENTRY:
        fields["ledger_account_id"] = txn.ledger_account_id
        fields["transaction_state"] = txn.transaction_state.opposite
    else:
        fields["debit_account_id"] = txn.credit_account_id
        fields["credit_account_id"] = txn.debit_account_id
    return fields
