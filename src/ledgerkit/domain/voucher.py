"""Payment, receipt and deposit vouchers."""

import logging
from datetime import date
from typing import Any, Optional

from ledgerkit.config import DEFAULT_BASE_CURRENCY
from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.entities import (
    LedgerTransaction,
    Voucher,
    VoucherStatus,
    VoucherTo,
    VoucherType,
)
from ledgerkit.domain.integrity import ensure_posting_allowed
from ledgerkit.domain.transaction import TransactionService

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class VoucherService:
    """Service for the voucher approval workflow.

    A voucher wraps exactly one double-entry transaction. It is editable while
    PENDING; approval verifies the transaction and rejection archives it.
    Approved vouchers are corrected only by reversal.
    """

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize voucher service.

        Args:
            db: Database instance
            base_currency: Tenant base currency
        """
        self.db = db
        self.transactions = TransactionService(db, base_currency=base_currency)

    def create_voucher(
        self,
        voucher_type: VoucherType,
        voucher_to: VoucherTo,
        debit_account_id: int,
        credit_account_id: int,
        amount: Any,
        currency: Optional[str] = None,
        exchange_rate: Any = 1,
        transaction_date: Optional[date] = None,
        beneficiary_name: Optional[str] = None,
        reference: Optional[str] = None,
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Voucher:
        """Create a PENDING voucher together with its transaction.

        Args:
            voucher_type: DEPOSIT, PAYMENT or RECEIPT
            voucher_to: Kind of counterparty
            debit_account_id: Account debited by the transaction
            credit_account_id: Account credited by the transaction
            amount: Positive amount in ``currency``
            currency: Transaction currency (defaults to the base currency)
            exchange_rate: Rate from ``currency`` to the base currency
            transaction_date: Date of the transaction (defaults to today)
            beneficiary_name: Who receives or pays the money
            reference: External reference (cheque number, transfer ID)
            description: Transaction description
            payment_method: Free-form payment method

        Returns:
            The created voucher

        Raises:
            ValidationError: If the type, recipient or amounts are invalid
            NotFoundError: If an account does not exist
            ConflictError: If an account is archived
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        try:
            voucher_type = VoucherType(voucher_type)
            voucher_to = VoucherTo(voucher_to)
        except ValueError as e:
            raise errors.ValidationError(str(e))

        transaction_fields = self.transactions.double_entry_fields(
            debit_account_id,
            credit_account_id,
            amount,
            currency=currency,
            exchange_rate=exchange_rate,
            transaction_date=transaction_date,
            description=description,
            payment_method=payment_method,
        )
        voucher_id = self.db.create_voucher(
            voucher_fields={
                "voucher_type": voucher_type,
                "voucher_to": voucher_to,
                "beneficiary_name": beneficiary_name,
                "reference": reference,
            },
            transaction_fields=transaction_fields,
        )
        logger.info(
            "Created %s voucher %s for %s %s",
            voucher_type.value,
            voucher_id,
            transaction_fields["amount"],
            transaction_fields["currency"],
        )
        return self.require_voucher(voucher_id)

    def get_voucher(self, voucher_id: int) -> Optional[Voucher]:
        return self.db.get_voucher(voucher_id)

    def require_voucher(self, voucher_id: int) -> Voucher:
        """Get voucher by ID or raise NotFoundError."""
        voucher = self.db.get_voucher(voucher_id)
        if voucher is None:
            raise errors.NotFoundError(errors.voucher_not_found(voucher_id))
        return voucher

    def list_vouchers(self, status: Optional[VoucherStatus] = None) -> list[Voucher]:
        return self.db.list_vouchers(status=status)

    def update_voucher(
        self,
        voucher_id: int,
        amount: Any = _UNSET,
        debit_account_id: Any = _UNSET,
        credit_account_id: Any = _UNSET,
        currency: Any = _UNSET,
        exchange_rate: Any = _UNSET,
        transaction_date: Any = _UNSET,
        description: Any = _UNSET,
        payment_method: Any = _UNSET,
        voucher_to: Any = _UNSET,
        beneficiary_name: Any = _UNSET,
        reference: Any = _UNSET,
    ) -> Voucher:
        """Edit a PENDING voucher. Only the arguments passed are changed.

        Raises:
            NotFoundError: If the voucher does not exist
            ConflictError: If the voucher is not PENDING, was changed
                concurrently, or its transaction was touched outside the voucher
            ValidationError: If the new values are invalid
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        voucher = self._require_pending(voucher_id, "edited")
        txn = voucher.transaction

        def pick(value: Any, current: Any) -> Any:
            return current if value is _UNSET else value

        transaction_fields = self.transactions.double_entry_fields(
            pick(debit_account_id, txn.debit_account_id),
            pick(credit_account_id, txn.credit_account_id),
            pick(amount, txn.amount),
            currency=pick(currency, txn.currency),
            exchange_rate=pick(exchange_rate, txn.exchange_rate),
            transaction_date=pick(transaction_date, txn.transaction_date),
            description=pick(description, txn.description),
            payment_method=pick(payment_method, txn.payment_method),
        )
        voucher_fields: dict[str, Any] = {}
        if voucher_to is not _UNSET:
            try:
                voucher_fields["voucher_to"] = VoucherTo(voucher_to)
            except ValueError as e:
                raise errors.ValidationError(str(e))
        if beneficiary_name is not _UNSET:
            voucher_fields["beneficiary_name"] = beneficiary_name
        if reference is not _UNSET:
            voucher_fields["reference"] = reference

        if not self.db.update_pending_voucher(
            voucher_id, voucher.version, voucher_fields, transaction_fields
        ):
            raise errors.ConflictError(f"Voucher {voucher_id} was changed concurrently")
        return self.require_voucher(voucher_id)

    def approve_voucher(self, voucher_id: int, approver: Optional[str] = None) -> Voucher:
        """Approve a PENDING voucher and verify its transaction.

        Of two concurrent approvals exactly one succeeds.

        Raises:
            NotFoundError: If the voucher does not exist
            ConflictError: If the voucher is not PENDING, including when a
                concurrent caller approved or rejected it first
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        voucher = self._require_pending(voucher_id, "approved")
        if not self.db.transition_voucher_status(
            voucher_id,
            voucher.version,
            VoucherStatus.PENDING,
            VoucherStatus.APPROVED,
            approver,
            {"verified": True, "verified_by": approver},
        ):
            raise errors.ConflictError(f"Voucher {voucher_id} was already processed")
        logger.info("Voucher %s approved by %s", voucher_id, approver)
        return self.require_voucher(voucher_id)

    def reject_voucher(self, voucher_id: int, approver: Optional[str] = None) -> Voucher:
        """Reject a PENDING voucher and archive its unverified transaction.

        Raises:
            NotFoundError: If the voucher does not exist
            ConflictError: If the voucher is not PENDING or its transaction
                was touched outside the voucher
        """
        voucher = self._require_pending(voucher_id, "rejected")
        if not self.db.transition_voucher_status(
            voucher_id,
            voucher.version,
            VoucherStatus.PENDING,
            VoucherStatus.REJECTED,
            approver,
            {"archived": True},
        ):
            raise errors.ConflictError(f"Voucher {voucher_id} was already processed")
        logger.info("Voucher %s rejected by %s", voucher_id, approver)
        return self.require_voucher(voucher_id)

    def reverse_voucher(
        self, voucher_id: int, reversal_date: Optional[date] = None
    ) -> LedgerTransaction:
        """Reverse the transaction of an APPROVED voucher.

        Returns:
            The reversing transaction

        Raises:
            NotFoundError: If the voucher does not exist
            ConflictError: If the voucher is not APPROVED or its transaction
                was already reversed
        """
        voucher = self.require_voucher(voucher_id)
        if voucher.status != VoucherStatus.APPROVED:
            raise errors.ConflictError(
                f"Voucher {voucher_id} is {voucher.status.value}; only APPROVED vouchers can be reversed"
            )
        return self.transactions.reverse_transaction(
            voucher.transaction_id,
            reversal_date=reversal_date,
            description=f"Reversal of voucher {voucher_id}",
        )

    def _require_pending(self, voucher_id: int, action: str) -> Voucher:
        voucher = self.require_voucher(voucher_id)
        if voucher.status != VoucherStatus.PENDING:
            raise errors.ConflictError(
                f"Voucher {voucher_id} is {voucher.status.value} and cannot be {action}"
            )
        return voucher
