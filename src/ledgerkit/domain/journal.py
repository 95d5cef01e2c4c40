"""Journal entries: balanced groups of ledger transactions."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

from ledgerkit.config import DEFAULT_BASE_CURRENCY
from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.entities import (
    DocumentRef,
    GroupStatus,
    JournalLine,
    LedgerState,
    LedgerTransactionGroup,
    group_totals,
)
from ledgerkit.domain.integrity import ensure_posting_allowed, report_inconsistency
from ledgerkit.domain.transaction import TransactionService, mirror_fields

logger = logging.getLogger(__name__)


class JournalService:
    """Service for multi-line journal entries (transaction groups).

    Groups move BALANCED -> POSTED -> REVERSED. A group is validated before
    anything is written and is stored together with all of its lines.
    """

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize journal service.

        Args:
            db: Database instance
            base_currency: Tenant base currency
        """
        self.db = db
        self.transactions = TransactionService(db, base_currency=base_currency)
        self.base_currency = self.transactions.base_currency

    def create_group(
        self,
        transaction_date: date,
        currency: Optional[str],
        lines: Iterable[JournalLine],
        exchange_rate: Any = 1,
        description: Optional[str] = None,
        reference: Optional[str] = None,
        related_to: Optional[DocumentRef] = None,
        post: bool = False,
        approver: Optional[str] = None,
    ) -> LedgerTransactionGroup:
        """Create a balanced journal entry.

        Args:
            transaction_date: Date for the group and every line
            currency: Currency of all line amounts
            lines: Journal lines (account, side, amount)
            exchange_rate: Rate from ``currency`` to the base currency
            description: Group description, also the default line description
            reference: Optional external reference
            related_to: Document the entry belongs to
            post: Post the group right after creating it
            approver: Who posts the group when ``post`` is set

        Returns:
            The stored group

        Raises:
            ValidationError: If there are no lines, a side is missing, a line
                is invalid, or debits and credits differ
            NotFoundError: If a line's account does not exist
            ConflictError: If a line's account is archived
            ConsistencyError: If posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        lines = list(lines)
        if not lines:
            raise errors.ValidationError("A journal entry needs at least one line")

        rows: list[dict[str, Any]] = []
        for line in lines:
            rows.append(
                self.transactions.single_entry_fields(
                    line.account_id,
                    line.side,
                    line.amount,
                    currency=currency,
                    exchange_rate=exchange_rate,
                    transaction_date=transaction_date,
                    description=line.description or description,
                    related_to=related_to,
                )
            )

        sides = {row["transaction_state"] for row in rows}
        if sides != {LedgerState.DEBIT, LedgerState.CREDIT}:
            raise errors.ValidationError("A journal entry needs at least one debit and one credit line")

        total_debit, total_credit = _row_totals(rows, "amount")
        if total_debit != total_credit:
            raise errors.ValidationError(errors.unbalanced_entry(total_debit, total_credit))

        base_debit, base_credit = _row_totals(rows, "base_amount")
        if base_debit != base_credit:
            raise errors.ValidationError(
                f"Entry does not balance in {self.base_currency} after conversion: "
                f"{base_debit} != {base_credit}; adjust a line or post the rounding difference"
            )

        group_id = self.db.create_group(
            transaction_date=transaction_date,
            currency=rows[0]["currency"],
            status=GroupStatus.BALANCED,
            lines=rows,
            description=description,
            reference=reference,
        )
        logger.info(
            "Created journal entry %s with %d lines totalling %s %s",
            group_id,
            len(rows),
            total_debit,
            rows[0]["currency"],
        )
        if post:
            return self.post_group(group_id, approver=approver)
        return self.require_group(group_id)

    def get_group(self, group_id: int) -> Optional[LedgerTransactionGroup]:
        return self.db.get_group(group_id)

    def require_group(self, group_id: int) -> LedgerTransactionGroup:
        """Get group by ID or raise NotFoundError."""
        group = self.db.get_group(group_id)
        if group is None:
            raise errors.NotFoundError(errors.group_not_found(group_id))
        return group

    def list_groups(self, status: Optional[GroupStatus] = None) -> list[LedgerTransactionGroup]:
        return self.db.list_groups(status=status)

    def post_group(self, group_id: int, approver: Optional[str] = None) -> LedgerTransactionGroup:
        """Post a BALANCED group and verify its lines.

        Raises:
            NotFoundError: If the group does not exist
            ConflictError: If the group is not BALANCED, including when a
                concurrent caller posted it first
            ConsistencyError: If the stored group does not balance or has
                archived members, or posting is halted for the tenant
        """
        ensure_posting_allowed(self.db)
        group = self.require_group(group_id)
        if group.status != GroupStatus.BALANCED:
            raise errors.ConflictError(
                f"Transaction group {group_id} is {group.status.value}; only BALANCED groups can be posted"
            )
        if any(txn.archived for txn in group.transactions):
            raise report_inconsistency(self.db, f"Transaction group {group_id} has archived members")

        base_debit, base_credit = group_totals(group.transactions, use_base=True)
        if not group.transactions or not group.balanced or base_debit != base_credit:
            raise report_inconsistency(
                self.db,
                f"Transaction group {group_id} is stored unbalanced: "
                f"{group.total_debit} debit vs {group.total_credit} credit",
            )

        if not self.db.transition_group_status(
            group_id, GroupStatus.BALANCED, GroupStatus.POSTED, approver=approver
        ):
            raise errors.ConflictError(f"Transaction group {group_id} was posted concurrently")
        logger.info("Posted journal entry %s (approver %s)", group_id, approver)
        return self.require_group(group_id)

    def reverse_group(
        self,
        group_id: int,
        reversal_date: Optional[date] = None,
        approver: Optional[str] = None,
        description: Optional[str] = None,
    ) -> LedgerTransactionGroup:
        """Reverse a POSTED group with a posted mirror group.

        Every line of the mirror has its side flipped; the original keeps its
        lines and moves to REVERSED.

        Raises:
            NotFoundError: If the group does not exist
            ConflictError: If the group is not POSTED (e.g. already reversed)
            ConsistencyError: If a member is archived, or posting is halted
                for the tenant
        """
        ensure_posting_allowed(self.db)
        group = self.require_group(group_id)
        if group.status == GroupStatus.REVERSED:
            raise errors.ConflictError(
                f"Transaction group {group_id} was already reversed by {group.reversed_by_id}"
            )
        if group.status != GroupStatus.POSTED:
            raise errors.ConflictError(
                f"Transaction group {group_id} is {group.status.value}; only POSTED groups can be reversed"
            )
        if any(txn.archived for txn in group.transactions):
            raise report_inconsistency(self.db, f"Transaction group {group_id} has archived members")

        when = reversal_date or group.transaction_date
        rows = []
        for txn in group.transactions:
            row = mirror_fields(txn)
            row["transaction_date"] = when
            rows.append(row)

        mirror_id = self.db.create_group_reversal(
            original_id=group_id,
            transaction_date=when,
            currency=group.currency,
            lines=rows,
            description=description or f"Reversal of journal entry {group_id}",
            reference=group.reference,
            approver=approver,
        )
        logger.info("Reversed journal entry %s with %s", group_id, mirror_id)
        return self.require_group(mirror_id)


def _row_totals(rows: list[dict[str, Any]], key: str) -> tuple[Decimal, Decimal]:
    total_debit = sum((r[key] for r in rows if r["transaction_state"] == LedgerState.DEBIT), Decimal("0"))
    total_credit = sum((r[key] for r in rows if r["transaction_state"] == LedgerState.CREDIT), Decimal("0"))
    return total_debit, total_credit
