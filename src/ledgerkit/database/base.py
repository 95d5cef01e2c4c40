"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    AccountPurpose,
    DocumentRef,
    GroupStatus,
    LedgerAccount,
    LedgerAccountCategory,
    LedgerGroup,
    LedgerHalt,
    LedgerTransaction,
    LedgerTransactionGroup,
    Voucher,
    VoucherStatus,
)


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Every implementation is bound to a single tenant and must scope all reads
    and writes to it. Each method runs in its own storage transaction; methods
    that write several rows write all of them or none.
    """

    tenant_id: str

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, name: str, ledger_group: LedgerGroup, ledger_sub_group: Optional[str] = None
    ) -> int:
        """Create a category. Returns category ID.

        Raises:
            ConflictError: If a category with this name exists
        """
        pass

    @abstractmethod
    def get_or_create_category(self, name: str, ledger_group: LedgerGroup) -> int:
        """Return the ID of the named category, creating it if missing.

        Safe under concurrent first use.
        """
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[LedgerAccountCategory]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str) -> Optional[LedgerAccountCategory]:
        """Get category by name."""
        pass

    @abstractmethod
    def list_categories(self) -> list[LedgerAccountCategory]:
        """List all categories ordered by name."""
        pass

    @abstractmethod
    def update_category_ledger_group(self, category_id: int, ledger_group: LedgerGroup) -> None:
        """Change a category's ledger group."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category."""
        pass

    @abstractmethod
    def get_category_account_count(self, category_id: int) -> int:
        """Count accounts (archived included) in a category."""
        pass

    @abstractmethod
    def get_category_posting_count(self, category_id: int) -> int:
        """Count transactions posting to any account of a category."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        category_id: int,
        currency: str,
        parent_id: Optional[int] = None,
        number: Optional[str] = None,
        system_account: bool = False,
        editable: bool = True,
        hidden: bool = False,
    ) -> int:
        """Create an account. Returns account ID.

        Raises:
            ConflictError: If the account number is already used
        """
        pass

    @abstractmethod
    def upsert_default_account(
        self, purpose: AccountPurpose, name: str, category_id: int, currency: str
    ) -> int:
        """Return the account for a well-known purpose, creating it if missing.

        Exactly one account per (tenant, purpose) exists even when called
        concurrently.
        """
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[LedgerAccount]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_purpose(self, purpose: AccountPurpose) -> Optional[LedgerAccount]:
        """Get the default account for a purpose."""
        pass

    @abstractmethod
    def list_accounts(self, include_archived: bool = False) -> list[LedgerAccount]:
        """List accounts ordered by number, then name."""
        pass

    @abstractmethod
    def get_child_accounts(
        self, account_id: int, include_archived: bool = False
    ) -> list[LedgerAccount]:
        """List immediate children of an account."""
        pass

    @abstractmethod
    def update_account_parent(self, account_id: int, parent_id: Optional[int]) -> None:
        """Re-parent an account."""
        pass

    @abstractmethod
    def archive_account(self, account_id: int) -> None:
        """Mark an account archived."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, account_id: int) -> int:
        """Count transactions posting to an account (archived included)."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(self, **fields: Any) -> int:
        """Insert one ledger transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        related_to: Optional[DocumentRef] = None,
        group_id: Optional[int] = None,
        include_archived: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[LedgerTransaction]:
        """List transactions ordered by (transaction_date, id).

        Args:
            account_id: Only transactions posting to this account
            start_date: Exclusive lower bound on transaction_date
            end_date: Inclusive upper bound on transaction_date
            related_to: Only transactions linked to this document
            group_id: Only members of this group
            include_archived: Include soft-deleted transactions
            limit: Page size
            offset: Page offset
        """
        pass

    @abstractmethod
    def create_reversal(self, original_id: int, **fields: Any) -> int:
        """Insert a reversal and link it from the original.

        Raises:
            ConflictError: If the original is already reversed or archived
        """
        pass

    @abstractmethod
    def verify_transaction(self, transaction_id: int, approver: Optional[str]) -> bool:
        """Mark a transaction verified. Returns False if it already was."""
        pass

    @abstractmethod
    def archive_transaction(self, transaction_id: int) -> bool:
        """Soft-delete an unverified, unreversed transaction outside any group.

        Returns False if the row no longer qualifies.
        """
        pass

    # Transaction group operations
    @abstractmethod
    def create_group(
        self,
        transaction_date: date,
        currency: str,
        status: GroupStatus,
        lines: list[dict[str, Any]],
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> int:
        """Insert a group and all member transactions atomically."""
        pass

    @abstractmethod
    def get_group(self, group_id: int) -> Optional[LedgerTransactionGroup]:
        """Get a group with its member transactions."""
        pass

    @abstractmethod
    def list_groups(self, status: Optional[GroupStatus] = None) -> list[LedgerTransactionGroup]:
        """List groups ordered by (transaction_date, id)."""
        pass

    @abstractmethod
    def transition_group_status(
        self,
        group_id: int,
        from_status: GroupStatus,
        to_status: GroupStatus,
        approver: Optional[str] = None,
    ) -> bool:
        """Move a group between states only if it is in ``from_status``.

        Moving to POSTED also verifies every member. Returns False when the
        guard does not match.
        """
        pass

    @abstractmethod
    def create_group_reversal(
        self,
        original_id: int,
        transaction_date: date,
        currency: str,
        lines: list[dict[str, Any]],
        description: Optional[str] = None,
        reference: Optional[str] = None,
        approver: Optional[str] = None,
    ) -> int:
        """Insert a posted mirror group and mark the original REVERSED.

        Raises:
            ConflictError: If the original is not POSTED
        """
        pass

    # Voucher operations
    @abstractmethod
    def create_voucher(self, voucher_fields: dict[str, Any], transaction_fields: dict[str, Any]) -> int:
        """Insert a voucher and its underlying transaction atomically."""
        pass

    @abstractmethod
    def get_voucher(self, voucher_id: int) -> Optional[Voucher]:
        """Get voucher by ID, with its transaction."""
        pass

    @abstractmethod
    def get_voucher_by_transaction(self, transaction_id: int) -> Optional[Voucher]:
        """Get the voucher wrapping a transaction, if any."""
        pass

    @abstractmethod
    def list_vouchers(self, status: Optional[VoucherStatus] = None) -> list[Voucher]:
        """List vouchers ordered by ID."""
        pass

    @abstractmethod
    def update_pending_voucher(
        self,
        voucher_id: int,
        expected_version: int,
        voucher_fields: dict[str, Any],
        transaction_fields: dict[str, Any],
    ) -> bool:
        """Edit a PENDING voucher and its transaction under a version check.

        Raises:
            ConflictError: If the transaction was changed outside the voucher;
                nothing is written
        """
        pass

    @abstractmethod
    def transition_voucher_status(
        self,
        voucher_id: int,
        expected_version: int,
        from_status: VoucherStatus,
        to_status: VoucherStatus,
        approver: Optional[str],
        transaction_fields: dict[str, Any],
    ) -> bool:
        """Guarded voucher status change plus its transaction update.

        Returns False if the voucher is no longer in ``from_status`` at
        ``expected_version``.

        Raises:
            ConflictError: If the transaction was changed outside the voucher;
                nothing is written
        """
        pass

    # Balance aggregates
    @abstractmethod
    def sum_account_postings(
        self,
        account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> tuple[Decimal, Decimal]:
        """Sum base-currency debits and credits posted to an account.

        Archived transactions are excluded. ``start_date`` is exclusive and
        ``end_date`` inclusive.
        """
        pass

    @abstractmethod
    def sum_postings_by_account(
        self, end_date: date, start_date: Optional[date] = None
    ) -> dict[int, tuple[Decimal, Decimal]]:
        """Debit/credit totals per account over (start_date, end_date]."""
        pass

    # Ledger halt operations
    @abstractmethod
    def get_ledger_halt(self) -> Optional[LedgerHalt]:
        """Return the active halt for this tenant, if any."""
        pass

    @abstractmethod
    def halt_ledger(self, reason: str) -> None:
        """Halt posting for this tenant (no-op if already halted)."""
        pass

    @abstractmethod
    def clear_ledger_halt(self) -> None:
        """Resume posting for this tenant."""
        pass
