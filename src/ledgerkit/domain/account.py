"""Chart of accounts domain service."""

import logging
from typing import Any, Optional

from ledgerkit.config import DEFAULT_BASE_CURRENCY
from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.category import normal_balance_side
from ledgerkit.domain.currency import normalize_currency
from ledgerkit.domain.entities import (
    AccountPurpose,
    LedgerAccount,
    LedgerGroup,
    LedgerState,
)

logger = logging.getLogger(__name__)

# purpose -> (account name, category name, ledger group)
DEFAULT_ACCOUNTS = {
    AccountPurpose.CASH: ("Cash on Hand", "Cash and Bank", LedgerGroup.ASSET),
    AccountPurpose.BANK: ("Default Bank Account", "Cash and Bank", LedgerGroup.ASSET),
    AccountPurpose.RECEIVABLE: ("Default Receivable Account", "Accounts Receivable", LedgerGroup.ASSET),
    AccountPurpose.PAYABLE: ("Default Payable Account", "Accounts Payable", LedgerGroup.LIABILITY),
    AccountPurpose.SALES_INCOME: ("Sales Income", "Sales Revenue", LedgerGroup.INCOME),
    AccountPurpose.GENERAL_EXPENSE: ("General Expenses", "Operating Expenses", LedgerGroup.EXPENSE),
    AccountPurpose.TAX_PAYABLE: ("Tax Payable", "Tax Liabilities", LedgerGroup.LIABILITY),
    AccountPurpose.RETAINED_EARNINGS: ("Retained Earnings", "Retained Earnings", LedgerGroup.EQUITY),
    AccountPurpose.EXCHANGE_DIFFERENCE: ("Exchange Gain/Loss", "Other Income", LedgerGroup.INCOME),
}


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize account service.

        Args:
            db: Database instance
            base_currency: Currency for accounts created without one
        """
        self.db = db
        self.base_currency = normalize_currency(base_currency)

    def create_account(
        self,
        name: str,
        category_id: int,
        parent_id: Optional[int] = None,
        currency: Optional[str] = None,
        number: Optional[str] = None,
        system_account: bool = False,
        editable: bool = True,
        hidden: bool = False,
    ) -> int:
        """Create a new account.

        Args:
            name: Account name
            category_id: Category deciding the normal-balance side
            parent_id: Optional parent account
            currency: Account currency (defaults to the base currency)
            number: Optional human account code, unique within the tenant
            system_account: System accounts with history cannot be archived
            editable: Whether users may edit the account
            hidden: Whether the account is hidden from pickers

        Returns:
            Account ID

        Raises:
            ValidationError: If name or currency is invalid
            NotFoundError: If category or parent does not exist
            ConflictError: If parent is archived or number is taken
        """
        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Account name is required")
        try:
            currency = normalize_currency(currency or self.base_currency)
        except ValueError as e:
            raise errors.ValidationError(str(e))

        if self.db.get_category(category_id) is None:
            raise errors.NotFoundError(errors.category_not_found(category_id))

        if parent_id is not None:
            parent = self.require_account(parent_id)
            if parent.archived:
                raise errors.ConflictError(errors.account_archived(parent_id))

        account_id = self.db.create_account(
            name=name,
            category_id=category_id,
            currency=currency,
            parent_id=parent_id,
            number=(number or "").strip() or None,
            system_account=system_account,
            editable=editable,
            hidden=hidden,
        )
        logger.info("Created account %s '%s'", account_id, name)
        return account_id

    def get_account(self, account_id: int) -> Optional[LedgerAccount]:
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> LedgerAccount:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise errors.NotFoundError(errors.account_not_found(account_id))
        return account

    def require_postable_account(self, account_id: int) -> LedgerAccount:
        """Get an account that may receive new postings.

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If the account is archived
        """
        account = self.require_account(account_id)
        if account.archived:
            raise errors.ConflictError(errors.account_archived(account_id))
        return account

    def list_accounts(self, include_archived: bool = False) -> list[LedgerAccount]:
        return self.db.list_accounts(include_archived=include_archived)

    def normal_side(self, account_id: int) -> LedgerState:
        """Return the side on which the account's balance increases."""
        account = self.require_account(account_id)
        category = self.db.get_category(account.category_id)
        return normal_balance_side(category.ledger_group)

    def move_account(self, account_id: int, new_parent_id: Optional[int]) -> None:
        """Re-parent an account within the chart.

        Raises:
            NotFoundError: If either account does not exist
            ValidationError: If the move would create a cycle
            ConflictError: If the new parent is archived
        """
        self.require_account(account_id)
        if new_parent_id is not None:
            parent = self.require_account(new_parent_id)
            if parent.archived:
                raise errors.ConflictError(errors.account_archived(new_parent_id))

            # Walk up from the new parent; meeting the account means a cycle
            seen: set[int] = set()
            current: Optional[LedgerAccount] = parent
            while current is not None:
                if current.id == account_id:
                    raise errors.ValidationError(
                        f"Cannot move account {account_id} under {new_parent_id}: "
                        "it would become its own ancestor"
                    )
                if current.id in seen:
                    break
                seen.add(current.id)
                current = (
                    self.db.get_account(current.parent_id) if current.parent_id is not None else None
                )

        self.db.update_account_parent(account_id, new_parent_id)

    def get_or_create_default_account(self, purpose: AccountPurpose) -> LedgerAccount:
        """Return the tenant's account for a well-known purpose.

        Idempotent: the first call creates the account (and its category if
        needed), later or concurrent calls return the same account.
        """
        purpose = AccountPurpose(purpose)
        existing = self.db.get_account_by_purpose(purpose)
        if existing is not None:
            return existing

        account_name, category_name, ledger_group = DEFAULT_ACCOUNTS[purpose]
        category_id = self.db.get_or_create_category(category_name, ledger_group)
        account_id = self.db.upsert_default_account(
            purpose=purpose,
            name=account_name,
            category_id=category_id,
            currency=self.base_currency,
        )
        return self.require_account(account_id)

    def archive_account(self, account_id: int) -> None:
        """Archive (soft-delete) an account.

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If it is a system account with postings, or has
                active child accounts
        """
        account = self.require_account(account_id)
        if account.archived:
            return

        transaction_count = self.db.get_account_transaction_count(account_id)
        child_count = len(self.db.get_child_accounts(account_id))
        if (account.system_account and transaction_count > 0) or child_count > 0:
            raise errors.ConflictError(
                errors.account_archive_blocked(
                    account_id,
                    transaction_count if account.system_account else 0,
                    child_count,
                )
            )

        self.db.archive_account(account_id)
        logger.info("Archived account %s '%s'", account_id, account.name)

    def get_account_tree(self, include_archived: bool = False) -> list[dict[str, Any]]:
        """Get the chart of accounts as nested dicts with 'children' lists."""
        accounts = self.db.list_accounts(include_archived=include_archived)

        def build_tree(parent_id: Optional[int] = None) -> list[dict[str, Any]]:
            return [
                {"account": acc, "children": build_tree(acc.id)}
                for acc in accounts
                if acc.parent_id == parent_id
            ]

        return build_tree()

    def format_account_path(self, account_id: int) -> str:
        """Get full path for an account (e.g., "Assets > Bank > Checking")."""
        account = self.get_account(account_id)
        if account is None:
            return ""

        path_parts = [account.name]
        current_parent_id = account.parent_id
        seen = {account.id}
        while current_parent_id is not None and current_parent_id not in seen:
            parent = self.get_account(current_parent_id)
            if parent is None:
                break
            seen.add(parent.id)
            path_parts.append(parent.name)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))
