"""Account category registry."""

import logging
from typing import Optional

from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.entities import LedgerAccountCategory, LedgerGroup, LedgerState

logger = logging.getLogger(__name__)

# Groups whose balances grow on the debit side; every other group grows on credit.
DEBIT_NORMAL_GROUPS = frozenset({LedgerGroup.ASSET, LedgerGroup.EXPENSE, LedgerGroup.DIVIDENDS})

# Standard category set: (name, ledger group, sub group)
DEFAULT_CATEGORIES = [
    ("Cash and Bank", LedgerGroup.ASSET, "Current Assets"),
    ("Accounts Receivable", LedgerGroup.ASSET, "Current Assets"),
    ("Inventory", LedgerGroup.ASSET, "Current Assets"),
    ("Fixed Assets", LedgerGroup.ASSET, "Non-current Assets"),
    ("Accounts Payable", LedgerGroup.LIABILITY, "Current Liabilities"),
    ("Tax Liabilities", LedgerGroup.LIABILITY, "Current Liabilities"),
    ("Long-term Liabilities", LedgerGroup.LIABILITY, "Non-current Liabilities"),
    ("Owner's Equity", LedgerGroup.EQUITY, None),
    ("Retained Earnings", LedgerGroup.EQUITY, None),
    ("Share Capital", LedgerGroup.SHARES, None),
    ("Dividends", LedgerGroup.DIVIDENDS, None),
    ("Sales Revenue", LedgerGroup.INCOME, "Operating Income"),
    ("Other Income", LedgerGroup.INCOME, "Non-operating Income"),
    ("Cost of Sales", LedgerGroup.EXPENSE, "Direct Costs"),
    ("Operating Expenses", LedgerGroup.EXPENSE, "Overheads"),
]


def normal_balance_side(ledger_group: LedgerGroup) -> LedgerState:
    """Return the side on which accounts of ``ledger_group`` increase.

    ASSET, EXPENSE and DIVIDENDS increase on DEBIT; LIABILITY, EQUITY, INCOME
    and SHARES increase on CREDIT.
    """
    ledger_group = LedgerGroup(ledger_group)
    if ledger_group in DEBIT_NORMAL_GROUPS:
        return LedgerState.DEBIT
    return LedgerState.CREDIT


class CategoryService:
    """Service for managing account categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self, name: str, ledger_group: LedgerGroup, ledger_sub_group: Optional[str] = None
    ) -> int:
        """Create a category.

        Args:
            name: Category name, unique within the tenant
            ledger_group: Ledger group deciding the normal-balance side
            ledger_sub_group: Optional finer classification

        Returns:
            Category ID

        Raises:
            ValidationError: If name is empty
            ConflictError: If a category with this name exists
        """
        name = (name or "").strip()
        if not name:
            raise errors.ValidationError("Category name is required")
        if self.db.get_category_by_name(name) is not None:
            raise errors.ConflictError(f"Category with name '{name}' already exists")
        return self.db.create_category(
            name=name, ledger_group=LedgerGroup(ledger_group), ledger_sub_group=ledger_sub_group
        )

    def get_category(self, category_id: int) -> Optional[LedgerAccountCategory]:
        return self.db.get_category(category_id)

    def require_category(self, category_id: int) -> LedgerAccountCategory:
        """Get category by ID or raise NotFoundError."""
        category = self.db.get_category(category_id)
        if category is None:
            raise errors.NotFoundError(errors.category_not_found(category_id))
        return category

    def get_category_by_name(self, name: str) -> Optional[LedgerAccountCategory]:
        return self.db.get_category_by_name(name)

    def list_categories(self) -> list[LedgerAccountCategory]:
        return self.db.list_categories()

    def change_ledger_group(self, category_id: int, ledger_group: LedgerGroup) -> None:
        """Change a category's ledger group.

        Only allowed while no transaction posts to an account of the category,
        since the change would flip the sign of historical balances.

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If the category's accounts have postings
        """
        category = self.require_category(category_id)
        ledger_group = LedgerGroup(ledger_group)
        if category.ledger_group == ledger_group:
            return
        posting_count = self.db.get_category_posting_count(category_id)
        if posting_count > 0:
            raise errors.ConflictError(
                f"Cannot change ledger group of category '{category.name}': "
                f"{posting_count} transaction{'s' if posting_count != 1 else ''} reference its accounts"
            )
        self.db.update_category_ledger_group(category_id, ledger_group)
        logger.info(
            "Category %s moved from %s to %s",
            category_id,
            category.ledger_group.value,
            ledger_group.value,
        )

    def delete_category(self, category_id: int) -> None:
        """Delete an unreferenced category.

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If any account uses the category
        """
        category = self.require_category(category_id)
        account_count = self.db.get_category_account_count(category_id)
        if account_count > 0:
            raise errors.ConflictError(
                f"Cannot delete category '{category.name}': "
                f"it is used by {account_count} account{'s' if account_count != 1 else ''}"
            )
        self.db.delete_category(category_id)

    def initialize_default_categories(self) -> int:
        """Create the standard category set, skipping names that exist.

        Returns:
            Number of categories created
        """
        created = 0
        for name, ledger_group, sub_group in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(name) is not None:
                continue
            self.db.create_category(name=name, ledger_group=ledger_group, ledger_sub_group=sub_group)
            created += 1
        return created
