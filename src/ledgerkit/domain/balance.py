"""Balance calculator.

Balances are computed from the ledger every time; nothing is cached. All
figures are in the tenant's base currency and are signed relative to the
account's normal side, so a positive balance sits on the side on which the
account grows (debit for assets, credit for liabilities).
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from ledgerkit.config import DEFAULT_BASE_CURRENCY
from ledgerkit.database.base import Database
from ledgerkit.domain import errors
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.category import normal_balance_side
from ledgerkit.domain.currency import normalize_currency, round_amount
from ledgerkit.domain.entities import (
    AccountActivity,
    LedgerAccount,
    LedgerGroup,
    LedgerState,
    RunningBalanceLine,
    TrialBalance,
    TrialBalanceLine,
)
from ledgerkit.domain.integrity import report_inconsistency

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def signed_balance(normal_side: LedgerState, debit: Decimal, credit: Decimal) -> Decimal:
    """Net of ``debit`` and ``credit`` seen from ``normal_side``."""
    if normal_side == LedgerState.DEBIT:
        return debit - credit
    return credit - debit


class BalanceService:
    """Read-only balance and trial balance queries."""

    def __init__(self, db: Database, base_currency: str = DEFAULT_BASE_CURRENCY):
        """Initialize balance service.

        Args:
            db: Database instance
            base_currency: Currency every balance is reported in
        """
        self.db = db
        self.base_currency = normalize_currency(base_currency)
        self.accounts = AccountService(db, base_currency=self.base_currency)

    def _round(self, value: Decimal) -> Decimal:
        return round_amount(value, self.base_currency)

    def balance_as_of(self, account_id: int, as_of: Optional[date] = None) -> Decimal:
        """Balance of an account including every posting dated on or before ``as_of``.

        Args:
            account_id: Account to compute
            as_of: Cut-off date, inclusive (defaults to today)

        Returns:
            Signed balance in base currency

        Raises:
            NotFoundError: If the account does not exist
        """
        side = self.accounts.normal_side(account_id)
        debit, credit = self.db.sum_account_postings(account_id, end_date=as_of or date.today())
        return self._round(signed_balance(side, debit, credit))

    def balance_between(self, account_id: int, start: date, end: date) -> Decimal:
        """Net movement of an account over the window (start, end].

        ``start`` is exclusive so that consecutive windows never count a
        posting twice.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If start is after end
        """
        if start > end:
            raise errors.ValidationError(f"Start date {start} is after end date {end}")
        side = self.accounts.normal_side(account_id)
        debit, credit = self.db.sum_account_postings(account_id, start_date=start, end_date=end)
        return self._round(signed_balance(side, debit, credit))

    def trial_balance(self, as_of: Optional[date] = None) -> TrialBalance:
        """Per-account debit and credit columns as of a date.

        Each account's net (debits minus credits) lands in the debit column
        when positive and in the credit column otherwise. Accounts without
        postings are left out.
        """
        as_of = as_of or date.today()
        totals = self.db.sum_postings_by_account(end_date=as_of)
        accounts = {a.id: a for a in self.db.list_accounts(include_archived=True)}
        groups = self._ledger_groups()

        lines = []
        total_debit = ZERO
        total_credit = ZERO
        for account_id in sorted(totals, key=lambda i: _account_sort_key(accounts.get(i), i)):
            debit, credit = totals[account_id]
            net = self._round(debit - credit)
            account = accounts.get(account_id)
            line = TrialBalanceLine(
                account_id=account_id,
                account_name=account.name if account else f"#{account_id}",
                ledger_group=groups.get(account.category_id) if account else None,
                debit=net if net > 0 else ZERO,
                credit=-net if net < 0 else ZERO,
            )
            total_debit += line.debit
            total_credit += line.credit
            lines.append(line)

        logger.debug("Trial balance as of %s: %s / %s", as_of, total_debit, total_credit)
        return TrialBalance(
            as_of=as_of,
            lines=tuple(lines),
            total_debit=total_debit,
            total_credit=total_credit,
        )

    def assert_trial_balance(self, as_of: Optional[date] = None) -> TrialBalance:
        """Return the trial balance, halting the ledger if it does not balance.

        Raises:
            ConsistencyError: If total debits differ from total credits
        """
        trial = self.trial_balance(as_of)
        if not trial.balanced:
            raise report_inconsistency(
                self.db,
                f"Trial balance as of {trial.as_of} is off: "
                f"debits {trial.total_debit} != credits {trial.total_credit}",
            )
        return trial

    def running_balance(
        self,
        account_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[RunningBalanceLine]:
        """Postings of an account in (start, end] with a running total.

        The running total starts from the balance as of ``start`` and every
        row before ``offset`` is still counted, so paging does not change the
        figures.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If start is after end
        """
        if start is not None and end is not None and start > end:
            raise errors.ValidationError(f"Start date {start} is after end date {end}")
        normal = self.accounts.normal_side(account_id)
        balance = self.balance_as_of(account_id, start) if start is not None else ZERO

        transactions = self.db.list_transactions(
            account_id=account_id, start_date=start, end_date=end
        )
        lines = []
        for txn in transactions:
            side = txn.side_for(account_id)
            delta = txn.base_amount if side == normal else -txn.base_amount
            balance += delta
            lines.append(RunningBalanceLine(transaction=txn, side=side, delta=delta, balance=balance))

        if offset:
            lines = lines[offset:]
        if limit is not None:
            lines = lines[:limit]
        return lines

    def account_balances(self, start: Optional[date], end: date) -> list[AccountActivity]:
        """Opening balance, movements and closing balance for every account.

        Args:
            start: Opening date (exclusive); None opens at zero
            end: Closing date (inclusive)

        Raises:
            ValidationError: If start is after end
        """
        if start is not None and start > end:
            raise errors.ValidationError(f"Start date {start} is after end date {end}")
        opening = self.db.sum_postings_by_account(end_date=start) if start is not None else {}
        movement = self.db.sum_postings_by_account(end_date=end, start_date=start)
        groups = self._ledger_groups()

        activities = []
        for account in self.db.list_accounts(include_archived=True):
            if account.id not in opening and account.id not in movement:
                continue
            ledger_group = groups[account.category_id]
            side = normal_balance_side(ledger_group)
            open_debit, open_credit = opening.get(account.id, (ZERO, ZERO))
            debit, credit = movement.get(account.id, (ZERO, ZERO))
            opening_balance = self._round(signed_balance(side, open_debit, open_credit))
            activities.append(
                AccountActivity(
                    account_id=account.id,
                    account_name=account.name,
                    ledger_group=ledger_group,
                    opening_balance=opening_balance,
                    debit_movement=self._round(debit),
                    credit_movement=self._round(credit),
                    closing_balance=opening_balance + self._round(signed_balance(side, debit, credit)),
                )
            )
        return activities

    def _ledger_groups(self) -> dict[int, LedgerGroup]:
        return {c.id: c.ledger_group for c in self.db.list_categories()}


def _account_sort_key(account: Optional[LedgerAccount], account_id: int):
    if account is None:
        return ("", "", account_id)
    return (account.number or "", account.name, account_id)
