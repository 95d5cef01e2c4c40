"""Utility for resolving account references to IDs."""

from ledgerkit.domain.account import AccountService


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account ID, account number or account name to an ID.

    Lookup order for strings is number, then ID, then exact name. Numbers are
    tried first because account codes such as "1000" look like IDs.

    Args:
        account_service: AccountService instance
        account: Account ID, number or name

    Returns:
        Account ID

    Raises:
        ValueError: If no account matches
    """
    if isinstance(account, int):
        if account_service.get_account(account) is None:
            raise ValueError(f"Account ID {account} not found")
        return account

    account = account.strip()
    accounts = account_service.list_accounts(include_archived=True)

    for acc in accounts:
        if acc.number is not None and acc.number == account:
            return acc.id

    try:
        account_id = int(account)
    except ValueError:
        account_id = None
    if account_id is not None:
        if account_service.get_account(account_id) is None:
            raise ValueError(f"Account ID {account_id} not found")
        return account_id

    for acc in accounts:
        if acc.name == account:
            return acc.id

    raise ValueError(f"Account '{account}' not found")
