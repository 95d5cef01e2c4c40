"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist in the current tenant."""


class ConflictError(DomainError):
    """Valid input that is illegal given the current ledger state."""


class ConsistencyError(DomainError):
    """The ledger is internally inconsistent.

    Raised when a stored group or the trial balance does not balance. Posting
    against the affected tenant is halted until an operator resumes it.
    """


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int | str) -> str:
    """Return message for missing category by ID or name."""
    if isinstance(category_id, str):
        return f"Category '{category_id}' not found"
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def group_not_found(group_id: int) -> str:
    """Return message for missing transaction group."""
    return f"Transaction group {group_id} not found"


def voucher_not_found(voucher_id: int) -> str:
    """Return message for missing voucher."""
    return f"Voucher {voucher_id} not found"


def non_positive_amount(amount) -> str:
    """Return message for zero or negative amounts."""
    return f"Amount must be greater than zero, got {amount}"


def unbalanced_entry(total_debit, total_credit) -> str:
    """Return message for a journal entry whose sides differ."""
    return f"Unbalanced entry: total debit {total_debit} != total credit {total_credit}"


def account_archived(account_id: int) -> str:
    """Return message when posting to or under an archived account."""
    return f"Account {account_id} is archived"


def account_archive_blocked(account_id: int, transaction_count: int, child_count: int) -> str:
    """Return message when an account cannot be archived."""
    parts = []
    if transaction_count > 0:
        parts.append(f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}")
    if child_count > 0:
        parts.append(f"{child_count} active child account{'s' if child_count != 1 else ''}")
    return (
        f"Cannot archive account {account_id}: it has {', '.join(parts)}. "
        "Archive the child accounts first; system accounts with history cannot be archived."
    )


def ledger_halted(reason: str) -> str:
    """Return message when posting is halted for the tenant."""
    return f"Posting is halted for this ledger: {reason}"
