"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic so the ledger services never see ORM
rows or storage-only columns such as ``tenant_id``.
"""

from ledgerkit.domain import entities as domain
from ledgerkit.domain.currency import round_amount
from ledgerkit.database.models import (
    LedgerAccountCategory as ORMCategory,
    LedgerAccount as ORMAccount,
    LedgerTransaction as ORMTransaction,
    LedgerTransactionGroup as ORMGroup,
    Voucher as ORMVoucher,
    LedgerHalt as ORMLedgerHalt,
)


def category_to_domain(orm_category: ORMCategory) -> domain.LedgerAccountCategory:
    """Convert SQLAlchemy category model to domain LedgerAccountCategory."""
    return domain.LedgerAccountCategory(
        id=orm_category.id,
        name=orm_category.name,
        ledger_group=domain.LedgerGroup(orm_category.ledger_group),
        ledger_sub_group=orm_category.ledger_sub_group,
        created_at=orm_category.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.LedgerAccount:
    """Convert SQLAlchemy account model to domain LedgerAccount."""
    return domain.LedgerAccount(
        id=orm_account.id,
        name=orm_account.name,
        number=orm_account.number,
        category_id=orm_account.category_id,
        parent_id=orm_account.parent_id,
        currency=orm_account.currency,
        system_account=orm_account.system_account,
        editable=orm_account.editable,
        hidden=orm_account.hidden,
        archived=orm_account.archived,
        purpose=domain.AccountPurpose(orm_account.purpose) if orm_account.purpose else None,
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.LedgerTransaction:
    """Convert SQLAlchemy transaction model to domain LedgerTransaction."""
    related_to = None
    if orm_transaction.related_to_type is not None:
        related_to = domain.DocumentRef(
            document_type=domain.DocumentType(orm_transaction.related_to_type),
            document_id=orm_transaction.related_to_id,
        )
    state = orm_transaction.transaction_state
    return domain.LedgerTransaction(
        id=orm_transaction.id,
        entry_mode=domain.EntryMode(orm_transaction.entry_mode),
        amount=round_amount(orm_transaction.amount, orm_transaction.currency),
        currency=orm_transaction.currency,
        exchange_rate=orm_transaction.exchange_rate,
        base_amount=orm_transaction.base_amount,
        transaction_date=orm_transaction.transaction_date,
        ledger_account_id=orm_transaction.ledger_account_id,
        transaction_state=domain.LedgerState(state) if state else None,
        debit_account_id=orm_transaction.debit_account_id,
        credit_account_id=orm_transaction.credit_account_id,
        verified=orm_transaction.verified,
        verified_by=orm_transaction.verified_by,
        archived=orm_transaction.archived,
        description=orm_transaction.description,
        related_to=related_to,
        payment_method=orm_transaction.payment_method,
        group_id=orm_transaction.group_id,
        reversal_of_id=orm_transaction.reversal_of_id,
        reversed_by_id=orm_transaction.reversed_by_id,
        created_at=orm_transaction.created_at,
    )


def group_to_domain(orm_group: ORMGroup) -> domain.LedgerTransactionGroup:
    """Convert SQLAlchemy group model (with members) to a domain group."""
    return domain.LedgerTransactionGroup(
        id=orm_group.id,
        transaction_date=orm_group.transaction_date,
        currency=orm_group.currency,
        description=orm_group.description,
        reference=orm_group.reference,
        status=domain.GroupStatus(orm_group.status),
        reversal_of_id=orm_group.reversal_of_id,
        reversed_by_id=orm_group.reversed_by_id,
        created_at=orm_group.created_at,
        transactions=tuple(transaction_to_domain(txn) for txn in orm_group.transactions),
    )


def voucher_to_domain(orm_voucher: ORMVoucher) -> domain.Voucher:
    """Convert SQLAlchemy voucher model to a domain Voucher."""
    transaction = None
    if orm_voucher.transaction is not None:
        transaction = transaction_to_domain(orm_voucher.transaction)
    return domain.Voucher(
        id=orm_voucher.id,
        transaction_id=orm_voucher.transaction_id,
        voucher_type=domain.VoucherType(orm_voucher.voucher_type),
        voucher_to=domain.VoucherTo(orm_voucher.voucher_to),
        beneficiary_name=orm_voucher.beneficiary_name,
        reference=orm_voucher.reference,
        status=domain.VoucherStatus(orm_voucher.status),
        version=orm_voucher.version,
        approved_by=orm_voucher.approved_by,
        created_at=orm_voucher.created_at,
        transaction=transaction,
    )


def halt_to_domain(orm_halt: ORMLedgerHalt) -> domain.LedgerHalt:
    return domain.LedgerHalt(reason=orm_halt.reason, created_at=orm_halt.created_at)


def transaction_columns(fields: dict) -> dict:
    """Flatten domain-typed transaction fields into ORM column values."""
    values = dict(fields)
    related_to = values.pop("related_to", None)
    if related_to is not None:
        values["related_to_type"] = related_to.document_type.value
        values["related_to_id"] = str(related_to.document_id)
    for key in ("entry_mode", "transaction_state"):
        if values.get(key) is not None and hasattr(values[key], "value"):
            values[key] = values[key].value
    return values
