"""Tests for the voucher workflow."""

import pytest
import threading
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import VoucherStatus, VoucherTo, VoucherType
from ledgerkit.domain.errors import ConflictError, ConsistencyError, NotFoundError, ValidationError
from ledgerkit.domain.transaction import mirror_fields
from ledgerkit.domain.voucher import VoucherService


def _payment(voucher_service, accounts, amount="450.00"):
    return voucher_service.create_voucher(
        VoucherType.PAYMENT,
        VoucherTo.VENDOR,
        debit_account_id=accounts["payable"],
        credit_account_id=accounts["bank"],
        amount=amount,
        transaction_date=date(2024, 6, 1),
        beneficiary_name="Acme Ltd",
        reference="CHQ-1001",
    )


def test_create_voucher(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    assert voucher.status == VoucherStatus.PENDING
    assert voucher.version == 1
    assert voucher.editable
    assert voucher.amount == Decimal("450.00")
    assert voucher.debit_account_id == sample_accounts["payable"]
    assert voucher.credit_account_id == sample_accounts["bank"]
    assert voucher.beneficiary_name == "Acme Ltd"

    txn = transaction_service.get_transaction(voucher.transaction_id)
    assert txn.verified is False
    assert txn.transaction_date == date(2024, 6, 1)


def test_create_voucher_validation(voucher_service, sample_accounts):
    with pytest.raises(ValidationError):
        _payment(voucher_service, sample_accounts, amount="-1")
    with pytest.raises(ValidationError):
        voucher_service.create_voucher(
            "CHEQUE", VoucherTo.VENDOR, sample_accounts["payable"], sample_accounts["bank"], "10"
        )
    assert voucher_service.list_vouchers() == []


def test_update_pending_voucher(voucher_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    updated = voucher_service.update_voucher(
        voucher.id, amount="475.25", reference="CHQ-1002", credit_account_id=sample_accounts["cash"]
    )

    assert updated.amount == Decimal("475.25")
    assert updated.reference == "CHQ-1002"
    assert updated.credit_account_id == sample_accounts["cash"]
    assert updated.beneficiary_name == "Acme Ltd"
    assert updated.version == 2
    assert updated.transaction.base_amount == Decimal("475.25")


def test_approve_voucher(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    approved = voucher_service.approve_voucher(voucher.id, approver="carol")

    assert approved.status == VoucherStatus.APPROVED
    assert approved.approved_by == "carol"
    assert not approved.editable
    txn = transaction_service.get_transaction(voucher.transaction_id)
    assert txn.verified is True
    assert txn.verified_by == "carol"

    with pytest.raises(ConflictError):
        voucher_service.update_voucher(voucher.id, amount="1")
    with pytest.raises(ConflictError):
        voucher_service.approve_voucher(voucher.id)
    with pytest.raises(ConflictError):
        voucher_service.reject_voucher(voucher.id)


def test_reject_voucher_archives_transaction(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    rejected = voucher_service.reject_voucher(voucher.id, approver="carol")

    assert rejected.status == VoucherStatus.REJECTED
    assert transaction_service.get_transaction(voucher.transaction_id).archived is True
    assert transaction_service.list_transactions() == []


def test_stale_version_is_rejected(voucher_service, temp_db, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)
    voucher_service.update_voucher(voucher.id, reference="CHQ-2")

    assert not temp_db.transition_voucher_status(
        voucher.id,
        voucher.version,
        VoucherStatus.PENDING,
        VoucherStatus.APPROVED,
        "mallory",
        {"verified": True},
    )
    assert voucher_service.get_voucher(voucher.id).status == VoucherStatus.PENDING


def test_concurrent_approval_single_winner(temp_db, sample_accounts):
    voucher = _payment(VoucherService(temp_db), sample_accounts)
    barrier = threading.Barrier(2)
    outcomes = []

    def approve(approver):
        service = VoucherService(temp_db)
        barrier.wait()
        try:
            service.approve_voucher(voucher.id, approver=approver)
            outcomes.append("approved")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=approve, args=(name,)) for name in ("alice", "bob")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["approved", "conflict"]
    assert temp_db.get_voucher(voucher.id).version == 2


def test_reverse_approved_voucher(voucher_service, balance_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)
    voucher_service.approve_voucher(voucher.id)

    reversal = voucher_service.reverse_voucher(voucher.id, reversal_date=date(2024, 6, 2))

    assert reversal.reversal_of_id == voucher.transaction_id
    assert reversal.debit_account_id == sample_accounts["bank"]
    assert balance_service.balance_as_of(sample_accounts["bank"], date(2024, 6, 30)) == Decimal("0")
    with pytest.raises(ConflictError):
        voucher_service.reverse_voucher(voucher.id)


def test_reverse_pending_voucher_conflicts(voucher_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    with pytest.raises(ConflictError, match="only APPROVED"):
        voucher_service.reverse_voucher(voucher.id)


def test_list_vouchers_by_status(voucher_service, sample_accounts):
    first = _payment(voucher_service, sample_accounts)
    second = _payment(voucher_service, sample_accounts)
    voucher_service.approve_voucher(second.id)

    assert [v.id for v in voucher_service.list_vouchers()] == [first.id, second.id]
    assert [v.id for v in voucher_service.list_vouchers(VoucherStatus.PENDING)] == [first.id]


def test_missing_voucher(voucher_service):
    with pytest.raises(NotFoundError):
        voucher_service.approve_voucher(42)


def test_pending_voucher_transaction_cannot_be_reversed_directly(
    voucher_service, transaction_service, balance_service, sample_accounts
):
    voucher = _payment(voucher_service, sample_accounts)

    with pytest.raises(ConflictError, match="only approved vouchers"):
        transaction_service.reverse_transaction(voucher.transaction_id)

    voucher_service.reject_voucher(voucher.id)
    assert balance_service.balance_as_of(sample_accounts["bank"], date(2024, 6, 30)) == Decimal("0")
    assert balance_service.balance_as_of(sample_accounts["payable"], date(2024, 6, 30)) == Decimal("0")


def test_rejected_voucher_transaction_cannot_be_reversed(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)
    voucher_service.reject_voucher(voucher.id)

    with pytest.raises(ConflictError):
        transaction_service.reverse_transaction(voucher.transaction_id)


def test_voucher_transaction_reversed_in_storage_blocks_workflow(voucher_service, temp_db, balance_service, sample_accounts):
    # Bypass the services to simulate a reversal written by another path
    voucher = _payment(voucher_service, sample_accounts)
    txn = temp_db.get_transaction(voucher.transaction_id)
    temp_db.create_reversal(txn.id, **mirror_fields(txn))

    with pytest.raises(ConflictError, match="changed outside the voucher"):
        voucher_service.update_voucher(voucher.id, amount="80")
    with pytest.raises(ConflictError, match="changed outside the voucher"):
        voucher_service.reject_voucher(voucher.id)

    stored = temp_db.get_voucher(voucher.id)
    assert stored.status == VoucherStatus.PENDING
    assert stored.version == 1
    assert stored.transaction.amount == Decimal("450.00")
    assert stored.transaction.archived is False
    assert balance_service.balance_as_of(sample_accounts["bank"], date(2024, 6, 30)) == Decimal("0")


def test_pending_voucher_transaction_cannot_be_verified_directly(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    with pytest.raises(ConflictError, match="approve the voucher"):
        transaction_service.verify_transaction(voucher.transaction_id, approver="mallory")

    assert transaction_service.get_transaction(voucher.transaction_id).verified is False
    rejected = voucher_service.reject_voucher(voucher.id)
    assert rejected.status == VoucherStatus.REJECTED
    assert transaction_service.get_transaction(voucher.transaction_id).archived is True


def test_verified_voucher_transaction_blocks_reject(voucher_service, temp_db, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)
    temp_db.verify_transaction(voucher.transaction_id, approver="mallory")

    with pytest.raises(ConflictError, match="changed outside the voucher"):
        voucher_service.reject_voucher(voucher.id)

    assert temp_db.get_voucher(voucher.id).status == VoucherStatus.PENDING
    assert transaction_service.get_transaction(voucher.transaction_id).archived is False


def test_voucher_transaction_cannot_be_archived_directly(voucher_service, transaction_service, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)

    with pytest.raises(ConflictError, match="reject the voucher"):
        transaction_service.archive_transaction(voucher.transaction_id)

    assert transaction_service.get_transaction(voucher.transaction_id).archived is False


def test_update_voucher_refused_while_halted(voucher_service, temp_db, sample_accounts):
    voucher = _payment(voucher_service, sample_accounts)
    temp_db.halt_ledger("integrity check failed")

    with pytest.raises(ConsistencyError, match="halted"):
        voucher_service.update_voucher(voucher.id, amount="10")

    assert temp_db.get_voucher(voucher.id).amount == Decimal("450.00")
