"""Integration tests for the payment toggle and debt status cache"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from comissio_ledger.domain.exceptions import NotFoundError, VersionConflictError
from comissio_ledger.domain.models import DebtStatus, InstallmentStatus
from comissio_ledger.infrastructure.database.models import Installment
from comissio_ledger.infrastructure.database.repositories import DebtRepository
from comissio_ledger.services.payments import PaymentService

FIXED_NOW = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)


def reload(db, debt_id):
    db.expire_all()
    return DebtRepository(db).get_with_installments(debt_id)


def test_toggle_pending_to_paid(db, debt):
    first = debt.installments[0]

    PaymentService(db, clock=lambda: FIXED_NOW).toggle_payment(debt.id, first.id)

    debt = reload(db, debt.id)
    assert debt.installments[0].status == InstallmentStatus.PAID.value
    assert debt.installments[0].paid_at is not None
    assert debt.installments[0].version == 2
    assert debt.status == DebtStatus.PARTIAL.value


def test_toggle_is_its_own_inverse(db, debt):
    target = debt.installments[3]
    service = PaymentService(db)

    service.toggle_payment(debt.id, target.id)
    service.toggle_payment(debt.id, target.id)

    debt = reload(db, debt.id)
    assert debt.installments[3].status == InstallmentStatus.PENDING.value
    assert debt.installments[3].paid_at is None
    assert debt.status == DebtStatus.OPEN.value


def test_all_paid_marks_debt_paid(db, debt):
    service = PaymentService(db)
    for inst in list(debt.installments):
        service.toggle_payment(debt.id, inst.id)

    debt = reload(db, debt.id)
    assert debt.status == DebtStatus.PAID.value

    # Reversing one payment reopens the debt as partial
    service.toggle_payment(debt.id, debt.installments[-1].id)
    assert reload(db, debt.id).status == DebtStatus.PARTIAL.value


def test_toggle_returns_debt_with_fresh_status(db, debt):
    updated = PaymentService(db).toggle_payment(debt.id, debt.installments[0].id)

    assert updated.id == debt.id
    assert updated.status == DebtStatus.PARTIAL.value


def test_expected_version_mismatch_changes_nothing(db, debt):
    target = debt.installments[0]

    with pytest.raises(VersionConflictError):
        PaymentService(db).toggle_payment(debt.id, target.id, expected_version=5)

    debt = reload(db, debt.id)
    assert debt.installments[0].status == InstallmentStatus.PENDING.value
    assert debt.installments[0].version == 1
    assert debt.status == DebtStatus.OPEN.value


def test_expected_version_match_succeeds(db, debt):
    PaymentService(db).toggle_payment(debt.id, debt.installments[0].id, expected_version=1)

    assert reload(db, debt.id).installments[0].version == 2


def test_concurrent_writer_detected(db, debt, session_factory):
    """A toggle working from a stale read loses to the writer that committed first"""
    target_id = debt.installments[0].id

    stale_db = session_factory()
    try:
        stale = stale_db.get(Installment, target_id)  # read at version 1
        assert stale.version == 1

        PaymentService(db).toggle_payment(debt.id, target_id)  # committed at version 2

        with pytest.raises(VersionConflictError):
            PaymentService(stale_db).toggle_payment(debt.id, target_id)
    finally:
        stale_db.close()

    debt = reload(db, debt.id)
    assert debt.installments[0].status == InstallmentStatus.PAID.value
    assert debt.status == DebtStatus.PARTIAL.value


def test_toggle_rejects_installment_of_other_debt(db, debt, debtor, project):
    other = DebtRepository(db).create_with_schedule(debtor.id, project.id, Decimal("2"), 2, date(2024, 1, 1))
    db.commit()

    with pytest.raises(NotFoundError):
        PaymentService(db).toggle_payment(debt.id, other.installments[0].id)


def test_toggle_unknown_debt(db, debt):
    with pytest.raises(NotFoundError):
        PaymentService(db).toggle_payment("missing", debt.installments[0].id)
