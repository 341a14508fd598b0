"""Unit tests for the ledger rollup and derived debt status"""

import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from comissio_ledger.domain.ledger import derive_debt_status, rollup
from comissio_ledger.domain.models import DebtStatus, InstallmentStatus


def make_debt(commission_value: str, count: int, paid: int) -> tuple[SimpleNamespace, list[SimpleNamespace]]:
    amount = Decimal(commission_value) / count
    installments = [
        SimpleNamespace(
            number=i + 1,
            amount=amount,
            due_date=date(2024, i + 1, 1),
            status=(InstallmentStatus.PAID if i < paid else InstallmentStatus.PENDING).value,
        )
        for i in range(count)
    ]
    debt = SimpleNamespace(commission_value=Decimal(commission_value), installment_count=count)
    return debt, installments


def test_rollup_partial():
    """4 installments with 2 paid -> PARCIAL, pending = commission - paid"""
    debt, installments = make_debt("4000.00", 4, paid=2)

    result = rollup(debt, installments)

    assert result.status is DebtStatus.PARTIAL
    assert result.paid_count == 2
    assert result.total_paid == Decimal("2000.00")
    assert result.total_pending == Decimal("2000.00")


def test_rollup_open():
    debt, installments = make_debt("1200.00", 3, paid=0)

    result = rollup(debt, installments)

    assert result.status is DebtStatus.OPEN
    assert result.total_paid == Decimal("0")
    assert result.total_pending == Decimal("1200.00")


def test_rollup_paid():
    debt, installments = make_debt("1200.00", 3, paid=3)

    result = rollup(debt, installments)

    assert result.status is DebtStatus.PAID
    assert result.total_pending == Decimal("0")


def test_rollup_is_idempotent():
    debt, installments = make_debt("999.99", 7, paid=4)

    assert rollup(debt, installments) == rollup(debt, installments)


def test_rollup_accepts_enum_statuses():
    debt, installments = make_debt("300.00", 3, paid=1)
    for inst in installments:
        inst.status = InstallmentStatus(inst.status)

    assert rollup(debt, installments).status is DebtStatus.PARTIAL


@pytest.mark.parametrize("count", [1, 2, 5, 12])
def test_exactly_one_status_matches_paid_count_rule(count: int):
    for paid in range(count + 1):
        status = derive_debt_status(paid, count)
        expected = {
            DebtStatus.OPEN: paid == 0,
            DebtStatus.PARTIAL: 0 < paid < count,
            DebtStatus.PAID: paid == count,
        }
        assert [s for s, holds in expected.items() if holds] == [status]
