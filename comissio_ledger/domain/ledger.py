"""Ledger rollup - paid/pending totals and derived debt status"""

from decimal import Decimal
from typing import Iterable

from comissio_ledger.domain.models import DebtStatus, InstallmentStatus, LedgerRollup
from comissio_ledger.utils.money import to_decimal


def is_paid(installment) -> bool:
    return InstallmentStatus(installment.status) is InstallmentStatus.PAID


def derive_debt_status(paid_count: int, installment_count: int) -> DebtStatus:
    """
    Map the number of paid installments to a debt status.

    - paid_count == installment_count: QUITADA
    - 0 < paid_count < installment_count: PARCIAL
    - paid_count == 0: ABERTA
    """
    if paid_count >= installment_count:
        return DebtStatus.PAID
    elif paid_count > 0:
        return DebtStatus.PARTIAL
    else:
        return DebtStatus.OPEN


def rollup(debt, installments: Iterable) -> LedgerRollup:
    """
    Compute total paid, total pending and status for a debt.

    Works on anything exposing commission_value/installment_count (debt) and
    status/amount (installments), so ORM rows and dataclasses both qualify.
    Pure and idempotent.
    """
    paid = [inst for inst in installments if is_paid(inst)]
    total_paid = sum((to_decimal(inst.amount) for inst in paid), Decimal("0.00"))

    return LedgerRollup(
        total_paid=total_paid,
        total_pending=to_decimal(debt.commission_value) - total_paid,
        status=derive_debt_status(len(paid), debt.installment_count),
        paid_count=len(paid),
    )
