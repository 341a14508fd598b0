"""Dashboard derivations - pure read-side aggregations over the workspace"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List

from comissio_ledger.domain.ledger import is_paid
from comissio_ledger.domain.models import (
    DashboardSummary,
    DebtStatus,
    MonthlyBucket,
    UpcomingInstallment,
    Workspace,
)
from comissio_ledger.utils.money import quantize_cents, to_decimal

MONTH_LABELS = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun", "Jul", "Ago", "Set", "Out", "Nov", "Dez"]

ZERO = Decimal("0.00")


def _installments(debt) -> list:
    return list(debt.installments or [])


def total_receivable(debts: Iterable) -> Decimal:
    """Sum of commission values across all debts"""
    return sum((to_decimal(d.commission_value) for d in debts), ZERO)


def total_received(debts: Iterable) -> Decimal:
    """Sum of paid installment amounts across all debts"""
    return sum(
        (to_decimal(inst.amount) for d in debts for inst in _installments(d) if is_paid(inst)),
        ZERO,
    )


def upcoming_due(workspace: Workspace, limit: int = 5) -> List[UpcomingInstallment]:
    """Pending installments ordered by due date (then debt, then number), first `limit`"""
    debtor_names = workspace.debtor_names()
    project_names = workspace.project_names()

    pending = [
        (inst, debt)
        for debt in workspace.debts
        for inst in _installments(debt)
        if not is_paid(inst)
    ]
    pending.sort(key=lambda pair: (pair[0].due_date, pair[1].id, pair[0].number))

    return [
        UpcomingInstallment(
            installment_id=inst.id,
            debt_id=debt.id,
            number=inst.number,
            amount=to_decimal(inst.amount),
            due_date=inst.due_date,
            debtor_name=debtor_names.get(debt.debtor_id),
            project_name=project_names.get(debt.project_id),
        )
        for inst, debt in pending[:limit]
    ]


def monthly_forecast(debts: Iterable, year: int) -> List[MonthlyBucket]:
    """Installment amounts (pending and paid) bucketed by due month for one year"""
    totals = [ZERO] * 12
    for debt in debts:
        for inst in _installments(debt):
            if inst.due_date.year == year:
                totals[inst.due_date.month - 1] += to_decimal(inst.amount)

    return [
        MonthlyBucket(month=i + 1, label=MONTH_LABELS[i], amount=totals[i])
        for i in range(12)
    ]


def status_distribution(debts: Iterable) -> Dict[DebtStatus, int]:
    """Number of debts per status; every status is present, zero included"""
    counts = {status: 0 for status in DebtStatus}
    for debt in debts:
        counts[DebtStatus(debt.status)] += 1
    return counts


def build_dashboard(workspace: Workspace, today: date, upcoming_limit: int = 5) -> DashboardSummary:
    """Combine every dashboard figure for the year of `today`"""
    debts = workspace.debts
    receivable = total_receivable(debts)
    received = total_received(debts)
    average_ticket = quantize_cents(receivable / len(debts)) if debts else ZERO

    return DashboardSummary(
        total_receivable=receivable,
        total_received=received,
        total_pending=receivable - received,
        average_ticket=average_ticket,
        debtor_count=len(workspace.debtors),
        upcoming=upcoming_due(workspace, upcoming_limit),
        monthly_forecast=monthly_forecast(debts, today.year),
        status_distribution=status_distribution(debts),
    )
