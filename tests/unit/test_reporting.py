"""Unit tests for dashboard derivations"""

from datetime import date
from decimal import Decimal
from comissio_ledger.domain.models import DebtStatus, InstallmentStatus, Workspace
from comissio_ledger.domain.reporting import (
    build_dashboard,
    monthly_forecast,
    status_distribution,
    total_receivable,
    total_received,
    upcoming_due,
)
from comissio_ledger.infrastructure.database.models import Debt, Debtor, Installment, Project

PAID = InstallmentStatus.PAID.value
PENDING = InstallmentStatus.PENDING.value


def make_installment(number: int, amount: str, due: date, status: str = PENDING) -> Installment:
    return Installment(id=f"inst-{due.isoformat()}-{number}", number=number, amount=Decimal(amount), due_date=due, status=status)


def sample_workspace() -> Workspace:
    debtors = [Debtor(id="d1", name="Ana"), Debtor(id="d2", name="Bruno")]
    projects = [Project(id="p1", name="Aurora", vgv=Decimal("100000.00"))]
    debts = [
        Debt(
            id="debt-1",
            debtor_id="d1",
            project_id="p1",
            commission_value=Decimal("3000.00"),
            installment_count=3,
            status=DebtStatus.PARTIAL.value,
            installments=[
                make_installment(1, "1000.00", date(2024, 1, 10), PAID),
                make_installment(2, "1000.00", date(2024, 2, 10)),
                make_installment(3, "1000.00", date(2024, 3, 10)),
            ],
        ),
        Debt(
            id="debt-2",
            debtor_id="d2",
            project_id="missing",
            commission_value=Decimal("1500.00"),
            installment_count=3,
            status=DebtStatus.OPEN.value,
            installments=[
                make_installment(1, "500.00", date(2023, 12, 5)),
                make_installment(2, "500.00", date(2024, 1, 5)),
                make_installment(3, "500.00", date(2024, 2, 5)),
            ],
        ),
    ]
    return Workspace(debtors=debtors, projects=projects, debts=debts)


def test_totals():
    workspace = sample_workspace()

    assert total_receivable(workspace.debts) == Decimal("4500.00")
    assert total_received(workspace.debts) == Decimal("1000.00")


def test_upcoming_due_sorted_and_annotated():
    upcoming = upcoming_due(sample_workspace(), limit=5)

    assert [u.due_date for u in upcoming] == [
        date(2023, 12, 5),
        date(2024, 1, 5),
        date(2024, 2, 5),
        date(2024, 2, 10),
        date(2024, 3, 10),
    ]
    assert upcoming[0].debtor_name == "Bruno"
    assert upcoming[0].project_name is None
    assert upcoming[3].project_name == "Aurora"


def test_upcoming_due_excludes_paid_and_respects_limit():
    upcoming = upcoming_due(sample_workspace(), limit=2)

    assert len(upcoming) == 2
    assert all(u.due_date != date(2024, 1, 10) for u in upcoming)


def test_monthly_forecast_includes_paid_and_pending_for_year_only():
    buckets = monthly_forecast(sample_workspace().debts, 2024)

    assert len(buckets) == 12
    assert buckets[0].label == "Jan"
    assert buckets[0].amount == Decimal("1500.00")  # 1000 paid + 500 pending
    assert buckets[1].amount == Decimal("1500.00")
    assert buckets[2].amount == Decimal("1000.00")
    assert sum(b.amount for b in buckets[3:]) == Decimal("0")


def test_status_distribution_includes_zero_counts():
    distribution = status_distribution(sample_workspace().debts)

    assert distribution == {DebtStatus.OPEN: 1, DebtStatus.PARTIAL: 1, DebtStatus.PAID: 0}


def test_build_dashboard():
    summary = build_dashboard(sample_workspace(), date(2024, 6, 1))

    assert summary.total_pending == Decimal("3500.00")
    assert summary.average_ticket == Decimal("2250.00")
    assert summary.debtor_count == 2
    assert len(summary.upcoming) == 5
    assert summary.monthly_forecast[0].amount == Decimal("1500.00")


def test_build_dashboard_empty_workspace():
    summary = build_dashboard(Workspace(), date(2024, 6, 1))

    assert summary.total_receivable == Decimal("0")
    assert summary.total_received == Decimal("0")
    assert summary.average_ticket == Decimal("0")
    assert summary.upcoming == []
    assert all(b.amount == 0 for b in summary.monthly_forecast)
    assert set(summary.status_distribution.values()) == {0}
