"""Dashboard and initial-load endpoints (read-only, computed from the workspace snapshot)"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from comissio_ledger.api.dependencies import get_app_context
from comissio_ledger.api.v1.schemas import (
    DashboardResponse,
    DebtorResponse,
    DebtResponse,
    MonthlyBucketSchema,
    ProjectResponse,
    UpcomingInstallmentSchema,
    WorkspaceResponse,
)
from comissio_ledger.config import settings
from comissio_ledger.context import AppContext
from comissio_ledger.domain.reporting import build_dashboard

router = APIRouter()


@router.get("/workspace", response_model=WorkspaceResponse)
async def get_workspace(
    refresh: bool = Query(False, description="Bypass the cached snapshot"),
    context: AppContext = Depends(get_app_context),
):
    """
    Initial load: debtors, projects and debts with installments.

    All three fetches succeed or the request fails with a single store error.
    """
    workspace = await context.workspace(refresh=refresh)
    return WorkspaceResponse(
        debtors=[DebtorResponse.model_validate(d) for d in workspace.debtors],
        projects=[ProjectResponse.model_validate(p) for p in workspace.projects],
        debts=[DebtResponse.model_validate(d) for d in workspace.debts],
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Forecast year (default: current)"),
    context: AppContext = Depends(get_app_context),
):
    workspace = await context.workspace()
    today = context.today() if year is None else date(year, 1, 1)
    summary = build_dashboard(workspace, today, settings.upcoming_due_limit)

    return DashboardResponse(
        total_receivable=summary.total_receivable,
        total_received=summary.total_received,
        total_pending=summary.total_pending,
        average_ticket=summary.average_ticket,
        debtor_count=summary.debtor_count,
        upcoming=[
            UpcomingInstallmentSchema(
                installment_id=u.installment_id,
                debt_id=u.debt_id,
                number=u.number,
                amount=u.amount,
                due_date=u.due_date,
                debtor_name=u.debtor_name,
                project_name=u.project_name,
            )
            for u in summary.upcoming
        ],
        monthly_forecast=[
            MonthlyBucketSchema(month=b.month, label=b.label, amount=b.amount)
            for b in summary.monthly_forecast
        ],
        status_distribution={status.value: count for status, count in summary.status_distribution.items()},
    )
