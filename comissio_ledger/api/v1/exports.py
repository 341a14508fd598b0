"""CSV export of the debt list and printable ledger report"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, StreamingResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from comissio_ledger.api.dependencies import get_app_context
from comissio_ledger.api.v1.debts import STATUS_FILTER_PATTERN
from comissio_ledger.context import AppContext
from comissio_ledger.domain.exports import csv_filename, debts_to_csv
from comissio_ledger.domain.ledger import rollup
from comissio_ledger.domain.search import filter_debts
from comissio_ledger.infrastructure.database.models import Debtor, Project
from comissio_ledger.infrastructure.database.repositories import DebtRepository
from comissio_ledger.infrastructure.database.session import get_db
from comissio_ledger.utils.money import format_brl

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))
templates.env.filters["brl"] = format_brl
templates.env.filters["br_date"] = lambda d: d.strftime("%d/%m/%Y") if d else ""


@router.get("/debts/export.csv")
async def export_debts_csv(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, pattern=STATUS_FILTER_PATTERN),
    context: AppContext = Depends(get_app_context),
):
    """Download the filtered debt list as CSV"""
    workspace = await context.workspace()
    debts = filter_debts(workspace.debts, workspace.debtors, workspace.projects, search=search, status=status)
    content = debts_to_csv(debts, workspace.debtors, workspace.projects)

    return StreamingResponse(
        iter([content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(context.today())}"'},
    )


@router.get("/debts/{debt_id}/report", response_class=HTMLResponse)
def debt_report(
    debt_id: str,
    request: Request,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_app_context),
):
    """Print-formatted, read-only statement of one debt's ledger"""
    debt = DebtRepository(db).get_with_installments(debt_id)

    return templates.TemplateResponse(
        request,
        "debt_report.html",
        {
            "debt": debt,
            "debtor": db.get(Debtor, debt.debtor_id),
            "project": db.get(Project, debt.project_id),
            "ledger": rollup(debt, debt.installments),
            "installments": sorted(debt.installments, key=lambda i: i.number),
            "issued_on": context.today(),
            "reference": debt.id[:8].upper(),
        },
    )
