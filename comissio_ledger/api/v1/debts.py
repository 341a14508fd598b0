"""Debt endpoints: list, create with schedule, detail, delete, payment toggle"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from comissio_ledger.api.dependencies import get_context_registry, get_request_id, require_session
from comissio_ledger.api.v1.schemas import (
    DebtCreate,
    DebtDetailResponse,
    DebtResponse,
    LedgerSchema,
    ToggleRequest,
)
from comissio_ledger.context import ContextRegistry
from comissio_ledger.domain.ledger import rollup
from comissio_ledger.domain.models import DebtStatus
from comissio_ledger.domain.search import ALL_STATUSES, filter_debts
from comissio_ledger.infrastructure.database.models import Debt, Debtor, Project
from comissio_ledger.infrastructure.database.repositories import (
    DebtorRepository,
    DebtRepository,
    ProjectRepository,
    commit,
)
from comissio_ledger.infrastructure.database.session import get_db
from comissio_ledger.infrastructure.observability.logging import log_debt_created
from comissio_ledger.infrastructure.observability.metrics import debt_created_counter
from comissio_ledger.services.payments import PaymentService

router = APIRouter(dependencies=[Depends(require_session)])

STATUS_FILTER_PATTERN = "^(" + "|".join([ALL_STATUSES] + [s.value for s in DebtStatus]) + ")$"


def build_debt_detail(db: Session, debt: Debt) -> DebtDetailResponse:
    """Debt with its ledger rollup and the debtor/project names"""
    debtor = db.get(Debtor, debt.debtor_id)
    project = db.get(Project, debt.project_id)
    ledger = rollup(debt, debt.installments)

    return DebtDetailResponse(
        debt=DebtResponse.model_validate(debt),
        ledger=LedgerSchema(
            total_paid=ledger.total_paid,
            total_pending=ledger.total_pending,
            status=ledger.status,
            paid_count=ledger.paid_count,
        ),
        debtor_name=debtor.name if debtor else None,
        project_name=project.name if project else None,
    )


@router.get("/debts", response_model=List[DebtResponse])
def list_debts(
    search: Optional[str] = Query(None, description="Match on debtor or project name"),
    status: Optional[str] = Query(None, pattern=STATUS_FILTER_PATTERN),
    db: Session = Depends(get_db),
):
    """Debts with installments, newest first"""
    debts = filter_debts(
        DebtRepository(db).list_with_installments(),
        DebtorRepository(db).list_all(),
        ProjectRepository(db).list_all(),
        search=search,
        status=status,
    )
    return [DebtResponse.model_validate(d) for d in debts]


@router.post("/debts", response_model=DebtResponse, status_code=201)
def create_debt(
    request_body: DebtCreate,
    request: Request,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    """
    Create a debt and its monthly installment schedule.

    Flow:
    1. Copy the project's VGV as total_value
    2. commission_value = total_value x rate / 100 (fixed from now on)
    3. Generate installment_count monthly installments from start_date
    4. Persist debt and installments in one transaction
    """
    request_id = get_request_id(request)

    debt = DebtRepository(db).create_with_schedule(
        debtor_id=request_body.debtor_id,
        project_id=request_body.project_id,
        commission_rate=request_body.commission_rate,
        installment_count=request_body.installment_count,
        start_date=request_body.start_date,
    )
    commit(db)
    registry.invalidate_all()

    debt_created_counter.inc()
    log_debt_created(request_id, debt.id, str(debt.commission_value), debt.installment_count)

    return DebtResponse.model_validate(DebtRepository(db).get_with_installments(debt.id))


@router.get("/debts/{debt_id}", response_model=DebtDetailResponse)
def get_debt(debt_id: str, db: Session = Depends(get_db)):
    return build_debt_detail(db, DebtRepository(db).get_with_installments(debt_id))


@router.delete("/debts/{debt_id}", status_code=204)
def delete_debt(
    debt_id: str,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    """Deletes the debt together with its installments"""
    DebtRepository(db).delete(debt_id)
    commit(db)
    registry.invalidate_all()
    return Response(status_code=204)


@router.post("/debts/{debt_id}/installments/{installment_id}/toggle", response_model=DebtDetailResponse)
def toggle_installment_payment(
    debt_id: str,
    installment_id: str,
    request_body: Optional[ToggleRequest] = Body(None),
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    """
    Confirm a pending installment or reverse a paid one.

    Send expected_version to reject the toggle (409) when another operator
    changed the installment first.
    """
    expected_version = request_body.expected_version if request_body else None
    PaymentService(db).toggle_payment(debt_id, installment_id, expected_version=expected_version)
    registry.invalidate_all()

    return build_debt_detail(db, DebtRepository(db).get_with_installments(debt_id))
