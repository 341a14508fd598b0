"""Debtor CRUD endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from comissio_ledger.api.dependencies import get_context_registry, require_session
from comissio_ledger.api.v1.schemas import DebtorCreate, DebtorResponse, DebtorUpdate
from comissio_ledger.context import ContextRegistry
from comissio_ledger.domain.search import filter_debtors
from comissio_ledger.infrastructure.database.repositories import DebtorRepository, commit
from comissio_ledger.infrastructure.database.session import get_db

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/debtors", response_model=List[DebtorResponse])
def list_debtors(
    search: Optional[str] = Query(None, description="Match on name or tax id"),
    db: Session = Depends(get_db),
):
    debtors = filter_debtors(DebtorRepository(db).list_all(), search)
    return [DebtorResponse.model_validate(d) for d in debtors]


@router.post("/debtors", response_model=DebtorResponse, status_code=201)
def create_debtor(
    request_body: DebtorCreate,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    debtor = DebtorRepository(db).create(**request_body.model_dump())
    commit(db)
    registry.invalidate_all()
    return DebtorResponse.model_validate(debtor)


@router.patch("/debtors/{debtor_id}", response_model=DebtorResponse)
def update_debtor(
    debtor_id: str,
    request_body: DebtorUpdate,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    debtor = DebtorRepository(db).update(debtor_id, **request_body.model_dump(exclude_unset=True, exclude_none=True))
    commit(db)
    registry.invalidate_all()
    return DebtorResponse.model_validate(debtor)


@router.delete("/debtors/{debtor_id}", status_code=204)
def delete_debtor(
    debtor_id: str,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    """Rejected with 409 while any debt references the debtor"""
    DebtorRepository(db).delete(debtor_id)
    commit(db)
    registry.invalidate_all()
    return Response(status_code=204)
