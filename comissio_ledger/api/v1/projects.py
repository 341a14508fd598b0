"""Project CRUD endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from comissio_ledger.api.dependencies import get_context_registry, require_session
from comissio_ledger.api.v1.schemas import ProjectCreate, ProjectResponse, ProjectUpdate
from comissio_ledger.context import ContextRegistry
from comissio_ledger.domain.search import filter_projects
from comissio_ledger.infrastructure.database.repositories import ProjectRepository, commit
from comissio_ledger.infrastructure.database.session import get_db

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/projects", response_model=List[ProjectResponse])
def list_projects(
    search: Optional[str] = Query(None, description="Match on name, tower or unit"),
    db: Session = Depends(get_db),
):
    projects = filter_projects(ProjectRepository(db).list_all(), search)
    return [ProjectResponse.model_validate(d) for d in projects]


@router.post("/projects", response_model=ProjectResponse, status_code=201)
def create_project(
    request_body: ProjectCreate,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    project = ProjectRepository(db).create(**request_body.model_dump())
    commit(db)
    registry.invalidate_all()
    return ProjectResponse.model_validate(project)


@router.patch("/projects/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    request_body: ProjectUpdate,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    project = ProjectRepository(db).update(project_id, **request_body.model_dump(exclude_unset=True, exclude_none=True))
    commit(db)
    registry.invalidate_all()
    return ProjectResponse.model_validate(project)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db),
    registry: ContextRegistry = Depends(get_context_registry),
):
    """Rejected with 409 while any debt references the project"""
    ProjectRepository(db).delete(project_id)
    commit(db)
    registry.invalidate_all()
    return Response(status_code=204)
