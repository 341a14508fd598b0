"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from comissio_ledger.domain.models import DebtStatus, InstallmentStatus


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Auth

class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """Request body for POST /v1/auth/refresh"""

    refresh_token: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Authenticated operator session"""

    user_id: str
    email: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None


# Debtors

class DebtorCreate(BaseModel):
    """Request body for POST /v1/debtors"""

    name: str = Field(..., min_length=1)
    tax_id: str = ""
    email: str = ""
    phone: str = ""


class DebtorUpdate(BaseModel):
    """Partial update for PATCH /v1/debtors/{id}"""

    name: Optional[str] = Field(None, min_length=1)
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class DebtorResponse(ORMModel):
    id: str
    name: str
    tax_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime


# Projects

class ProjectCreate(BaseModel):
    """Request body for POST /v1/projects"""

    name: str = Field(..., min_length=1)
    tower: str = ""
    unit: str = ""
    vgv: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2, description="Total sale value")


class ProjectUpdate(BaseModel):
    """Partial update for PATCH /v1/projects/{id}"""

    name: Optional[str] = Field(None, min_length=1)
    tower: Optional[str] = None
    unit: Optional[str] = None
    vgv: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)


class ProjectResponse(ORMModel):
    id: str
    name: str
    tower: Optional[str] = None
    unit: Optional[str] = None
    vgv: Decimal
    created_at: datetime


# Debts and installments

class DebtCreate(BaseModel):
    """Request body for POST /v1/debts"""

    debtor_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    commission_rate: Decimal = Field(Decimal("5"), gt=0, le=100, decimal_places=2, description="Commission percentage")
    installment_count: int = Field(1, ge=1, le=600)
    start_date: date = Field(default_factory=date.today)


class InstallmentSchema(ORMModel):
    """Single installment in a commission schedule"""

    id: str
    number: int
    amount: Decimal
    due_date: date
    status: InstallmentStatus
    paid_at: Optional[datetime] = None
    version: int


class DebtResponse(ORMModel):
    id: str
    debtor_id: str
    project_id: str
    total_value: Decimal
    commission_rate: Decimal
    commission_value: Decimal
    installment_count: int
    start_date: date
    status: DebtStatus
    created_at: datetime
    installments: List[InstallmentSchema] = []


class LedgerSchema(BaseModel):
    total_paid: Decimal
    total_pending: Decimal
    status: DebtStatus
    paid_count: int


class DebtDetailResponse(BaseModel):
    """Response for GET /v1/debts/{id} and the payment toggle"""

    debt: DebtResponse
    ledger: LedgerSchema
    debtor_name: Optional[str] = None
    project_name: Optional[str] = None


class ToggleRequest(BaseModel):
    """Optional body for the payment toggle; expected_version enables the optimistic check"""

    expected_version: Optional[int] = Field(None, ge=1)


# Dashboard

class UpcomingInstallmentSchema(BaseModel):
    installment_id: str
    debt_id: str
    number: int
    amount: Decimal
    due_date: date
    debtor_name: Optional[str] = None
    project_name: Optional[str] = None


class MonthlyBucketSchema(BaseModel):
    month: int
    label: str
    amount: Decimal


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    total_receivable: Decimal
    total_received: Decimal
    total_pending: Decimal
    average_ticket: Decimal
    debtor_count: int
    upcoming: List[UpcomingInstallmentSchema]
    monthly_forecast: List[MonthlyBucketSchema]
    status_distribution: Dict[str, int]


class WorkspaceResponse(BaseModel):
    """Response for GET /v1/workspace (initial load)"""

    debtors: List[DebtorResponse]
    projects: List[ProjectResponse]
    debts: List[DebtResponse]


class ErrorResponse(BaseModel):
    detail: str
    category: str
    retryable: bool = False
