"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class DebtStatus(str, Enum):
    """Rollup of installment payment completeness"""

    OPEN = "ABERTA"
    PARTIAL = "PARCIAL"
    PAID = "QUITADA"


class InstallmentStatus(str, Enum):
    """Installment lifecycle: pending <-> paid"""

    PENDING = "PENDENTE"
    PAID = "PAGO"

    def toggled(self) -> "InstallmentStatus":
        return InstallmentStatus.PENDING if self is InstallmentStatus.PAID else InstallmentStatus.PAID


class SessionEvent(str, Enum):
    """Identity session change notifications"""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass
class ScheduledInstallment:
    """Single payment in a generated commission schedule"""

    number: int
    due_date: date
    amount: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: Optional[datetime] = None


@dataclass
class LedgerRollup:
    """Paid/pending totals and derived status for one debt"""

    total_paid: Decimal
    total_pending: Decimal
    status: DebtStatus
    paid_count: int


@dataclass
class UpcomingInstallment:
    """Pending installment annotated for the dashboard"""

    installment_id: str
    debt_id: str
    number: int
    amount: Decimal
    due_date: date
    debtor_name: Optional[str]
    project_name: Optional[str]


@dataclass
class MonthlyBucket:
    """Installment amounts due in one calendar month"""

    month: int
    label: str
    amount: Decimal


@dataclass
class DashboardSummary:
    """Read-side aggregations over the whole workspace"""

    total_receivable: Decimal
    total_received: Decimal
    total_pending: Decimal
    average_ticket: Decimal
    debtor_count: int
    upcoming: List[UpcomingInstallment]
    monthly_forecast: List[MonthlyBucket]
    status_distribution: Dict[DebtStatus, int]


@dataclass
class IdentitySession:
    """Authenticated operator session issued by the identity provider"""

    access_token: str
    refresh_token: Optional[str]
    expires_at: Optional[datetime]
    user_id: str
    email: Optional[str]

    def is_valid(self, now: datetime) -> bool:
        """A session without an expiry is trusted until the provider rejects it"""
        return self.expires_at is None or now < self.expires_at


@dataclass
class Workspace:
    """Snapshot produced by the initial load (debtors, projects, debts with installments)"""

    debtors: list = field(default_factory=list)
    projects: list = field(default_factory=list)
    debts: list = field(default_factory=list)

    def debtor_names(self) -> Dict[str, str]:
        return {d.id: d.name for d in self.debtors}

    def project_names(self) -> Dict[str, str]:
        return {p.id: p.name for p in self.projects}
