"""SQLAlchemy ORM models for the commission ledger tables"""

import uuid
from sqlalchemy import (
    Column,
    String,
    Numeric,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from comissio_ledger.domain.models import DebtStatus, InstallmentStatus
from comissio_ledger.utils.date_utils import utcnow

Base = declarative_base()

MONEY = Numeric(14, 2)


def new_id() -> str:
    return str(uuid.uuid4())


class Debtor(Base):
    """Person or company owing commissions"""

    __tablename__ = "debtors"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    tax_id = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Project(Base):
    """Real-estate project unit; vgv is its total sale value"""

    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(Text, nullable=False)
    tower = Column(Text, nullable=True)
    unit = Column(Text, nullable=True)
    vgv = Column(MONEY, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Debt(Base):
    """Commission owed by a debtor on a project unit"""

    __tablename__ = "debts"

    id = Column(String(36), primary_key=True, default=new_id)
    debtor_id = Column(String(36), ForeignKey("debtors.id", ondelete="RESTRICT"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="RESTRICT"), nullable=False, index=True)
    total_value = Column(MONEY, nullable=False)
    commission_rate = Column(Numeric(5, 2), nullable=False)
    commission_value = Column(MONEY, nullable=False)
    installment_count = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    # Cache of rollup(); written in the same transaction as installment changes
    status = Column(Text, nullable=False, default=DebtStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    debtor = relationship("Debtor")
    project = relationship("Project")
    installments = relationship(
        "Installment",
        back_populates="debt",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Installment.number",
    )


class Installment(Base):
    """Individual scheduled payment of a debt's commission"""

    __tablename__ = "installments"
    __table_args__ = (UniqueConstraint("debt_id", "number", name="uq_installments_debt_number"),)

    id = Column(String(36), primary_key=True, default=new_id)
    debt_id = Column(String(36), ForeignKey("debts.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    amount = Column(MONEY, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default=InstallmentStatus.PENDING.value)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False)

    debt = relationship("Debt", back_populates="installments")

    __mapper_args__ = {"version_id_col": version}
