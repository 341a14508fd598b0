"""Data access layer for debtors, projects, debts and installments"""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Iterator, List, Optional, Type

from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError

from comissio_ledger.domain.exceptions import (
    ConstraintViolationError,
    NotFoundError,
    StoreError,
    StoreUnavailableError,
    VersionConflictError,
)
from comissio_ledger.domain.installments import generate_installment_schedule
from comissio_ledger.domain.models import DebtStatus
from comissio_ledger.infrastructure.database.models import Base, Debt, Debtor, Installment, Project
from comissio_ledger.utils.money import commission_for, quantize_cents, to_decimal


@contextmanager
def store_errors(db: Optional[Session] = None, constraint_message: Optional[str] = None) -> Iterator[None]:
    """
    Translate SQLAlchemy failures into domain store errors.

    Rolls the session back first so no half-applied state survives the error.
    """
    try:
        yield
    except SQLAlchemyError as e:
        if db is not None:
            db.rollback()
        if isinstance(e, IntegrityError):
            raise ConstraintViolationError(constraint_message or "Operation blocked by a store constraint") from e
        if isinstance(e, StaleDataError):
            raise VersionConflictError("Record was modified by another writer") from e
        if isinstance(e, (OperationalError, InterfaceError)) or (
            isinstance(e, DBAPIError) and e.connection_invalidated
        ):
            raise StoreUnavailableError("Record store unreachable; check the connection and retry") from e
        raise StoreError(f"Record store error: {e.__class__.__name__}") from e


def commit(db: Session) -> None:
    """Commit the unit of work, translating store failures"""
    with store_errors(db):
        db.commit()


class CollectionRepository:
    """Generic list/get/insert/update/delete over one collection"""

    model: Type[Base]
    label: str = "record"
    updatable_fields: tuple = ()
    default_order: Optional[str] = None
    referenced_message: Optional[str] = None

    def __init__(self, db: Session):
        self.db = db

    def list_all(self, order_by: Optional[str] = None) -> List[Any]:
        """Fetch every record, optionally ordered by a named column"""
        field = order_by or self.default_order
        with store_errors(self.db):
            query = self.db.query(self.model)
            if field:
                query = query.order_by(getattr(self.model, field))
            return query.all()

    def get(self, record_id: str) -> Any:
        with store_errors(self.db):
            record = self.db.get(self.model, record_id)
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} {record_id} not found")
        return record

    def create(self, **fields: Any) -> Any:
        """Insert one record and return it with its store-assigned id"""
        record = self.model(**fields)
        with store_errors(self.db):
            self.db.add(record)
            self.db.flush()  # Get ID without committing
        return record

    def update(self, record_id: str, **fields: Any) -> Any:
        """Apply a partial update; unknown field names are rejected"""
        unknown = set(fields) - set(self.updatable_fields)
        if unknown:
            raise ValueError(f"Cannot update {self.label} fields: {', '.join(sorted(unknown))}")

        record = self.get(record_id)
        for name, value in fields.items():
            setattr(record, name, value)
        with store_errors(self.db):
            self.db.flush()
        return record

    def delete(self, record_id: str) -> None:
        """Delete by id; the store rejects the delete while other records reference it"""
        record = self.get(record_id)
        with store_errors(self.db, constraint_message=self.referenced_message):
            self.db.delete(record)
            self.db.flush()


class DebtorRepository(CollectionRepository):
    """Repository for debtors"""

    model = Debtor
    label = "debtor"
    updatable_fields = ("name", "tax_id", "email", "phone")
    default_order = "name"
    referenced_message = "Debtor is linked to existing debts and cannot be deleted"


class ProjectRepository(CollectionRepository):
    """Repository for projects"""

    model = Project
    label = "project"
    updatable_fields = ("name", "tower", "unit", "vgv")
    default_order = "name"
    referenced_message = "Project is linked to existing debts and cannot be deleted"


class InstallmentRepository(CollectionRepository):
    """Repository for installments"""

    model = Installment
    label = "installment"
    updatable_fields = ()  # status and paid_at change only through PaymentService
    default_order = "due_date"

    def list_for_debt(self, debt_id: str) -> List[Installment]:
        with store_errors(self.db):
            return (
                self.db.query(Installment)
                .filter(Installment.debt_id == debt_id)
                .order_by(Installment.number)
                .all()
            )


class DebtRepository(CollectionRepository):
    """Repository for debts and their installment schedules"""

    model = Debt
    label = "debt"
    updatable_fields = ()  # status is a cache of the rollup
    default_order = "created_at"

    def list_with_installments(self) -> List[Debt]:
        """Fetch debts joined with installments, newest first"""
        with store_errors(self.db):
            return (
                self.db.query(Debt)
                .options(selectinload(Debt.installments))
                .order_by(Debt.created_at.desc())
                .all()
            )

    def get_with_installments(self, debt_id: str) -> Debt:
        with store_errors(self.db):
            debt = (
                self.db.query(Debt)
                .options(selectinload(Debt.installments))
                .filter(Debt.id == debt_id)
                .first()
            )
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    def get_for_update(self, debt_id: str) -> Debt:
        """Lock the debt row so concurrent toggles serialize their status rollup"""
        with store_errors(self.db):
            debt = self.db.query(Debt).filter(Debt.id == debt_id).with_for_update().first()
        if debt is None:
            raise NotFoundError(f"Debt {debt_id} not found")
        return debt

    def create_with_schedule(
        self,
        debtor_id: str,
        project_id: str,
        commission_rate: Decimal,
        installment_count: int,
        start_date: date,
    ) -> Debt:
        """
        Create a debt and its installment schedule in one unit of work.

        total_value is copied from the project's VGV and commission_value is
        fixed here; neither is recomputed if the project or rate changes later.
        """
        DebtorRepository(self.db).get(debtor_id)
        project = ProjectRepository(self.db).get(project_id)

        total_value = quantize_cents(project.vgv)
        rate = to_decimal(commission_rate)
        commission_value = commission_for(total_value, rate)
        schedule = generate_installment_schedule(commission_value, installment_count, start_date)

        db_debt = Debt(
            debtor_id=debtor_id,
            project_id=project_id,
            total_value=total_value,
            commission_rate=rate,
            commission_value=commission_value,
            installment_count=installment_count,
            start_date=start_date,
            status=DebtStatus.OPEN.value,
        )
        for inst in schedule:
            db_debt.installments.append(
                Installment(
                    number=inst.number,
                    amount=inst.amount,
                    due_date=inst.due_date,
                    status=inst.status.value,
                    paid_at=inst.paid_at,
                )
            )

        with store_errors(self.db):
            self.db.add(db_debt)
            self.db.flush()
        return db_debt
