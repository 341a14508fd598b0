"""Installment payment toggle - the only state transition in the ledger"""

import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from comissio_ledger.domain.exceptions import DomainException, NotFoundError, VersionConflictError
from comissio_ledger.domain.ledger import rollup
from comissio_ledger.domain.models import InstallmentStatus
from comissio_ledger.infrastructure.database.models import Debt
from comissio_ledger.infrastructure.database.repositories import (
    DebtRepository,
    InstallmentRepository,
    commit,
    store_errors,
)
from comissio_ledger.infrastructure.observability.logging import log_payment_toggled
from comissio_ledger.infrastructure.observability.metrics import record_toggle
from comissio_ledger.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class PaymentService:
    """Confirms or reverses installment payments and keeps the debt status in step"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def toggle_payment(
        self,
        debt_id: str,
        installment_id: str,
        expected_version: Optional[int] = None,
    ) -> Debt:
        """
        Flip one installment between pending and paid, then persist the new debt status.

        Flow (single transaction):
        1. Lock the debt row
        2. pending -> paid stamps paid_at = now; paid -> pending clears it
        3. Flush with the installment's version check
        4. Recompute the rollup over all installments and store the debt status
        5. Commit both writes together

        Conflict policy: optimistic versioning. A stale `expected_version`, or a
        concurrent writer bumping the version before our flush, raises
        VersionConflictError and nothing is written.
        """
        debts = DebtRepository(self.db)
        installments = InstallmentRepository(self.db)

        try:
            debt = debts.get_for_update(debt_id)
            installment = installments.get(installment_id)
            if installment.debt_id != debt.id:
                raise NotFoundError(f"Installment {installment_id} does not belong to debt {debt_id}")
            if expected_version is not None and installment.version != expected_version:
                raise VersionConflictError(
                    f"Installment {installment_id} is at version {installment.version}, "
                    f"expected {expected_version}"
                )

            previous_debt_status = debt.status
            new_status = InstallmentStatus(installment.status).toggled()
            installment.status = new_status.value
            installment.paid_at = self.clock() if new_status is InstallmentStatus.PAID else None

            with store_errors(self.db):
                self.db.flush()

            result = rollup(debt, installments.list_for_debt(debt.id))
            debt.status = result.status.value
            commit(self.db)

        except DomainException:
            self.db.rollback()
            raise

        record_toggle(new_status)
        log_payment_toggled(
            debt_id=debt_id,
            installment_id=installment_id,
            installment_status=new_status.value,
            previous_debt_status=previous_debt_status,
            debt_status=result.status.value,
        )
        return debt
