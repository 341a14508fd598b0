"""Installment schedule generation for commission debts"""

from datetime import date
from decimal import Decimal
from typing import List

from comissio_ledger.domain.exceptions import InvalidScheduleError
from comissio_ledger.domain.models import ScheduledInstallment
from comissio_ledger.utils.date_utils import add_months
from comissio_ledger.utils.money import Number, floor_cents, quantize_cents, to_decimal


def generate_installment_schedule(
    commission_value: Number,
    count: int,
    start_date: date,
) -> List[ScheduledInstallment]:
    """
    Split a commission value into monthly installments.

    Requirements:
    - Exactly `count` installments numbered 1..count
    - Installment i is due on start_date + (i - 1) calendar months; days past
      the end of a shorter month clamp to its last day
    - Base amount is commission_value / count rounded down to the cent; the
      last installment absorbs the remainder so the total is exact
    - Every installment starts pending with no paid timestamp
    - Negative commission values are rejected along with non-finite ones;
      zero is allowed and yields an all-zero schedule

    Example:
        1000.00 / 3 -> [333.33, 333.33, 333.34]

    Raises:
        InvalidScheduleError: count < 1, or commission value not finite or negative
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidScheduleError(f"Installment count must be an integer >= 1, got {count!r}")

    try:
        value = to_decimal(commission_value)
    except ValueError as e:
        raise InvalidScheduleError(str(e)) from e
    if not value.is_finite():
        raise InvalidScheduleError(f"Commission value must be finite, got {commission_value!r}")
    if value < 0:
        raise InvalidScheduleError(f"Commission value must not be negative, got {commission_value!r}")

    total = quantize_cents(value)
    base_amount = floor_cents(total / count)
    remainder = total - base_amount * count

    installments = []
    for i in range(count):
        amount = base_amount + (remainder if i == count - 1 else Decimal("0"))
        installments.append(
            ScheduledInstallment(
                number=i + 1,
                due_date=add_months(start_date, i),
                amount=amount,
            )
        )

    return installments
