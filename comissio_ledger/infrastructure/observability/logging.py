"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from comissio_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_payment_toggled(
    debt_id: str,
    installment_id: str,
    installment_status: str,
    previous_debt_status: str,
    debt_status: str,
) -> None:
    """Log structured payment confirmation/reversal for auditing"""
    logging.info(
        "Installment payment toggled",
        extra={
            "debt_id": debt_id,
            "installment_id": installment_id,
            "step": "payment_toggle",
            "installment_status": installment_status,
            "previous_debt_status": previous_debt_status,
            "debt_status": debt_status,
        },
    )


def log_debt_created(
    request_id: str,
    debt_id: str,
    commission_value: str,
    installment_count: int,
) -> None:
    """Log structured debt creation outcome"""
    logging.info(
        "Debt created",
        extra={
            "request_id": request_id,
            "debt_id": debt_id,
            "step": "debt_created",
            "commission_value": commission_value,
            "installment_count": installment_count,
        },
    )
