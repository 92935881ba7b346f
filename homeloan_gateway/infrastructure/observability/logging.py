"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from homeloan_gateway.config import settings


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


def log_registration_event(
    request_id: str,
    registration_id: str,
    user_id: str,
    from_status: str | None,
    to_status: str,
    duration_ms: float,
) -> None:
    """Log a registration submission or admin decision"""
    logging.info(
        "Registration status changed",
        extra={
            "request_id": request_id,
            "registration_id": registration_id,
            "user_id": user_id,
            "step": "registration_submitted" if from_status is None else "registration_decided",
            "from_status": from_status,
            "to_status": to_status,
            "duration_ms": duration_ms,
        },
    )


def log_application_event(
    request_id: str,
    application_id: str,
    applicant_id: str,
    from_status: str | None,
    to_status: str,
    duration_ms: float,
    monthly_payment: float | None = None,
) -> None:
    """Log a loan application submission or status change"""
    logging.info(
        "Loan application status changed",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "applicant_id": applicant_id,
            "step": "application_submitted" if from_status is None else "application_status_changed",
            "from_status": from_status,
            "to_status": to_status,
            "monthly_payment": monthly_payment,
            "duration_ms": duration_ms,
        },
    )
