"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from zenith_gateway.config import settings


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


def log_settlement(
    request_id: str,
    owner_id: str,
    transaction_id: str,
    transaction_type: str,
    amount: Decimal,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured settlement outcome for audit"""
    logging.info(
        "Settlement applied",
        extra={
            "request_id": request_id,
            "owner_id": owner_id,
            "transaction_id": transaction_id,
            "transaction_type": transaction_type,
            "step": "settlement_complete",
            "amount": f"{amount:.2f}",
            "new_status": status,
            "duration_ms": duration_ms,
        },
    )
