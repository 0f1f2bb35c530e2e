"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from branq_scoring.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_score(
    request_id: str,
    wallet_address: str,
    overall_score: int,
    band: str,
    duration_ms: float,
    factors_used: int,
) -> None:
    """Log structured scoring outcome for analysis"""
    logging.info(
        "Score completed",
        extra={
            "request_id": request_id,
            "wallet_address": wallet_address,
            "step": "score_complete",
            "overall_score": overall_score,
            "band": band,
            "factors_used": factors_used,
            "duration_ms": duration_ms,
        },
    )
