"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger

from spendwise.config import settings
from spendwise.domain.models import Nudge


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
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_insights_generated(
    request_id: str,
    user_id: str,
    endpoint: str,
    nudges: List[Nudge],
    duration_ms: float,
) -> None:
    """Log structured insight outcome for analysis"""
    logging.info(
        "Insights generated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "insights_complete",
            "endpoint": endpoint,
            "nudge_count": len(nudges),
            "nudge_kinds": [n.kind.value for n in nudges],
            "duration_ms": duration_ms,
        },
    )
