"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from proximity_gateway.config import settings


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


def log_proximity_check(
    user_id: str,
    is_nearby: bool,
    location_id: Optional[str],
    distance_m: Optional[float],
    duration_ms: float,
) -> None:
    """Log structured outcome of a live location update"""
    logging.info(
        "Proximity check completed",
        extra={
            "user_id": user_id,
            "step": "proximity_check",
            "is_nearby": is_nearby,
            "location_id": location_id,
            "distance_m": distance_m,
            "duration_ms": duration_ms,
        },
    )


def log_notification(user_id: str, location_id: str, outcome: str) -> None:
    """Log what happened to a location notification (sent, failed, cooldown, disabled)"""
    level = logging.WARNING if outcome == "failed" else logging.INFO
    logging.log(
        level,
        "Location notification %s",
        outcome,
        extra={
            "user_id": user_id,
            "step": "location_notification",
            "location_id": location_id,
            "notification_outcome": outcome,
        },
    )
