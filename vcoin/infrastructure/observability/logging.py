"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "vcoin-api"


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


def log_login_attempt(
    request_id: str,
    class_id: int,
    registro: int,
    success: bool,
    duration_ms: float,
) -> None:
    """Log structured student login outcome"""
    logging.log(
        logging.INFO if success else logging.WARNING,
        "Student login succeeded" if success else "Student login failed",
        extra={
            "request_id": request_id,
            "class_id": class_id,
            "registro": registro,
            "step": "student_login",
            "outcome": "success" if success else "failure",
            "duration_ms": duration_ms,
        },
    )


def log_throttle_event(identifier: str, attempts: int, delay_ms: int) -> None:
    """Log the penalty applied to a failed login"""
    logging.info(
        "Login throttled",
        extra={
            "identifier": identifier,
            "attempts": attempts,
            "delay_ms": delay_ms,
        },
    )
