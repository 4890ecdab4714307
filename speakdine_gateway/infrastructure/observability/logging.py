"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from speakdine_gateway.domain.models import SettlementBreakdown
from speakdine_gateway.domain.money import format_major_units


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "speakdine-gateway", **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "speakdine-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement(
    request_id: str,
    order_id: str,
    path: str,
    breakdown: SettlementBreakdown,
    duration_ms: float,
) -> None:
    """Log structured settlement outcome for reconciliation"""
    logging.info(
        "Settlement computed",
        extra={
            "request_id": request_id,
            "order_id": order_id,
            "step": "settlement_complete",
            "path": path,
            "order_total_paisa": breakdown.order_total_paisa,
            "gross_charge": format_major_units(breakdown.gross_charge_paisa),
            "processing_fee_paisa": breakdown.processing_fee_paisa,
            "platform_commission_paisa": breakdown.platform_commission_paisa,
            "debt_recovered_paisa": breakdown.debt_recovered_paisa,
            "merchant_payout_paisa": breakdown.merchant_payout_paisa,
            "duration_ms": duration_ms,
        },
    )
