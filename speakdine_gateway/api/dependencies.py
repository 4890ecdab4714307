"""Dependency injection for FastAPI endpoints"""

import logging
from fastapi import HTTPException, Request
from speakdine_gateway.config import settings
from speakdine_gateway.domain.exceptions import ProcessorNotConfiguredError
from speakdine_gateway.domain.models import FeeSchedule
from speakdine_gateway.infrastructure.clients.processor import ProcessorClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_fee_schedule() -> FeeSchedule:
    """Fee schedule built from current settings"""
    return FeeSchedule(
        processor_rate_percent=settings.processor_rate_percent,
        processor_fixed_fee_paisa=settings.processor_fixed_fee_paisa,
        commission_rate_percent=settings.commission_rate_percent,
        waive_surcharge_on_zero_total=settings.waive_surcharge_on_zero_total,
    )


def get_processor_client() -> ProcessorClient:
    """Provide payment processor client instance"""
    try:
        return ProcessorClient()
    except ProcessorNotConfiguredError as e:
        logging.error(f"Processor unavailable: {e}")
        raise HTTPException(status_code=503, detail="Payment processor not configured")
