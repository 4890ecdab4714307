"""Checkout session endpoints - hosted payment pages for line-item orders"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from speakdine_gateway.api.v1.schemas import (
    CheckoutSessionRequest,
    SessionResponse,
    SessionStatusResponse,
    SettlementSchema,
)
from speakdine_gateway.api.dependencies import get_fee_schedule, get_processor_client, get_request_id
from speakdine_gateway.config import settings
from speakdine_gateway.domain.models import FeeSchedule, SurchargeBasis
from speakdine_gateway.domain.settlement import compute_single_payee_charge, compute_split_settlement, order_total
from speakdine_gateway.domain.exceptions import AmountOverflowError, InvalidAmountError, ProcessorError
from speakdine_gateway.infrastructure.clients.processor import ProcessorClient
from speakdine_gateway.infrastructure.observability.metrics import record_settlement
from speakdine_gateway.infrastructure.observability.logging import log_settlement

router = APIRouter()


@router.post("/checkout-sessions", response_model=SessionResponse)
def create_checkout_session(
    request_body: CheckoutSessionRequest,
    request: Request,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    processor: ProcessorClient = Depends(get_processor_client),
):
    """
    Create a payment-mode checkout session for an order.

    Flow:
    1. Total the line items
    2. Compute surcharge (and split, when paying a connected restaurant)
    3. Create session with the items plus a processing-fee line
    4. Return session URL/id with the settlement
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Order total from validated lines
        total = order_total(item.to_order_line() for item in request_body.items)

        # 2. Surcharge from the pre-split order total
        if request_body.restaurant_account_id:
            breakdown = compute_split_settlement(
                total,
                debt_paisa=request_body.debt_paisa,
                commission_rate=request_body.commission_rate,
                schedule=schedule,
                basis=SurchargeBasis.ORDER_TOTAL,
            )
        else:
            breakdown = compute_single_payee_charge(total, schedule=schedule)

        # 3. Hosted session
        session = processor.create_checkout_session(
            order_id=request_body.order_id,
            line_items=[
                {"name": item.name, "unit_amount": item.price_in_paisa, "quantity": item.quantity}
                for item in request_body.items
            ],
            currency=request_body.currency or settings.default_currency,
            breakdown=breakdown,
            customer_id=request_body.customer_id,
            destination_account_id=request_body.restaurant_account_id,
        )

    except (InvalidAmountError, AmountOverflowError) as e:
        logging.warning(f"Rejected amount: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": request_id, "operation": e.operation})
        raise HTTPException(status_code=502, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    record_settlement("checkout", breakdown)
    log_settlement(request_id, request_body.order_id, "checkout", breakdown, duration_ms)

    return SessionResponse(
        url=session["url"],
        session_id=session["session_id"],
        settlement=SettlementSchema.from_breakdown(breakdown),
    )


@router.get("/checkout-sessions/{session_id}", response_model=SessionStatusResponse)
def get_checkout_session(
    session_id: str,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """Look up a session after the client returns from the hosted page"""
    try:
        session = processor.retrieve_checkout_session(session_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return SessionStatusResponse(**session)
