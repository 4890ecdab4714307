"""POST /v1/settlements/quote - Fee and split preview without touching the processor"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from speakdine_gateway.api.v1.schemas import QuoteRequest, QuoteResponse, SettlementSchema
from speakdine_gateway.api.dependencies import get_fee_schedule, get_request_id
from speakdine_gateway.domain.models import FeeSchedule
from speakdine_gateway.domain.settlement import compute_single_payee_charge, compute_split_settlement, order_total
from speakdine_gateway.domain.exceptions import AmountOverflowError, InvalidAmountError
from speakdine_gateway.infrastructure.observability.metrics import record_settlement
from speakdine_gateway.infrastructure.observability.logging import log_settlement

router = APIRouter()


@router.post("/settlements/quote", response_model=QuoteResponse)
def quote_settlement(
    request_body: QuoteRequest,
    request: Request,
    schedule: FeeSchedule = Depends(get_fee_schedule),
):
    """
    Compute what the payer will be charged and how it splits.

    Without restaurantAccountId the platform is the only payee and only the
    processing surcharge applies. basis=debt_adjusted previews a saved-card
    charge, which grosses up from the order total less recovered debt.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        total = order_total(item.to_order_line() for item in request_body.items)

        if request_body.restaurant_account_id:
            breakdown = compute_split_settlement(
                total,
                debt_paisa=request_body.debt_paisa,
                commission_rate=request_body.commission_rate,
                schedule=schedule,
                basis=request_body.basis,
            )
        else:
            breakdown = compute_single_payee_charge(total, schedule=schedule)

    except (InvalidAmountError, AmountOverflowError) as e:
        logging.warning(f"Rejected amount: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_settlement("quote", breakdown)
    log_settlement(request_id, "quote", "quote", breakdown, duration_ms)

    return QuoteResponse(settlement=SettlementSchema.from_breakdown(breakdown))
