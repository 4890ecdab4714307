"""Customer, saved-card and saved-card payment endpoints"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from speakdine_gateway.api.v1.schemas import (
    CustomerRequest,
    CustomerResponse,
    DeleteCardResponse,
    SavedCardChargeRequest,
    SavedCardChargeResponse,
    SavedCardsResponse,
    SessionResponse,
    SettlementSchema,
    SetupSessionRequest,
)
from speakdine_gateway.api.dependencies import get_fee_schedule, get_processor_client, get_request_id
from speakdine_gateway.config import settings
from speakdine_gateway.domain.models import FeeSchedule, SurchargeBasis
from speakdine_gateway.domain.settlement import compute_single_payee_charge, compute_split_settlement
from speakdine_gateway.domain.exceptions import (
    AmountOverflowError,
    InvalidAmountError,
    PaymentDeclinedError,
    ProcessorError,
)
from speakdine_gateway.infrastructure.clients.processor import ProcessorClient
from speakdine_gateway.infrastructure.observability.metrics import record_settlement
from speakdine_gateway.infrastructure.observability.logging import log_settlement

router = APIRouter()


@router.post("/customers", response_model=CustomerResponse)
def create_customer(
    request_body: CustomerRequest,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """Register an app user with the processor so cards can be saved"""
    try:
        customer_id = processor.create_customer(
            email=request_body.email,
            user_id=request_body.user_id,
            name=request_body.name,
        )
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return CustomerResponse(customer_id=customer_id)


@router.post("/setup-sessions", response_model=SessionResponse)
def create_setup_session(
    request_body: SetupSessionRequest,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """Hosted page that saves a card without charging it"""
    try:
        session = processor.create_setup_session(request_body.customer_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return SessionResponse(url=session["url"], session_id=session["session_id"])


@router.get("/customers/{customer_id}/cards", response_model=SavedCardsResponse)
def list_saved_cards(
    customer_id: str,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """Cards saved for a customer"""
    try:
        cards = processor.list_saved_cards(customer_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return SavedCardsResponse(cards=cards)


@router.delete("/cards/{payment_method_id}", response_model=DeleteCardResponse)
def delete_saved_card(
    payment_method_id: str,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    try:
        processor.detach_saved_card(payment_method_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return DeleteCardResponse(success=True)


@router.post("/payments/saved-card", response_model=SavedCardChargeResponse)
def charge_saved_card(
    request_body: SavedCardChargeRequest,
    request: Request,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    processor: ProcessorClient = Depends(get_processor_client),
):
    """
    Charge a saved card off-session (voice-command orders).

    The card is charged a single surcharge-inclusive amount. When paying a
    connected restaurant the surcharge is grossed up from the order total
    less recovered debt, unlike checkout which uses the full order total.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        if request_body.restaurant_account_id:
            breakdown = compute_split_settlement(
                request_body.amount_in_paisa,
                debt_paisa=request_body.debt_paisa,
                commission_rate=request_body.commission_rate,
                schedule=schedule,
                basis=SurchargeBasis.DEBT_ADJUSTED,
            )
        else:
            breakdown = compute_single_payee_charge(request_body.amount_in_paisa, schedule=schedule)

        result = processor.charge_saved_card(
            customer_id=request_body.customer_id,
            payment_method_id=request_body.payment_method_id,
            order_id=request_body.order_id,
            currency=request_body.currency or settings.default_currency,
            breakdown=breakdown,
            destination_account_id=request_body.restaurant_account_id,
        )

    except (InvalidAmountError, AmountOverflowError) as e:
        logging.warning(f"Rejected amount: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except PaymentDeclinedError as e:
        logging.warning(
            f"Card declined: {e}",
            extra={"request_id": request_id, "decline_code": e.decline_code},
        )
        raise HTTPException(status_code=402, detail=str(e))

    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": request_id, "operation": e.operation})
        raise HTTPException(status_code=502, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_settlement("saved_card", breakdown)
    log_settlement(request_id, request_body.order_id, "saved_card", breakdown, duration_ms)

    return SavedCardChargeResponse(
        success=result["success"],
        payment_intent_id=result["payment_intent_id"],
        status=result["status"],
        settlement=SettlementSchema.from_breakdown(breakdown),
    )
