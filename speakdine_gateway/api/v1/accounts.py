"""Connected restaurant account endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from speakdine_gateway.api.v1.schemas import (
    AccountLinkResponse,
    AccountRequest,
    AccountResponse,
    AccountStatusResponse,
)
from speakdine_gateway.api.dependencies import get_processor_client, get_request_id
from speakdine_gateway.domain.exceptions import ProcessorError
from speakdine_gateway.infrastructure.clients.processor import ProcessorClient

router = APIRouter()


@router.post("/accounts", response_model=AccountResponse)
def create_account(
    request_body: AccountRequest,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """
    Create a connected account for a restaurant and its onboarding link.

    Returns:
        Account id plus the hosted onboarding URL to open in the app
    """
    try:
        account_id = processor.create_connected_account(
            email=request_body.email,
            country=request_body.country.upper(),
            merchant_id=request_body.restaurant_id,
        )
        onboarding_url = processor.create_account_link(account_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return AccountResponse(account_id=account_id, onboarding_url=onboarding_url)


@router.post("/accounts/{account_id}/onboarding-link", response_model=AccountLinkResponse)
def create_onboarding_link(
    account_id: str,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    """Fresh onboarding URL; links expire after a few minutes"""
    try:
        url = processor.create_account_link(account_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return AccountLinkResponse(url=url)


@router.get("/accounts/{account_id}", response_model=AccountStatusResponse)
def get_account(
    account_id: str,
    request: Request,
    processor: ProcessorClient = Depends(get_processor_client),
):
    try:
        account = processor.retrieve_account(account_id)
    except ProcessorError as e:
        logging.error(f"Processor error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=502, detail=str(e))

    return AccountStatusResponse(**account)
