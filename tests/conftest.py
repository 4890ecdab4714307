"""Pytest fixtures for testing"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from speakdine_gateway.api.main import create_app
from speakdine_gateway.api.dependencies import get_fee_schedule, get_processor_client
from speakdine_gateway.domain.models import FeeSchedule, OrderLine
from speakdine_gateway.domain.money import Paisa
from speakdine_gateway.infrastructure.clients.processor import ProcessorClient


@pytest.fixture
def fee_schedule() -> FeeSchedule:
    """Default rates: 2.9% + Rs 11.00 processor fee, 5% commission"""
    return FeeSchedule()


@pytest.fixture
def processor() -> MagicMock:
    """Processor client double with canned responses"""
    fake = MagicMock(spec=ProcessorClient)
    fake.create_customer.return_value = "cus_test_123"
    fake.create_checkout_session.return_value = {
        "url": "https://checkout.stripe.com/c/pay/cs_test_123",
        "session_id": "cs_test_123",
    }
    fake.create_setup_session.return_value = {
        "url": "https://checkout.stripe.com/c/pay/cs_setup_123",
        "session_id": "cs_setup_123",
    }
    fake.retrieve_checkout_session.return_value = {
        "session_id": "cs_test_123",
        "status": "complete",
        "payment_status": "paid",
        "amount_total": 104120,
        "order_id": "order_42",
    }
    fake.list_saved_cards.return_value = [
        {"id": "pm_card_1", "brand": "visa", "last4": "4242", "exp_month": 12, "exp_year": 2030}
    ]
    fake.charge_saved_card.return_value = {
        "success": True,
        "payment_intent_id": "pi_test_123",
        "status": "succeeded",
    }
    fake.create_connected_account.return_value = "acct_test_123"
    fake.create_account_link.return_value = "https://connect.stripe.com/setup/e/acct_test_123"
    fake.retrieve_account.return_value = {
        "account_id": "acct_test_123",
        "charges_enabled": True,
        "payouts_enabled": False,
        "details_submitted": True,
    }
    return fake


@pytest.fixture
def client(processor: MagicMock, fee_schedule: FeeSchedule) -> TestClient:
    """Create FastAPI test client with the processor replaced"""
    app = create_app()

    app.dependency_overrides[get_processor_client] = lambda: processor
    app.dependency_overrides[get_fee_schedule] = lambda: fee_schedule
    return TestClient(app)


@pytest.fixture
def sample_order() -> list[OrderLine]:
    """Two biryanis and a raita: 2 * 450.00 + 100.00 = Rs 1000.00"""
    return [
        OrderLine(name="Chicken Biryani", unit_price_paisa=Paisa(45000), quantity=2),
        OrderLine(name="Raita", unit_price_paisa=Paisa(10000), quantity=1),
    ]
