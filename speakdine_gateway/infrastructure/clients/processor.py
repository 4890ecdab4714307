"""Stripe client for sessions, saved cards, payment intents and connected accounts"""

import logging
from typing import Any, Dict, List, Optional
import stripe
from speakdine_gateway.config import settings
from speakdine_gateway.domain.exceptions import (
    PaymentDeclinedError,
    ProcessorError,
    ProcessorNotConfiguredError,
)
from speakdine_gateway.domain.models import SettlementBreakdown
from speakdine_gateway.infrastructure.observability.metrics import processor_failures_counter

logger = logging.getLogger(__name__)


class ProcessorClient:
    """
    Thin wrapper over stripe.StripeClient.

    Every SDK error is translated into a domain exception tagged with the
    operation name. Calls are made once; nothing is retried.
    """

    def __init__(
        self,
        api_key: str | None = None,
        app_base_url: str | None = None,
        client: Optional[stripe.StripeClient] = None,
    ):
        self.app_base_url = (app_base_url or settings.app_base_url).rstrip("/")

        if client is not None:
            self.client = client
            return

        api_key = api_key or settings.stripe_secret_key
        if not api_key:
            raise ProcessorNotConfiguredError("STRIPE_SECRET_KEY is not configured", "init")
        self.client = stripe.StripeClient(api_key)

    def _call(self, operation: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        """Invoke an SDK method, converting Stripe errors to domain errors"""
        try:
            return func(*args, **kwargs)
        except stripe.CardError as e:
            processor_failures_counter.labels(operation=operation).inc()
            raise PaymentDeclinedError(
                e.user_message or "Card was declined",
                operation,
                decline_code=getattr(e.error, "decline_code", None),
            ) from e
        except stripe.StripeError as e:
            processor_failures_counter.labels(operation=operation).inc()
            logger.error(f"Stripe {operation} failed: {e}", extra={"operation": operation})
            raise ProcessorError(e.user_message or str(e), operation) from e

    # Customers and saved cards

    def create_customer(self, email: str, user_id: str, name: str | None = None) -> str:
        """Create a processor customer and return its id"""
        params: Dict[str, Any] = {"email": email, "metadata": {"firebaseUid": user_id}}
        if name:
            params["name"] = name
        customer = self._call("create_customer", self.client.customers.create, params=params)
        return customer.id

    def create_setup_session(self, customer_id: str) -> Dict[str, str]:
        """Checkout session in setup mode: saves a card without charging"""
        session = self._call(
            "create_setup_session",
            self.client.checkout.sessions.create,
            params={
                "mode": "setup",
                "customer": customer_id,
                "success_url": f"{self.app_base_url}/#/card-saved",
                "cancel_url": f"{self.app_base_url}/#/card-save-cancel",
                "payment_method_types": ["card"],
            },
        )
        return {"url": session.url, "session_id": session.id}

    def list_saved_cards(self, customer_id: str) -> List[Dict[str, Any]]:
        """Cards attached to a customer"""
        methods = self._call(
            "list_saved_cards",
            self.client.payment_methods.list,
            params={"customer": customer_id, "type": "card"},
        )
        return [
            {
                "id": pm.id,
                "brand": pm.card.brand,
                "last4": pm.card.last4,
                "exp_month": pm.card.exp_month,
                "exp_year": pm.card.exp_year,
            }
            for pm in methods.data
        ]

    def detach_saved_card(self, payment_method_id: str) -> None:
        """Remove a saved card from its customer"""
        self._call("detach_saved_card", self.client.payment_methods.detach, payment_method_id)

    # Payments

    def create_checkout_session(
        self,
        order_id: str,
        line_items: List[Dict[str, Any]],
        currency: str,
        breakdown: SettlementBreakdown,
        customer_id: str | None = None,
        destination_account_id: str | None = None,
    ) -> Dict[str, str]:
        """
        Payment-mode checkout session for the order lines plus a surcharge line.

        With a destination account the platform take is retained as the
        application fee and the rest transfers to the merchant.

        Args:
            line_items: [{"name", "unit_amount", "quantity"}] in subunits
            breakdown: Settlement computed for this order
        """
        items = [
            {
                "price_data": {
                    "currency": currency,
                    "product_data": {"name": item["name"]},
                    "unit_amount": item["unit_amount"],
                },
                "quantity": item["quantity"],
            }
            for item in line_items
        ]
        if breakdown.processing_fee_paisa > 0:
            items.append(
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": "Processing fee"},
                        "unit_amount": breakdown.processing_fee_paisa,
                    },
                    "quantity": 1,
                }
            )

        params: Dict[str, Any] = {
            "mode": "payment",
            "line_items": items,
            "success_url": (
                f"{self.app_base_url}/#/payment-success"
                f"?session_id={{CHECKOUT_SESSION_ID}}&order_id={order_id}"
            ),
            "cancel_url": f"{self.app_base_url}/#/payment-cancel?order_id={order_id}",
            "metadata": _settlement_metadata(order_id, breakdown),
        }
        if customer_id:
            params["customer"] = customer_id
        if destination_account_id:
            params["payment_intent_data"] = {
                "application_fee_amount": breakdown.total_platform_take_paisa,
                "transfer_data": {"destination": destination_account_id},
            }

        session = self._call("create_checkout_session", self.client.checkout.sessions.create, params=params)
        return {"url": session.url, "session_id": session.id}

    def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        """Current status of a checkout session"""
        session = self._call("retrieve_checkout_session", self.client.checkout.sessions.retrieve, session_id)
        return {
            "session_id": session.id,
            "status": session.status,
            "payment_status": session.payment_status,
            "amount_total": session.amount_total,
            "order_id": (session.metadata or {}).get("orderId"),
        }

    def charge_saved_card(
        self,
        customer_id: str,
        payment_method_id: str,
        order_id: str,
        currency: str,
        breakdown: SettlementBreakdown,
        destination_account_id: str | None = None,
    ) -> Dict[str, Any]:
        """Off-session, immediately confirmed charge of the gross amount"""
        params: Dict[str, Any] = {
            "amount": breakdown.gross_charge_paisa,
            "currency": currency,
            "customer": customer_id,
            "payment_method": payment_method_id,
            "off_session": True,
            "confirm": True,
            "metadata": _settlement_metadata(order_id, breakdown),
        }
        if destination_account_id:
            params["application_fee_amount"] = breakdown.total_platform_take_paisa
            params["transfer_data"] = {"destination": destination_account_id}

        intent = self._call("charge_saved_card", self.client.payment_intents.create, params=params)
        return {
            "success": intent.status == "succeeded",
            "payment_intent_id": intent.id,
            "status": intent.status,
        }

    # Connected merchant accounts

    def create_connected_account(self, email: str, country: str, merchant_id: str) -> str:
        """Express account that receives order payouts"""
        account = self._call(
            "create_connected_account",
            self.client.accounts.create,
            params={
                "type": "express",
                "country": country,
                "email": email,
                "capabilities": {
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                "metadata": {"restaurantId": merchant_id},
            },
        )
        return account.id

    def create_account_link(self, account_id: str) -> str:
        """Hosted onboarding URL for a connected account"""
        link = self._call(
            "create_account_link",
            self.client.account_links.create,
            params={
                "account": account_id,
                "refresh_url": f"{self.app_base_url}/#/connect-refresh?account_id={account_id}",
                "return_url": f"{self.app_base_url}/#/connect-return?account_id={account_id}",
                "type": "account_onboarding",
            },
        )
        return link.url

    def retrieve_account(self, account_id: str) -> Dict[str, Any]:
        """Onboarding and payout readiness of a connected account"""
        account = self._call("retrieve_account", self.client.accounts.retrieve, account_id)
        return {
            "account_id": account.id,
            "charges_enabled": bool(account.charges_enabled),
            "payouts_enabled": bool(account.payouts_enabled),
            "details_submitted": bool(account.details_submitted),
        }


def _settlement_metadata(order_id: str, breakdown: SettlementBreakdown) -> Dict[str, str]:
    """Stripe metadata values must be strings"""
    return {
        "orderId": order_id,
        "processingFeePaisa": str(breakdown.processing_fee_paisa),
        "normalFeePaisa": str(breakdown.platform_commission_paisa),
        "debtRecoveredPaisa": str(breakdown.debt_recovered_paisa),
        "restaurantAmountPaisa": str(breakdown.merchant_payout_paisa),
    }
