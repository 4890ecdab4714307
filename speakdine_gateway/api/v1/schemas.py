"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import Annotated, Any, List, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from speakdine_gateway.domain.models import OrderLine, SettlementBreakdown, SurchargeBasis
from speakdine_gateway.domain.money import Paisa


def _reject_bool(value: Any) -> Any:
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(value, bool):
        raise ValueError("must be a number, not a boolean")
    return value


WholeNumber = Annotated[int, BeforeValidator(_reject_bool)]
Percent = Annotated[Decimal, BeforeValidator(_reject_bool)]


class CamelModel(BaseModel):
    """Accepts and emits camelCase JSON, as the mobile client sends it"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemSchema(CamelModel):
    """Single line item; prices are in currency subunits"""

    name: str = Field(..., min_length=1)
    price_in_paisa: WholeNumber = Field(..., ge=0, description="Unit price in subunits")
    quantity: WholeNumber = Field(..., ge=1)

    def to_order_line(self) -> OrderLine:
        return OrderLine(name=self.name, unit_price_paisa=Paisa(self.price_in_paisa), quantity=self.quantity)


class SplitFields(CamelModel):
    """Optional connected-account split inputs shared by payment requests"""

    restaurant_account_id: Optional[str] = Field(None, description="Connected account receiving the payout")
    debt_paisa: WholeNumber = Field(0, ge=0, description="Outstanding platform debt owed by the restaurant")
    commission_rate: Optional[Percent] = Field(None, ge=0, le=100, description="Commission percent override")


class SettlementSchema(CamelModel):
    """Computed fee and split, echoed to the caller"""

    order_total_paisa: int
    processing_fee_paisa: int
    platform_commission_paisa: int
    debt_recovered_paisa: int
    total_application_fee_paisa: int
    merchant_payout_paisa: int
    gross_charge_paisa: int

    @classmethod
    def from_breakdown(cls, breakdown: SettlementBreakdown) -> "SettlementSchema":
        return cls(
            order_total_paisa=breakdown.order_total_paisa,
            processing_fee_paisa=breakdown.processing_fee_paisa,
            platform_commission_paisa=breakdown.platform_commission_paisa,
            debt_recovered_paisa=breakdown.debt_recovered_paisa,
            total_application_fee_paisa=breakdown.total_platform_take_paisa,
            merchant_payout_paisa=breakdown.merchant_payout_paisa,
            gross_charge_paisa=breakdown.gross_charge_paisa,
        )


class QuoteRequest(SplitFields):
    """Request body for POST /v1/settlements/quote"""

    items: List[OrderItemSchema] = Field(..., min_length=1)
    basis: SurchargeBasis = Field(
        SurchargeBasis.ORDER_TOTAL,
        description="debt_adjusted quotes a saved-card charge, order_total a checkout session",
    )


class QuoteResponse(CamelModel):
    """Response for POST /v1/settlements/quote"""

    settlement: SettlementSchema


class CustomerRequest(CamelModel):
    """Request body for POST /v1/customers"""

    email: EmailStr
    user_id: str = Field(..., min_length=1)
    name: Optional[str] = None


class CustomerResponse(CamelModel):
    customer_id: str


class CheckoutSessionRequest(SplitFields):
    """Request body for POST /v1/checkout-sessions"""

    order_id: str = Field(..., min_length=1)
    items: List[OrderItemSchema] = Field(..., min_length=1)
    customer_id: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class SessionResponse(CamelModel):
    """Hosted processor session"""

    url: str
    session_id: str
    settlement: Optional[SettlementSchema] = None


class SessionStatusResponse(CamelModel):
    """Response for GET /v1/checkout-sessions/{session_id}"""

    session_id: str
    status: Optional[str] = None
    payment_status: Optional[str] = None
    amount_total: Optional[int] = None
    order_id: Optional[str] = None


class SetupSessionRequest(CamelModel):
    """Request body for POST /v1/setup-sessions"""

    customer_id: str = Field(..., min_length=1)


class SavedCardSchema(CamelModel):
    id: str
    brand: str
    last4: str
    exp_month: int
    exp_year: int


class SavedCardsResponse(CamelModel):
    cards: List[SavedCardSchema]


class DeleteCardResponse(CamelModel):
    success: bool = True


class SavedCardChargeRequest(SplitFields):
    """Request body for POST /v1/payments/saved-card"""

    customer_id: str = Field(..., min_length=1)
    payment_method_id: str = Field(..., min_length=1)
    order_id: str = Field(..., min_length=1)
    amount_in_paisa: WholeNumber = Field(..., gt=0, description="Order total in subunits, before surcharge")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class SavedCardChargeResponse(CamelModel):
    success: bool
    payment_intent_id: str
    status: str
    settlement: SettlementSchema


class AccountRequest(CamelModel):
    """Request body for POST /v1/accounts"""

    email: EmailStr
    restaurant_id: str = Field(..., min_length=1)
    country: str = Field("PK", min_length=2, max_length=2)


class AccountResponse(CamelModel):
    account_id: str
    onboarding_url: Optional[str] = None


class AccountLinkResponse(CamelModel):
    url: str


class AccountStatusResponse(CamelModel):
    """Response for GET /v1/accounts/{account_id}"""

    account_id: str
    charges_enabled: bool
    payouts_enabled: bool
    details_submitted: bool
