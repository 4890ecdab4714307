"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from speakdine_gateway.domain.money import Paisa


@dataclass(frozen=True)
class OrderLine:
    """Single item on an order"""

    name: str
    unit_price_paisa: Paisa
    quantity: int


@dataclass(frozen=True)
class FeeSchedule:
    """
    Processor and platform rates used by the settlement calculator.

    processor_rate_percent and processor_fixed_fee_paisa describe what the
    processor deducts from every gross charge; commission_rate_percent is
    the platform's cut of the order total.
    """

    processor_rate_percent: Decimal = Decimal("2.9")
    processor_fixed_fee_paisa: int = 1100
    commission_rate_percent: Decimal = Decimal("5")
    waive_surcharge_on_zero_total: bool = True


class SurchargeBasis(str, Enum):
    """Amount the processor surcharge is grossed up from"""

    ORDER_TOTAL = "order_total"  # line-item checkout
    DEBT_ADJUSTED = "debt_adjusted"  # saved-card charge


@dataclass(frozen=True)
class SettlementBreakdown:
    """Output of a settlement calculation"""

    order_total_paisa: Paisa
    processing_fee_paisa: Paisa
    platform_commission_paisa: Paisa
    debt_recovered_paisa: Paisa
    total_platform_take_paisa: Paisa
    merchant_payout_paisa: Paisa

    @property
    def gross_charge_paisa(self) -> Paisa:
        """Amount billed to the payer's instrument"""
        return Paisa(self.order_total_paisa + self.processing_fee_paisa)
