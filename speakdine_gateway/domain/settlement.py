"""Settlement engine - processor surcharge and platform/merchant split"""

import math
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Iterable
from speakdine_gateway.domain.models import FeeSchedule, OrderLine, SettlementBreakdown, SurchargeBasis
from speakdine_gateway.domain.money import Paisa, check_bounds, to_paisa, to_percent, to_quantity

DEFAULT_FEE_SCHEDULE = FeeSchedule()


def validate_fee_schedule(schedule: FeeSchedule) -> FeeSchedule:
    """Reject schedules that would produce negative or unbounded fees"""
    # A 100% processor rate leaves nothing to gross up from
    to_percent(schedule.processor_rate_percent, "processor_rate_percent", inclusive=False)
    to_paisa(schedule.processor_fixed_fee_paisa, "processor_fixed_fee_paisa")
    to_percent(schedule.commission_rate_percent, "commission_rate_percent")
    return schedule


def order_total(lines: Iterable[OrderLine]) -> Paisa:
    """Sum unit_price_paisa * quantity over all lines"""
    total = 0
    for i, line in enumerate(lines):
        price = to_paisa(line.unit_price_paisa, f"items[{i}].unit_price_paisa")
        quantity = to_quantity(line.quantity, f"items[{i}].quantity")
        total += price * quantity
    return check_bounds("order_total", total)


def compute_processor_surcharge(net_amount: int, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> Paisa:
    """
    Amount to add to a charge so that `net_amount` survives the processor's cut.

    The processor keeps p% of the gross charge plus a fixed fee f, so the
    gross must satisfy gross * (1 - p/100) - f >= net:

        gross = ceil((net + f) / (1 - p/100))
        surcharge = gross - net

    Computed with exact fractions and rounded up to the next whole subunit,
    so the platform is never short by a fractional paisa. The result is
    non-negative and non-decreasing in net_amount.

    Example (defaults p=2.9, f=1100):
        net 100000 -> ceil(101100 / 0.971) = 104120 -> surcharge 4120
        net 0      -> ceil(1100 / 0.971)   = 1133   -> surcharge 1133
    """
    validate_fee_schedule(schedule)
    net = to_paisa(net_amount, "net_amount")

    keep_ratio = 1 - Fraction(schedule.processor_rate_percent) / 100
    gross = math.ceil((net + schedule.processor_fixed_fee_paisa) / keep_ratio)
    check_bounds("gross_charge", gross)

    return Paisa(gross - net)


def compute_platform_commission(order_total_paisa: int, commission_rate: Decimal) -> Paisa:
    """Commission on the order total, rounded half-up to a whole subunit"""
    commission = (Decimal(order_total_paisa) * commission_rate / 100).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return Paisa(int(commission))


def compute_split_settlement(
    order_total_paisa: int,
    debt_paisa: int = 0,
    commission_rate: Decimal | float | int | None = None,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    basis: SurchargeBasis = SurchargeBasis.ORDER_TOTAL,
) -> SettlementBreakdown:
    """
    Divide a charge collected for a connected merchant account.

    Requirements:
    - Processor surcharge is added on top; it never reduces the merchant share
    - Platform commission = round_half_up(order_total * rate / 100)
    - Debt recovery is capped at order_total - commission, never negative
    - merchant_payout + commission + debt_recovered == order_total exactly

    Args:
        order_total_paisa: Face value of the order (sum of line items)
        debt_paisa: Outstanding platform debt owed by the merchant
        commission_rate: Percentage override; schedule rate when None
        schedule: Processor and platform rates
        basis: ORDER_TOTAL grosses up the surcharge from the order total
            (checkout); DEBT_ADJUSTED grosses it up from the amount left after
            debt recovery (saved-card charge)

    Returns:
        SettlementBreakdown with total_platform_take_paisa as the
        application fee retained from the gross charge

    Raises:
        InvalidAmountError: negative, fractional or non-numeric input
        AmountOverflowError: total beyond the safe integer range
    """
    validate_fee_schedule(schedule)
    total = to_paisa(order_total_paisa, "order_total_paisa")
    debt = to_paisa(debt_paisa, "debt_paisa")
    rate = (
        schedule.commission_rate_percent
        if commission_rate is None
        else to_percent(commission_rate, "commission_rate")
    )

    commission = compute_platform_commission(total, rate)

    # Recover at most what is left of this order after our commission
    recoverable = total - commission
    debt_recovered = max(0, min(debt, recoverable))

    if total == 0 and schedule.waive_surcharge_on_zero_total:
        processing_fee = Paisa(0)
    elif basis is SurchargeBasis.DEBT_ADJUSTED:
        processing_fee = compute_processor_surcharge(total - debt_recovered, schedule)
    else:
        processing_fee = compute_processor_surcharge(total, schedule)

    return SettlementBreakdown(
        order_total_paisa=total,
        processing_fee_paisa=processing_fee,
        platform_commission_paisa=commission,
        debt_recovered_paisa=Paisa(debt_recovered),
        total_platform_take_paisa=Paisa(commission + debt_recovered + processing_fee),
        merchant_payout_paisa=Paisa(total - commission - debt_recovered),
    )


def compute_single_payee_charge(
    order_total_paisa: int,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> SettlementBreakdown:
    """
    Surcharge for a charge with no connected account.

    No commission or debt split: the platform is the only payee, so the
    breakdown carries the surcharge and passes the order total through.
    """
    validate_fee_schedule(schedule)
    total = to_paisa(order_total_paisa, "order_total_paisa")

    if total == 0 and schedule.waive_surcharge_on_zero_total:
        processing_fee = Paisa(0)
    else:
        processing_fee = compute_processor_surcharge(total, schedule)

    return SettlementBreakdown(
        order_total_paisa=total,
        processing_fee_paisa=processing_fee,
        platform_commission_paisa=Paisa(0),
        debt_recovered_paisa=Paisa(0),
        total_platform_take_paisa=processing_fee,
        merchant_payout_paisa=total,
    )
