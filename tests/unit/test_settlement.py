"""Unit tests for processor surcharge and settlement split"""

import pytest
from decimal import Decimal
from fractions import Fraction
from speakdine_gateway.domain.models import FeeSchedule, OrderLine, SurchargeBasis
from speakdine_gateway.domain.money import MAX_SAFE_PAISA
from speakdine_gateway.domain.settlement import (
    compute_platform_commission,
    compute_processor_surcharge,
    compute_single_payee_charge,
    compute_split_settlement,
    order_total,
)
from speakdine_gateway.domain.exceptions import AmountOverflowError, InvalidAmountError


def processor_keeps(gross: int, schedule: FeeSchedule) -> Fraction:
    """What the processor leaves us after its percentage and fixed fee"""
    rate = Fraction(schedule.processor_rate_percent) / 100
    return gross - gross * rate - schedule.processor_fixed_fee_paisa


NET_AMOUNTS = [0, 1, 2, 99, 100, 1133, 5000, 45000, 99999, 100000, 123457, 10_000_000, 10**12]


def test_surcharge_zero_net_amount():
    """Fixed fee alone: ceil(1100 / 0.971) = 1133"""
    assert compute_processor_surcharge(0) == 1133


def test_surcharge_rs_1000_order():
    """ceil(101100 / 0.971) = 104120, so surcharge is 4120"""
    assert compute_processor_surcharge(100000) == 4120


@pytest.mark.parametrize("net", NET_AMOUNTS)
def test_surcharge_covers_processor_fee(net: int, fee_schedule: FeeSchedule):
    """Charging net + surcharge always leaves at least net after the processor's cut"""
    gross = net + compute_processor_surcharge(net, fee_schedule)
    assert processor_keeps(gross, fee_schedule) >= net


@pytest.mark.parametrize("net", NET_AMOUNTS)
def test_surcharge_is_smallest_covering_amount(net: int, fee_schedule: FeeSchedule):
    """One paisa less would leave us short"""
    gross = net + compute_processor_surcharge(net, fee_schedule)
    assert processor_keeps(gross - 1, fee_schedule) < net


def test_surcharge_monotonic():
    """Surcharge never decreases as the amount grows"""
    previous = compute_processor_surcharge(0)
    for net in range(1, 20_000):
        current = compute_processor_surcharge(net)
        assert current >= previous
        assert current >= 0
        previous = current


def test_surcharge_custom_schedule():
    """No processor fee means no surcharge"""
    free = FeeSchedule(processor_rate_percent=Decimal("0"), processor_fixed_fee_paisa=0)
    assert compute_processor_surcharge(0, free) == 0
    assert compute_processor_surcharge(100000, free) == 0

    flat_only = FeeSchedule(processor_rate_percent=Decimal("0"), processor_fixed_fee_paisa=3000)
    assert compute_processor_surcharge(100000, flat_only) == 3000


def test_surcharge_rejects_invalid_input():
    with pytest.raises(InvalidAmountError):
        compute_processor_surcharge(-1)
    with pytest.raises(InvalidAmountError):
        compute_processor_surcharge(10.5)
    with pytest.raises(InvalidAmountError):
        compute_processor_surcharge(float("nan"))
    with pytest.raises(InvalidAmountError):
        compute_processor_surcharge("1000")


def test_surcharge_rejects_full_processor_rate():
    """A 100% rate has no finite gross-up"""
    with pytest.raises(InvalidAmountError):
        compute_processor_surcharge(1000, FeeSchedule(processor_rate_percent=Decimal("100")))


def test_surcharge_overflow():
    """Gross charge beyond the safe integer range is rejected"""
    with pytest.raises(AmountOverflowError):
        compute_processor_surcharge(MAX_SAFE_PAISA)


def test_split_scenario_no_debt():
    """Rs 1000 order, 5% commission, no debt"""
    breakdown = compute_split_settlement(100000, debt_paisa=0)

    assert breakdown.platform_commission_paisa == 5000
    assert breakdown.debt_recovered_paisa == 0
    assert breakdown.processing_fee_paisa == 4120
    assert breakdown.merchant_payout_paisa == 95000
    assert breakdown.total_platform_take_paisa == 9120
    assert breakdown.gross_charge_paisa == 104120


def test_split_scenario_debt_exceeds_cap():
    """Debt larger than the order is recovered only up to total - commission"""
    breakdown = compute_split_settlement(100000, debt_paisa=200000)

    assert breakdown.debt_recovered_paisa == 95000
    assert breakdown.merchant_payout_paisa == 0
    assert breakdown.total_platform_take_paisa == 5000 + 95000 + 4120


def test_split_partial_debt_recovery():
    breakdown = compute_split_settlement(100000, debt_paisa=30000)

    assert breakdown.debt_recovered_paisa == 30000
    assert breakdown.merchant_payout_paisa == 65000


def test_split_zero_order_waives_surcharge():
    """Nothing is charged for a zero-value order"""
    breakdown = compute_split_settlement(0, debt_paisa=50000)

    assert breakdown.processing_fee_paisa == 0
    assert breakdown.platform_commission_paisa == 0
    assert breakdown.debt_recovered_paisa == 0
    assert breakdown.merchant_payout_paisa == 0
    assert breakdown.total_platform_take_paisa == 0


def test_split_zero_order_surcharge_when_not_waived():
    schedule = FeeSchedule(waive_surcharge_on_zero_total=False)
    breakdown = compute_split_settlement(0, schedule=schedule)

    assert breakdown.processing_fee_paisa == 1133
    assert breakdown.merchant_payout_paisa == 0


@pytest.mark.parametrize("total", [0, 1, 9, 10, 19, 999, 100000, 123457, 10**12])
@pytest.mark.parametrize("debt", [0, 1, 5000, 94999, 95000, 10**13])
@pytest.mark.parametrize("rate", [Decimal("0"), Decimal("2.5"), Decimal("5"), Decimal("12.75"), Decimal("100")])
def test_split_conservation_and_cap(total: int, debt: int, rate: Decimal):
    """Merchant + commission + recovered debt is exactly the order total"""
    breakdown = compute_split_settlement(total, debt_paisa=debt, commission_rate=rate)

    assert (
        breakdown.merchant_payout_paisa
        + breakdown.platform_commission_paisa
        + breakdown.debt_recovered_paisa
        == total
    )
    assert (
        breakdown.merchant_payout_paisa
        + breakdown.total_platform_take_paisa
        - breakdown.processing_fee_paisa
        == total
    )
    assert 0 <= breakdown.debt_recovered_paisa <= total - breakdown.platform_commission_paisa
    assert breakdown.merchant_payout_paisa >= 0


def test_split_full_commission_recovers_no_debt():
    breakdown = compute_split_settlement(100000, debt_paisa=50000, commission_rate=100)

    assert breakdown.platform_commission_paisa == 100000
    assert breakdown.debt_recovered_paisa == 0
    assert breakdown.merchant_payout_paisa == 0


def test_commission_rounds_half_up():
    """5% of 10, 30 and 50 paisa sits exactly on .5"""
    assert compute_platform_commission(10, Decimal("5")) == 1
    assert compute_platform_commission(30, Decimal("5")) == 2
    assert compute_platform_commission(50, Decimal("5")) == 3
    assert compute_platform_commission(29, Decimal("5")) == 1  # 1.45


def test_commission_rate_override():
    breakdown = compute_split_settlement(100000, commission_rate=7.5)
    assert breakdown.platform_commission_paisa == 7500
    assert breakdown.merchant_payout_paisa == 92500


def test_commission_rate_from_schedule():
    schedule = FeeSchedule(commission_rate_percent=Decimal("10"))
    breakdown = compute_split_settlement(100000, schedule=schedule)
    assert breakdown.platform_commission_paisa == 10000


def test_split_rejects_bad_inputs():
    with pytest.raises(InvalidAmountError):
        compute_split_settlement(-100)
    with pytest.raises(InvalidAmountError):
        compute_split_settlement(100000, debt_paisa=-1)
    with pytest.raises(InvalidAmountError):
        compute_split_settlement(100000, commission_rate=-5)
    with pytest.raises(InvalidAmountError):
        compute_split_settlement(100000, commission_rate=101)
    with pytest.raises(InvalidAmountError):
        compute_split_settlement(100000, commission_rate=float("inf"))


def test_debt_adjusted_basis_grosses_up_remaining_amount():
    """Saved-card path: surcharge on 100000 - 50000 recovered debt"""
    breakdown = compute_split_settlement(100000, debt_paisa=50000, basis=SurchargeBasis.DEBT_ADJUSTED)

    # ceil(51100 / 0.971) = 52627
    assert breakdown.processing_fee_paisa == 2627
    assert breakdown.debt_recovered_paisa == 50000
    assert breakdown.merchant_payout_paisa == 45000
    assert breakdown.gross_charge_paisa == 102627


def test_debt_adjusted_basis_matches_order_total_without_debt():
    order_basis = compute_split_settlement(100000, basis=SurchargeBasis.ORDER_TOTAL)
    debt_basis = compute_split_settlement(100000, basis=SurchargeBasis.DEBT_ADJUSTED)

    # Commission is not part of the adjustment, only recovered debt is
    assert order_basis == debt_basis


def test_split_is_idempotent():
    first = compute_split_settlement(123457, debt_paisa=4321, commission_rate=Decimal("5"))
    second = compute_split_settlement(123457, debt_paisa=4321, commission_rate=Decimal("5"))
    assert first == second


def test_single_payee_charge():
    breakdown = compute_single_payee_charge(100000)

    assert breakdown.processing_fee_paisa == 4120
    assert breakdown.platform_commission_paisa == 0
    assert breakdown.debt_recovered_paisa == 0
    assert breakdown.merchant_payout_paisa == 100000
    assert breakdown.total_platform_take_paisa == 4120
    assert breakdown.gross_charge_paisa == 104120


def test_single_payee_zero_order():
    assert compute_single_payee_charge(0).processing_fee_paisa == 0


def test_order_total(sample_order: list[OrderLine]):
    assert order_total(sample_order) == 100000
    assert order_total([]) == 0


def test_order_total_rejects_bad_lines():
    with pytest.raises(InvalidAmountError, match="quantity"):
        order_total([OrderLine(name="Naan", unit_price_paisa=3000, quantity=0)])
    with pytest.raises(InvalidAmountError, match="unit_price_paisa"):
        order_total([OrderLine(name="Naan", unit_price_paisa=-3000, quantity=1)])
    with pytest.raises(InvalidAmountError):
        order_total([OrderLine(name="Naan", unit_price_paisa=2999.5, quantity=1)])


def test_order_total_overflow():
    with pytest.raises(AmountOverflowError):
        order_total([OrderLine(name="Catering", unit_price_paisa=MAX_SAFE_PAISA, quantity=2)])
