"""Unit tests for borrowing, collateral, staking and ecosystem calculators"""

import pytest

from branq_scoring.domain.factors.borrowing import borrowing, borrowing_score
from branq_scoring.domain.factors.collateral import collateral, collateral_score
from branq_scoring.domain.factors.ecosystem import ecosystem, risk_penalty
from branq_scoring.domain.factors.staking import staking
from branq_scoring.domain.models import FactorBand, StakingRecord, StakingStatus
from conftest import AS_OF, DAY, make_tx

EVERSTAKE = "9QU2QSxhb24FUX3Tu2FpPVXELRiMiXfUPuVehganrC5K"


# Borrowing

def test_borrowing_score_table():
    assert borrowing_score(0, 1.0, 30) == 100
    assert borrowing_score(0, 0.9, 3) == pytest.approx(79.5)
    assert borrowing_score(1, 0.5, 3) == 40
    assert borrowing_score(2, 0.0, 4) == 0


def test_borrow_and_repay_in_full(context):
    transactions = [
        make_tx(days_ago=10, amount=50.0, currency="USDC", description="Borrow 50 USDC from Solend"),
        make_tx(days_ago=5, amount=-50.0, currency="USDC", description="Repay 50 USDC to Solend"),
    ]

    result = borrowing(transactions, context)

    assert result.metrics["borrowCount"] == 1
    assert result.metrics["repayCount"] == 1
    assert result.metrics["repaymentRatio"] == 1.0
    assert result.value == 91


def test_repay_loan_counts_as_repayment_only(context):
    result = borrowing([make_tx(description="repay loan")], context)

    assert result.metrics["borrowCount"] == 0
    assert result.metrics["repayCount"] == 1
    assert result.metrics["repaymentRatio"] == 1.0


def test_liquidation_caps_the_score(context):
    transactions = [
        make_tx(description="borrow SOL"),
        make_tx(description="borrow SOL"),
        make_tx(description="repay SOL"),
        make_tx(description="position liquidated"),
    ]

    result = borrowing(transactions, context)

    assert result.metrics["liquidationCount"] == 1
    assert result.metrics["repaymentRatio"] == 0.5
    assert result.value == 40


def test_protocol_source_marks_lending(context):
    result = borrowing([make_tx(source="MARGINFI")], context)

    assert result.band != FactorBand.NO_DATA
    assert result.metrics["interactionCount"] == 1


def test_no_lending_is_no_data(context):
    result = borrowing([make_tx(description="transport fee"), make_tx()], context)

    assert result.band == FactorBand.NO_DATA


# Collateral

def test_collateral_score_table():
    assert collateral_score(None, 0) == (0, 0)
    assert collateral_score(40, 6) == (pytest.approx(92), 3)
    # LTV is the weaker dimension; top-ups count as fully satisfied
    assert collateral_score(60, 6) == (pytest.approx(81.75), 2)
    assert collateral_score(90, 10)[1] == 0


def test_collateral_with_ltv_and_top_ups(context):
    transactions = [
        make_tx(days_ago=i, source="KAMINO", type="DEPOSIT_COLLATERAL", token_volume=100.0, native_volume=40.0)
        for i in range(1, 6)
    ]

    result = collateral(transactions, context)

    assert result.metrics["avgLTV"] == 40
    assert result.metrics["topUpFrequency"] == 5
    assert result.value == 91
    assert result.summary.startswith("Excellent")


def test_collateral_without_ltv_uses_top_ups(context):
    result = collateral([make_tx(description="Add collateral to vault")], context)

    assert result.metrics["ltvSamples"] == 0
    assert result.metrics["topUpFrequency"] == 1
    assert result.value == 30


def test_no_collateral_activity_is_no_data(context):
    assert collateral([make_tx()], context).band == FactorBand.NO_DATA


# Staking

def _stake(amount=100.0, days_ago=60, status=StakingStatus.ACTIVE, address=EVERSTAKE, name="Everstake"):
    return StakingRecord(
        validator_address=address,
        amount=amount,
        status=status,
        timestamp=AS_OF - days_ago * DAY,
        validator_name=name,
    )


def test_staking_long_reputable_position(context_factory):
    result = staking([], context_factory(staking=(_stake(),), fiat_rate=100.0))

    assert result.metrics["usdLocked"] == 10_000
    assert result.value == 100


def test_staking_small_recent_unknown_position(context_factory):
    record = _stake(amount=5.0, days_ago=5, status=StakingStatus.DEACTIVATING, address="X" * 44, name="Some Validator")

    result = staking([], context_factory(staking=(record,), fiat_rate=100.0))

    # Deactivating stake is not locked, so only the duration tier scores
    assert result.metrics["usdLocked"] == 0
    assert result.value == 10


def test_staking_mixed_positions(context_factory):
    records = (_stake(amount=5.0, days_ago=20), _stake(amount=2.0, days_ago=20, address="Y" * 44, name=""))

    result = staking([], context_factory(staking=records, fiat_rate=100.0))

    # $700 locked -> 20, 20 days -> 20, half reputable -> 20
    assert result.value == 60


def test_staking_without_positions_is_no_data(context):
    assert staking([], context).band == FactorBand.NO_DATA


def test_staking_zero_amounts_is_no_data(context_factory):
    assert staking([], context_factory(staking=(_stake(amount=0.0),))).band == FactorBand.NO_DATA


def test_staking_negative_rate_is_no_data(context_factory):
    result = staking([], context_factory(staking=(_stake(),), fiat_rate=-5.0))

    assert result.band == FactorBand.NO_DATA
    assert result.summary == "Calculation error"


# Ecosystem

@pytest.mark.parametrize("share, penalty", [(0.6, 40), (0.4, 25), (0.2, 10), (0.1, 0), (0.0, 0)])
def test_risk_penalty(share, penalty):
    assert risk_penalty(share) == penalty


def test_ecosystem_tool_usage(context):
    transactions = [
        make_tx(source="JUPITER"),
        make_tx(description="Placed limit order on market"),
        make_tx(),
        make_tx(),
    ]

    result = ecosystem(transactions, context)

    assert result.metrics["usageRatio"] == 0.5
    assert result.metrics["categoriesUsed"] == 2
    assert result.value == 42


def test_ecosystem_floor_for_plain_wallets(context):
    assert ecosystem([make_tx(), make_tx()], context).value == 20


def test_ecosystem_high_risk_penalty(context):
    transactions = [make_tx(protocol="casino"), make_tx(protocol="lottery-pool")]

    result = ecosystem(transactions, context)

    assert result.metrics["highRiskShare"] == 1.0
    assert result.metrics["riskPenalty"] == 40
    assert result.value == 0


def test_ecosystem_empty_is_no_data(context):
    assert ecosystem([], context).band == FactorBand.NO_DATA


def test_ecosystem_plain_transfers_do_not_dilute_risk(context):
    transactions = [make_tx(protocol="casino") for _ in range(10)]
    transactions += [make_tx(source="SYSTEM_PROGRAM") for _ in range(90)]

    result = ecosystem(transactions, context)

    assert result.metrics["highRiskShare"] == 1.0
    assert result.metrics["riskPenalty"] == 40
