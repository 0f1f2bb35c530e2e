"""Staking & Farming Engagement - value locked, position age, validator reputation"""

from typing import Sequence

from branq_scoring.domain.exceptions import FactorCalculationError
from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext, StakingRecord
from branq_scoring.domain.protocols import get_registry
from branq_scoring.utils.date_utils import days_between
from branq_scoring.utils.formatting import format_usd
from branq_scoring.utils.numeric import safe_div

NAME = "staking"


def value_points(usd_locked: float) -> int:
    if usd_locked >= 5000:
        return 40
    if usd_locked >= 1000:
        return 30
    if usd_locked > 0:
        return 20
    return 0


def duration_points(avg_days: float) -> int:
    if avg_days >= 30:
        return 30
    if avg_days >= 14:
        return 20
    if avg_days > 0:
        return 10
    return 0


def reputation_points(ratio: float) -> int:
    if ratio >= 0.8:
        return 30
    if ratio >= 0.5:
        return 20
    if ratio > 0:
        return 10
    return 0


def position_days(record: StakingRecord, as_of: int) -> int:
    """Whole days the position has been open; unknown start counts as 0"""
    if record.timestamp <= 0:
        return 0
    return max(int(days_between(record.timestamp, as_of)), 0)


@factor_calculator(NAME)
def staking(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    """Three capped sub-scores: USD locked (40), average duration (30), reputable validators (30)"""
    records = list(context.staking)
    if not records or all(record.amount == 0 for record in records):
        return no_data(NAME, {"positions": len(records)})
    if context.fiat_rate is not None and context.fiat_rate < 0:
        raise FactorCalculationError(NAME, f"negative conversion rate {context.fiat_rate}")

    registry = get_registry()
    sol_locked = sum(max(record.amount, 0.0) for record in records if record.is_locked)
    usd_locked = sol_locked * (context.fiat_rate or 0.0)
    avg_days = sum(position_days(r, context.as_of) for r in records) / len(records)
    reputable = sum(
        1 for r in records if registry.is_reputable_validator(r.validator_name, r.validator_address)
    )
    reputable_ratio = safe_div(reputable, len(records))

    points = value_points(usd_locked) + duration_points(avg_days) + reputation_points(reputable_ratio)
    metrics = {
        "positions": len(records),
        "solLocked": sol_locked,
        "usdLocked": usd_locked,
        "avgDurationDays": avg_days,
        "reputableCount": reputable,
        "reputableRatio": reputable_ratio,
    }
    return scored(
        NAME,
        min(points, 100),
        metrics,
        summary=f"{format_usd(usd_locked)} locked across {len(records)} positions",
    )
