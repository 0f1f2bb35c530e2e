"""Wallet Age & Longevity - how old the wallet is and how often it is used"""

from typing import Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.utils.date_utils import day_key, days_between
from branq_scoring.utils.formatting import format_duration, format_percent

NAME = "wallet_age"

YEAR_DAYS = 365
HALF_YEAR_DAYS = 182
QUARTER_DAYS = 91


def longevity_score(age_days: float, active_pct: float) -> float:
    """
    Requirements:
    - 1 year old, active >70% of days: 90-100
    - 6-12 months, active >50%: 70-89
    - 3-6 months, moderate use: 40-69
    - under 3 months or barely used: 0-39
    """
    if age_days >= YEAR_DAYS:
        if active_pct > 70:
            return 90 + min(10, (active_pct - 70) / 3)
        if active_pct > 50:
            return 70 + (active_pct - 50) / 2
        if active_pct > 30:
            return 40 + (active_pct - 30) / 0.75
        return 30 + active_pct / 3

    if age_days >= HALF_YEAR_DAYS:
        if active_pct > 50:
            return 70 + min(19, (active_pct - 50) / 2.5)
        if active_pct > 30:
            return 40 + (active_pct - 30) / 1.5
        return 20 + active_pct / 3

    if age_days >= QUARTER_DAYS:
        if active_pct > 50:
            return 50 + min(19, active_pct - 50)
        if active_pct > 30:
            return 40 + (active_pct - 30) / 2
        return 10 + active_pct / 3

    if active_pct > 70:
        return 35 + min(4, age_days / 30)
    if active_pct > 50:
        return 25 + min(10, age_days / 30)
    return max(0.0, min(24, age_days / 4 + active_pct / 5))


@factor_calculator(NAME)
def wallet_age(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    dated = [tx.timestamp for tx in transactions if tx.has_timestamp]
    if not dated:
        return no_data(NAME, {"ageDays": 0, "activePercentage": 0})

    age_days = max(days_between(min(dated), context.as_of), 0.0)
    active_days = len({day_key(ts) for ts in dated})
    active_pct = min(100.0, active_days / max(1.0, age_days) * 100)

    metrics = {
        "ageDays": age_days,
        "activeDays": active_days,
        "activePercentage": active_pct,
    }
    return scored(
        NAME,
        longevity_score(age_days, active_pct),
        metrics,
        summary=f"{format_duration(age_days)} old, active {format_percent(active_pct)} of days",
    )
