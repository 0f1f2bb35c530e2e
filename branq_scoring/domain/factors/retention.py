"""Retention Behavior - how long major tokens are held and how calm the balance is"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.domain.protocols import get_registry
from branq_scoring.utils.date_utils import day_key, days_between
from branq_scoring.utils.numeric import clamp, round_half_up, safe_div

NAME = "retention"

HOLD_TIME_TARGET_DAYS = 30
VOLATILITY_CEILING_PCT = 10.0
# Used when fewer than two days can be compared. Kept at 5% rather than 20% so
# single-transaction wallets keep a non-zero volatility score
DEFAULT_VOLATILITY_PCT = 5.0


def average_hold_days(transactions: Sequence[NormalizedTransaction], as_of: int, major_tokens) -> float:
    """
    Mean days since the first transaction of each major token.

    Falls back to the earliest transaction of any currency when the wallet
    never touched a major token.
    """
    first_seen: Dict[str, int] = {}
    for tx in transactions:
        if tx.currency in major_tokens:
            first_seen[tx.currency] = min(first_seen.get(tx.currency, tx.timestamp), tx.timestamp)

    hold_days = [days_between(ts, as_of) for ts in first_seen.values()]
    hold_days = [d for d in hold_days if d > 0]
    if not hold_days:
        earliest = min(tx.timestamp for tx in transactions)
        age = days_between(earliest, as_of)
        return age if age > 0 else 0.0
    return sum(hold_days) / len(hold_days)


def daily_volatility(transactions: Sequence[NormalizedTransaction]) -> float:
    """Mean absolute day-over-day percentage change of daily net amounts"""
    daily_totals: Dict[date, float] = defaultdict(float)
    for tx in transactions:
        daily_totals[day_key(tx.timestamp)] += tx.amount

    days = sorted(daily_totals)
    changes: List[float] = []
    for previous, current in zip(days, days[1:]):
        prev_total = daily_totals[previous]
        if prev_total != 0:
            changes.append(abs(safe_div(daily_totals[current] - prev_total, prev_total)) * 100)

    if not changes:
        return DEFAULT_VOLATILITY_PCT
    return sum(changes) / len(changes)


def hold_time_label(days: float) -> str:
    if days > 30:
        return "Long-term holder (>30 days)"
    if days > 15:
        return "Medium-term holder (15-30 days)"
    return "Short-term holder (<15 days)"


def volatility_label(volatility: float) -> str:
    if volatility < 10:
        return "Low volatility (<10%)"
    if volatility < 20:
        return "Moderate volatility (10-20%)"
    return "High volatility (>20%)"


@factor_calculator(NAME)
def retention(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    """Two 0-50 sub-scores: hold time (linear to 30 days) and volatility (linear down to 10%)"""
    dated = [tx for tx in transactions if tx.has_timestamp]
    if not dated:
        return no_data(NAME, {"holdTimeScore": 0, "volatilityScore": 0})

    hold_days = average_hold_days(dated, context.as_of, get_registry().major_tokens)
    volatility = daily_volatility(dated)

    hold_score = round_half_up(clamp(hold_days / HOLD_TIME_TARGET_DAYS * 50, 0, 50))
    volatility_score = round_half_up(clamp(50 - volatility / VOLATILITY_CEILING_PCT * 50, 0, 50))

    metrics = {
        "holdTimeScore": hold_score,
        "volatilityScore": volatility_score,
        "holdTimeValue": round(hold_days, 1),
        "volatilityValue": round(volatility, 1),
    }
    return scored(
        NAME,
        hold_score + volatility_score,
        metrics,
        summary=f"{hold_time_label(hold_days)}, {volatility_label(volatility).lower()}",
    )
