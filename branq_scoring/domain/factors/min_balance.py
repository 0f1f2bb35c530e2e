"""Minimum Balance Stability - how low the SOL balance dipped historically"""

from datetime import date
from typing import Dict, Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored, sol_transactions
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.utils.date_utils import day_key
from branq_scoring.utils.formatting import format_amount
from branq_scoring.utils.numeric import finite, lerp_band, safe_div

NAME = "min_balance"


def stability_score(ratio: float) -> float:
    """ratio >= 0.5 -> 90-100, >= 0.3 -> 70-89, >= 0.1 -> 40-69, else 0-39"""
    if ratio >= 0.5:
        return lerp_band((ratio - 0.5) / 0.5, 90, 100)
    if ratio >= 0.3:
        return lerp_band((ratio - 0.3) / 0.2, 70, 89)
    if ratio >= 0.1:
        return lerp_band((ratio - 0.1) / 0.2, 40, 69)
    return lerp_band(ratio / 0.1, 0, 39)


@factor_calculator(NAME)
def min_balance(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    """
    Reconstruct the SOL balance backwards from the current balance.

    Walking newest to oldest, each transfer is reversed against a running
    balance seeded at ``current_balance``. The lowest balance seen on each day
    is that day's minimum; the ratio of the average daily minimum to the
    highest reference balance drives the score.
    """
    history = [tx for tx in sol_transactions(transactions) if tx.amount != 0]
    if not history:
        return no_data(NAME, {"currentBalance": context.current_balance})

    current = max(finite(context.current_balance), 0.0)
    running = current
    lowest = current
    daily_minimums: Dict[date, float] = {}

    for tx in history:
        day = day_key(tx.timestamp)
        # Balance right after this transaction, then right before it
        after = running
        running -= tx.amount
        day_low = max(min(after, running), 0.0)
        daily_minimums[day] = min(daily_minimums.get(day, day_low), day_low)
        lowest = min(lowest, running)

    minimums = list(daily_minimums.values())
    avg_daily_minimum = sum(minimums) / len(minimums)
    reference = max(current, max(minimums))
    ratio = safe_div(avg_daily_minimum, reference)

    metrics = {
        "currentBalance": current,
        "minBalance": max(lowest, 0.0),
        "avgDailyMinimum": avg_daily_minimum,
        "ratio": ratio,
        "daysObserved": len(minimums),
    }
    return scored(
        NAME,
        stability_score(ratio),
        metrics,
        summary=f"Lowest balance {format_amount(max(lowest, 0.0))} SOL",
    )
