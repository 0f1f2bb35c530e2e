"""Transaction Patterns & Consistency - weekly cadence and keeping enough SOL for fees"""

from typing import Sequence, Tuple

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored, sol_transactions
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.utils.date_utils import SECONDS_PER_DAY
from branq_scoring.utils.formatting import format_amount
from branq_scoring.utils.numeric import clamp

NAME = "tx_patterns"

WINDOW_DAYS = 90
MIN_WINDOW_DAYS = 7
MIN_FEE_BUFFER_SOL = 0.1
BUFFER_PER_WEEKLY_TX_SOL = 0.005


def frequency_points(avg_weekly: float) -> int:
    if avg_weekly >= 10:
        return 50
    if avg_weekly >= 5:
        return 35
    if avg_weekly >= 1:
        return 20
    return 10


def buffer_points(breaches: int, min_balance: float, buffer: float) -> int:
    if breaches == 0 and min_balance >= buffer:
        return 50
    if breaches <= 2 and min_balance > buffer / 2:
        return 35
    if breaches <= 5:
        return 20
    return 10


def average_weekly(timestamps: Sequence[int], as_of: int) -> float:
    """Mean transactions per week over the trailing window ending at as_of"""
    start = as_of - WINDOW_DAYS * SECONDS_PER_DAY
    recent = [ts for ts in timestamps if start <= ts <= as_of]
    if not recent:
        return 0.0
    span_days = (as_of - min(recent)) / SECONDS_PER_DAY
    weeks = clamp(span_days, MIN_WINDOW_DAYS, WINDOW_DAYS) / 7
    return len(recent) / weeks


def simulate_buffer(transactions: Sequence[NormalizedTransaction], current_balance: float, buffer: float) -> Tuple[int, float]:
    """
    Replay SOL history backwards from the current balance.

    Returns (times the balance sat below the buffer, lowest balance seen).
    The current balance itself is the first sample.
    """
    balance = current_balance
    lowest = balance
    breaches = 1 if balance < buffer else 0
    for tx in sol_transactions(transactions):
        balance -= tx.amount
        lowest = min(lowest, balance)
        if balance < buffer:
            breaches += 1
    return breaches, lowest


@factor_calculator(NAME)
def tx_patterns(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    timestamps = [tx.timestamp for tx in transactions if tx.has_timestamp]
    if not timestamps:
        return no_data(NAME, {"avgWeeklyTransactions": 0})

    avg_weekly = average_weekly(timestamps, context.as_of)
    fees = [tx.fee for tx in transactions if tx.fee > 0]
    mean_fee = sum(fees) / len(fees) if fees else 0.0
    buffer = mean_fee + max(MIN_FEE_BUFFER_SOL, BUFFER_PER_WEEKLY_TX_SOL * avg_weekly)
    breaches, lowest = simulate_buffer(transactions, context.current_balance, buffer)

    points = frequency_points(avg_weekly) + buffer_points(breaches, lowest, buffer)
    metrics = {
        "avgWeeklyTransactions": avg_weekly,
        "meanFee": mean_fee,
        "recommendedBuffer": buffer,
        "minSolBalance": lowest,
        "bufferBreaches": breaches,
    }
    return scored(
        NAME,
        min(points, 100),
        metrics,
        summary=f"{avg_weekly:.1f} tx/week, {breaches} times below a {format_amount(buffer)} SOL buffer",
    )
