"""Scoring engine - normalize, run every factor calculator, aggregate"""

import logging
import time
from typing import Any, Iterable, List, Optional, Sequence

from branq_scoring.domain.aggregator import aggregate
from branq_scoring.domain.factors.activity import basic_activity
from branq_scoring.domain.factors.base import Calculator
from branq_scoring.domain.factors.borrowing import borrowing
from branq_scoring.domain.factors.collateral import collateral
from branq_scoring.domain.factors.ecosystem import ecosystem
from branq_scoring.domain.factors.min_balance import min_balance
from branq_scoring.domain.factors.net_flow import net_flow
from branq_scoring.domain.factors.retention import retention
from branq_scoring.domain.factors.staking import staking
from branq_scoring.domain.factors.token_portfolio import token_portfolio
from branq_scoring.domain.factors.tx_patterns import tx_patterns
from branq_scoring.domain.factors.wallet_age import wallet_age
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoreReport, ScoringContext
from branq_scoring.domain.normalizer import normalize_staking_records, normalize_transactions
from branq_scoring.domain.recommendations import build_recommendations, weakest_areas
from branq_scoring.utils.numeric import finite

# Display order of the factor cards
FACTOR_CALCULATORS: List[Calculator] = [
    basic_activity,
    net_flow,
    min_balance,
    retention,
    borrowing,
    collateral,
    staking,
    tx_patterns,
    wallet_age,
    token_portfolio,
    ecosystem,
]


def calculate_factors(
    transactions: Sequence[NormalizedTransaction],
    context: ScoringContext,
    calculators: Optional[Sequence[Calculator]] = None,
) -> List[FactorScore]:
    """Run each calculator independently; a failing one yields its NoData state"""
    return [calculator(transactions, context) for calculator in (calculators or FACTOR_CALCULATORS)]


def score_transactions(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> ScoreReport:
    factors = calculate_factors(transactions, context)
    return ScoreReport(
        factors=factors,
        aggregate=aggregate(factors),
        recommendations=build_recommendations(factors),
        weakest_areas=weakest_areas(factors),
    )


def score_wallet(
    raw_transactions: Optional[Iterable[Any]],
    staking_records: Optional[Iterable[Any]] = None,
    current_balance: Any = 0.0,
    fiat_rate: Optional[float] = None,
    as_of: Optional[int] = None,
    wallet_address: str = "",
) -> ScoreReport:
    """
    Main entry point: score a wallet from raw provider records.

    Requirements:
    - Every raw record is normalized; none are dropped
    - ``as_of`` is captured once, so re-running with the same value is idempotent
    - Missing factors are excluded from the aggregate, never counted as zero
    """
    as_of = int(as_of) if as_of else int(time.time())
    transactions = normalize_transactions(raw_transactions, wallet_address)
    context = ScoringContext(
        as_of=as_of,
        current_balance=finite(current_balance),
        staking=tuple(normalize_staking_records(staking_records)),
        fiat_rate=finite(fiat_rate, None),
        wallet_address=wallet_address,
    )

    report = score_transactions(transactions, context)
    logging.debug(
        "Scoring pass completed",
        extra={
            "wallet_address": wallet_address,
            "step": "score_complete",
            "transaction_count": len(transactions),
            "factors_used": report.aggregate.factors_used,
            "overall_score": report.aggregate.overall_score,
        },
    )
    return report
