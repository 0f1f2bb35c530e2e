"""Aggregator - weighted overall score, credit score and bands"""

from typing import Dict, Mapping, Optional, Sequence

from branq_scoring.config import settings
from branq_scoring.domain.bands import CREDIT_BANDS, NO_DATA_LABEL, OVERALL_BANDS, classify
from branq_scoring.domain.models import FactorScore, WeightedAggregate
from branq_scoring.utils.numeric import round_half_up, to_score

FACTOR_WEIGHTS: Dict[str, float] = {
    "net_flow": 0.10,
    "min_balance": 0.10,
    "token_portfolio": 0.10,
    "wallet_age": 0.10,
    "tx_patterns": 0.10,
    "basic_activity": 0.10,
    "retention": 0.15,
    "collateral": 0.15,
    "staking": 0.05,
    "ecosystem": 0.05,
    "borrowing": 0.10,
}


def weighted_overall(factors: Sequence[FactorScore], weights: Optional[Mapping[str, float]] = None) -> int:
    """
    Weighted mean over the factors that produced data.

    Weights are renormalized over what is present, so missing factors
    neither drag the score down nor inflate it. If none of the present
    factors carries a weight, their plain mean is used; with nothing
    present the result is 0.
    """
    weights = FACTOR_WEIGHTS if weights is None else weights
    present = [f for f in factors if f.has_data]
    if not present:
        return 0

    weighted = [(f.value, weights[f.name]) for f in present if weights.get(f.name, 0) > 0]
    total_weight = sum(w for _, w in weighted)
    if total_weight > 0:
        return to_score(sum(v * w for v, w in weighted) / total_weight)
    return to_score(sum(f.value for f in present) / len(present))


def credit_score(overall: int) -> int:
    """Project a 0-100 score onto the configured credit range (300 + overall * 5.5 by default)"""
    low, high = settings.credit_score_min, settings.credit_score_max
    return low + round_half_up(overall * (high - low) / 100)


def aggregate(factors: Sequence[FactorScore], weights: Optional[Mapping[str, float]] = None) -> WeightedAggregate:
    factors_used = sum(1 for f in factors if f.has_data)
    overall = weighted_overall(factors, weights)
    credit = credit_score(overall)

    if not factors_used:
        return WeightedAggregate(
            overall_score=0,
            credit_score=credit,
            band=NO_DATA_LABEL,
            credit_band=NO_DATA_LABEL,
            factors_used=0,
        )

    return WeightedAggregate(
        overall_score=overall,
        credit_score=credit,
        band=classify(overall, OVERALL_BANDS),
        credit_band=classify(credit, CREDIT_BANDS),
        factors_used=factors_used,
    )
