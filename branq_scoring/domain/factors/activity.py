"""Basic Activity Level - transaction count tiers"""

from typing import Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext

NAME = "basic_activity"

# (minimum transaction count, score), highest tier first
ACTIVITY_TIERS = [
    (1000, 100),
    (500, 80),
    (100, 50),
    (10, 20),
]


def activity_score(count: int) -> int:
    for minimum, score in ACTIVITY_TIERS:
        if count >= minimum:
            return score
    return 0


@factor_calculator(NAME)
def basic_activity(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    """Score raw transaction volume: 1000+ -> 100, 500+ -> 80, 100+ -> 50, 10+ -> 20"""
    if not transactions:
        return no_data(NAME, {"totalTransactions": 0})

    count = len(transactions)
    return scored(
        NAME,
        activity_score(count),
        {"totalTransactions": count},
        summary=f"{count} transactions",
    )
