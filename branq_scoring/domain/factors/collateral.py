"""Collateral Management - loan-to-value discipline and collateral top-ups"""

from typing import List, Optional, Sequence, Tuple

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.domain.protocols import ProtocolRegistry, get_registry
from branq_scoring.utils.numeric import clamp, lerp_band, safe_div

NAME = "collateral"

# Score range per tier: 3 = Excellent ... 0 = Poor
TIER_RANGES = {
    3: (90, 100),
    2: (60, 89),
    1: (30, 59),
    0: (0, 29),
}
TIER_LABELS = {3: "Excellent", 2: "Good", 1: "Moderate", 0: "Poor"}


def ltv_tier(ltv: float) -> Tuple[int, float]:
    """
    LTV tier plus how deep into the tier the wallet sits (1.0 = best edge).

    <50% -> 3, 50-70% -> 2, 70-85% -> 1, >=85% -> 0
    """
    if ltv < 50:
        return 3, (50 - ltv) / 50
    if ltv < 70:
        return 2, (70 - ltv) / 20
    if ltv < 85:
        return 1, (85 - ltv) / 15
    return 0, clamp((100 - ltv) / 15, 0.0, 1.0)


def top_up_tier(top_ups: int) -> Tuple[int, float]:
    """>=5 top-ups -> 3, 3-4 -> 2, 1-2 -> 1, none -> 0"""
    if top_ups >= 5:
        return 3, min(1.0, (top_ups - 5) / 5)
    if top_ups >= 3:
        return 2, (top_ups - 3) / 2
    if top_ups >= 1:
        return 1, (top_ups - 1) / 2
    return 0, 0.0


def collateral_score(avg_ltv: Optional[float], top_ups: int) -> Tuple[float, int]:
    """
    Index the 4x4 LTV / top-up table.

    The band is the weaker of the two tiers. Inside the band the score moves
    with the mean position of both dimensions; a dimension sitting in a
    better tier than the band counts as fully satisfied. Without any LTV
    sample only top-ups decide.
    """
    freq_tier, freq_position = top_up_tier(top_ups)
    if avg_ltv is None:
        tier, position = freq_tier, freq_position
    else:
        loan_tier, loan_position = ltv_tier(avg_ltv)
        tier = min(loan_tier, freq_tier)
        positions = [
            loan_position if loan_tier == tier else 1.0,
            freq_position if freq_tier == tier else 1.0,
        ]
        position = sum(positions) / len(positions)

    low, high = TIER_RANGES[tier]
    return lerp_band(position, low, high), tier


def is_collateral_transaction(tx: NormalizedTransaction, registry: ProtocolRegistry) -> bool:
    return (
        registry.is_collateral_source(tx.source)
        or tx.type in registry.collateral_types
        or any(keyword in tx.description.lower() for keyword in registry.collateral_keywords)
    )


def is_top_up(tx: NormalizedTransaction, registry: ProtocolRegistry) -> bool:
    description = tx.description.lower()
    return tx.type in registry.top_up_types or any(k in description for k in registry.top_up_keywords)


def transaction_ltv(tx: NormalizedTransaction) -> Optional[float]:
    """Borrowed native value over posted token collateral, as a percentage"""
    if tx.token_volume > 0 and tx.native_volume > 0:
        return safe_div(tx.native_volume, tx.token_volume) * 100
    return None


@factor_calculator(NAME)
def collateral(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    registry = get_registry()
    activity = [tx for tx in transactions if is_collateral_transaction(tx, registry)]
    if not activity:
        return no_data(NAME, {"collateralTransactions": 0})

    ltvs: List[float] = [ltv for ltv in (transaction_ltv(tx) for tx in activity) if ltv is not None]
    avg_ltv = sum(ltvs) / len(ltvs) if ltvs else None
    top_ups = sum(1 for tx in activity if is_top_up(tx, registry))

    value, tier = collateral_score(avg_ltv, top_ups)
    metrics = {
        "collateralTransactions": len(activity),
        "avgLTV": avg_ltv if avg_ltv is not None else 0.0,
        "ltvSamples": len(ltvs),
        "topUpFrequency": top_ups,
    }
    ltv_text = f"avg LTV {round(avg_ltv)}%" if avg_ltv is not None else "no LTV data"
    return scored(NAME, value, metrics, summary=f"{TIER_LABELS[tier]}: {ltv_text}, {top_ups} top-ups")
