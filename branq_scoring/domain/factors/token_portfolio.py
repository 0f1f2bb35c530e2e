"""Token Portfolio Health - share of transacted value in blue-chip and stable assets"""

from collections import defaultdict
from typing import Dict, Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored, to_sol
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.domain.protocols import get_registry
from branq_scoring.utils.formatting import format_percent
from branq_scoring.utils.numeric import lerp_band, safe_div

NAME = "token_portfolio"


def portfolio_score(quality_pct: float) -> float:
    """>=60% quality -> 90-100, >=40% -> 70-89, >=20% -> 40-69, else 0-39"""
    if quality_pct >= 60:
        return 90 + min(10, (quality_pct - 60) / 4)
    if quality_pct >= 40:
        return lerp_band((quality_pct - 40) / 20, 70, 89)
    if quality_pct >= 20:
        return lerp_band((quality_pct - 20) / 20, 40, 69)
    return lerp_band(quality_pct / 20, 0, 39)


@factor_calculator(NAME)
def token_portfolio(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    value_by_token: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        value_by_token[tx.currency] += abs(to_sol(tx.amount, tx.currency, context.fiat_rate))

    total = sum(value_by_token.values())
    if total <= 0:
        return no_data(NAME, {"uniqueTokens": len(value_by_token)})

    registry = get_registry()
    blue_chip = sum(v for token, v in value_by_token.items() if registry.is_blue_chip(token))
    stable = sum(v for token, v in value_by_token.items() if registry.is_stablecoin(token))
    quality = sum(
        v for token, v in value_by_token.items() if registry.is_blue_chip(token) or registry.is_stablecoin(token)
    )

    quality_pct = safe_div(quality, total) * 100
    top_token = max(value_by_token, key=lambda token: (value_by_token[token], token))
    metrics = {
        "uniqueTokens": len(value_by_token),
        "blueChipPercentage": safe_div(blue_chip, total) * 100,
        "stablecoinPercentage": safe_div(stable, total) * 100,
        "qualityPercentage": quality_pct,
        "topTokenPercentage": safe_div(value_by_token[top_token], total) * 100,
    }
    return scored(
        NAME,
        portfolio_score(quality_pct),
        metrics,
        summary=f"{format_percent(quality_pct)} of value in quality assets across {len(value_by_token)} tokens, mostly {top_token}",
    )
