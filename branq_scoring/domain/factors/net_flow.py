"""Net Flow Analysis - inflow versus outflow"""

from typing import Sequence

from branq_scoring.domain.exceptions import FactorCalculationError
from branq_scoring.domain.factors.base import factor_calculator, no_data, scored, to_sol
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.utils.formatting import format_amount
from branq_scoring.utils.numeric import lerp_band, safe_div

NAME = "net_flow"


def net_flow_score(ratio: float) -> float:
    """
    Map the net flow ratio (-1..1) onto 0-100.

    ratio >= 0.3        -> 90-100 (extra credit up to ratio 1.0)
    0 <= ratio < 0.3    -> 60-89
    -0.3 <= ratio < 0   -> 30-59
    ratio < -0.3        -> 0-29
    """
    if ratio >= 0.3:
        return lerp_band((ratio - 0.3) / 0.7, 90, 100)
    if ratio >= 0:
        return lerp_band(ratio / 0.3, 60, 89)
    if ratio >= -0.3:
        return lerp_band((ratio + 0.3) / 0.3, 30, 59)
    return lerp_band((ratio + 1.0) / 0.7, 0, 29)


@factor_calculator(NAME)
def net_flow(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    if context.fiat_rate is not None and context.fiat_rate < 0:
        raise FactorCalculationError(NAME, f"negative conversion rate {context.fiat_rate}")

    inflow = 0.0
    outflow = 0.0
    for tx in transactions:
        amount = to_sol(tx.amount, tx.currency, context.fiat_rate)
        if amount > 0:
            inflow += amount
        elif amount < 0:
            outflow += -amount

    if inflow == 0 and outflow == 0:
        return no_data(NAME, {"inflow": 0, "outflow": 0})

    net = inflow - outflow
    ratio = safe_div(net, inflow + outflow)
    metrics = {
        "inflow": inflow,
        "outflow": outflow,
        "netFlow": net,
        "ratio": ratio,
    }
    return scored(
        NAME,
        net_flow_score(ratio),
        metrics,
        summary=f"In {format_amount(inflow)} SOL / out {format_amount(outflow)} SOL",
    )
