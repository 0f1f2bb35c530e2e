"""Borrowing Behavior - repayment discipline on lending protocols"""

from typing import Sequence

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.domain.protocols import ProtocolRegistry, get_registry
from branq_scoring.utils.numeric import clamp, lerp_band, safe_div

NAME = "borrowing"

LIQUIDATION_PENALTY = 10

BORROW = "borrow"
REPAY = "repay"
LIQUIDATION = "liquidation"
OTHER = "other"


def _matches(tx: NormalizedTransaction, keywords) -> bool:
    text = f"{tx.type.lower()} {tx.description.lower()}"
    return any(keyword in text for keyword in keywords)


def is_lending_transaction(tx: NormalizedTransaction, registry: ProtocolRegistry) -> bool:
    return _matches(tx, registry.lending_keywords) or registry.is_lending_protocol(
        tx.source, tx.destination, tx.protocol, tx.description
    )


def lending_kind(tx: NormalizedTransaction, registry: ProtocolRegistry) -> str:
    """Liquidation beats repayment beats borrow, so "repay loan" is a repayment"""
    if _matches(tx, registry.liquidation_keywords):
        return LIQUIDATION
    if _matches(tx, registry.repay_keywords):
        return REPAY
    if _matches(tx, registry.borrow_keywords):
        return BORROW
    return OTHER


def borrowing_score(liquidations: int, repayment_ratio: float, interactions: int) -> float:
    """
    Grade by (liquidations, repayment ratio, interaction count).

    No liquidations and full repayment -> 90-100 (more history earns more),
    no liquidations and >= 80% repaid -> 70-89, at most one liquidation and
    >= 50% repaid -> 40-69, anything else -> 0-39 less a penalty per liquidation.
    """
    if liquidations == 0 and repayment_ratio >= 1.0:
        return 90 + min(10, interactions / 2)
    if liquidations == 0 and repayment_ratio >= 0.8:
        return lerp_band((repayment_ratio - 0.8) / 0.2, 70, 89)
    if liquidations <= 1 and repayment_ratio >= 0.5:
        return lerp_band((repayment_ratio - 0.5) / 0.5, 40, 69)
    return clamp(lerp_band(repayment_ratio / 0.5, 0, 39) - LIQUIDATION_PENALTY * liquidations)


@factor_calculator(NAME)
def borrowing(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    registry = get_registry()
    lending = [tx for tx in transactions if is_lending_transaction(tx, registry)]
    if not lending:
        return no_data(NAME, {"interactionCount": 0})

    kinds = [(tx, lending_kind(tx, registry)) for tx in lending]
    borrows = sum(1 for _, kind in kinds if kind == BORROW)
    repays = sum(1 for _, kind in kinds if kind == REPAY)
    liquidations = sum(1 for _, kind in kinds if kind == LIQUIDATION)

    repayment_ratio = min(safe_div(repays, borrows, default=1.0), 1.0)
    borrowed = sum(abs(tx.amount) for tx, kind in kinds if kind == BORROW)
    repaid = sum(abs(tx.amount) for tx, kind in kinds if kind == REPAY)

    metrics = {
        "interactionCount": len(lending),
        "borrowCount": borrows,
        "repayCount": repays,
        "liquidationCount": liquidations,
        "repaymentRatio": repayment_ratio,
        "borrowedAmount": borrowed,
        "repaidAmount": repaid,
    }
    return scored(
        NAME,
        borrowing_score(liquidations, repayment_ratio, len(lending)),
        metrics,
        summary=f"{repays} of {borrows} loans repaid, {liquidations} liquidations",
    )
