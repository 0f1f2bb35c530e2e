"""Strategic Tool Usage / Ecosystem Coverage - sophisticated tooling and protocol risk"""

from typing import List, Sequence, Set

from branq_scoring.domain.factors.base import factor_calculator, no_data, scored
from branq_scoring.domain.models import FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.domain.protocols import RISK_HIGH, ProtocolRegistry, get_registry
from branq_scoring.utils.numeric import clamp, round_half_up, safe_div

NAME = "ecosystem"

TOOL_CATEGORY_COUNT = 6
MIN_BASE_SCORE = 20

# (high-risk share above, penalty), strictest first
RISK_PENALTIES = [
    (0.5, 40),
    (0.3, 25),
    (0.1, 10),
]


def risk_penalty(high_risk_share: float) -> int:
    for threshold, penalty in RISK_PENALTIES:
        if high_risk_share > threshold:
            return penalty
    return 0


def tool_categories(tx: NormalizedTransaction, registry: ProtocolRegistry) -> Set[str]:
    source = tx.source.lower()
    description = tx.description.lower()
    return {
        name for name, category in registry.tools.items() if category.matches(tx.program_id, source, description)
    }


@factor_calculator(NAME)
def ecosystem(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
    """
    Requirements:
    - usage ratio: share of transactions touching any tool category
    - diversity: distinct categories used out of six
    - base = 50 * ratio + 50 * diversity, never below 20
    - high-risk protocol share > 50% / 30% / 10% costs 40 / 25 / 10 points
    """
    if not transactions:
        return no_data(NAME, {"toolTransactions": 0})

    registry = get_registry()
    used: Set[str] = set()
    tool_txs = 0
    for tx in transactions:
        categories = tool_categories(tx, registry)
        if categories:
            tool_txs += 1
            used |= categories

    usage_ratio = safe_div(tool_txs, len(transactions))
    diversity = len(used) / TOOL_CATEGORY_COUNT
    base = clamp(round_half_up(50 * usage_ratio + 50 * diversity), MIN_BASE_SCORE, 100)

    # only protocol-tagged activity counts toward the risk share
    labels: List[str] = [tx.protocol for tx in transactions if tx.protocol]
    high_risk = sum(1 for label in labels if registry.risk_tier(label) == RISK_HIGH)
    high_risk_share = safe_div(high_risk, len(labels))
    penalty = risk_penalty(high_risk_share)

    metrics = {
        "toolTransactions": tool_txs,
        "usageRatio": usage_ratio,
        "toolDiversity": diversity,
        "categoriesUsed": len(used),
        "highRiskShare": high_risk_share,
        "riskPenalty": penalty,
    }
    summary = f"{len(used)} of {TOOL_CATEGORY_COUNT} tool types used"
    if penalty:
        summary += f", {round(high_risk_share * 100)}% high-risk activity"
    return scored(NAME, base - penalty, metrics, summary=summary)
