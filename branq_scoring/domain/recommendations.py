"""Improvement plan - turn weak factor scores into actionable suggestions"""

from typing import Dict, List, NamedTuple, Sequence

from branq_scoring.domain.models import FactorScore, Recommendation

IMPACT_ORDER = {"high": 0, "medium": 1, "low": 2}


class Rule(NamedTuple):
    below: int  # recommend while the factor value is under this
    title: str
    description: str
    impact: str
    difficulty: str


RULES: Dict[str, Rule] = {
    "tx_patterns": Rule(
        80,
        "Maintain a Safety Buffer",
        "Always keep enough SOL for gas fees to avoid failed transactions.",
        "high",
        "easy",
    ),
    "net_flow": Rule(
        70,
        "Balance Inflows and Outflows",
        "Keep more SOL in reserve and maintain a positive inflow-to-outflow ratio.",
        "high",
        "moderate",
    ),
    "min_balance": Rule(
        70,
        "Keep a Steady Minimum Balance",
        "Avoid draining the wallet; a stable daily floor shows reliable reserves.",
        "high",
        "moderate",
    ),
    "borrowing": Rule(
        70,
        "Repay Loans on Time",
        "Close out open borrows and avoid positions that risk liquidation.",
        "high",
        "moderate",
    ),
    "collateral": Rule(
        60,
        "Lower Your Loan-to-Value",
        "Top up collateral regularly and keep LTV below 50%.",
        "high",
        "moderate",
    ),
    "retention": Rule(
        70,
        "Hold Major Tokens Longer",
        "Holding SOL, USDC or USDT for 30+ days with calm balances improves retention.",
        "medium",
        "moderate",
    ),
    "wallet_age": Rule(
        90,
        "Increase Account Age",
        "Continue using this wallet consistently over time. Age is a major factor.",
        "medium",
        "hard",
    ),
    "basic_activity": Rule(
        50,
        "Regular Activity",
        "Consistent, regular wallet activity improves your score over time.",
        "medium",
        "easy",
    ),
    "token_portfolio": Rule(
        70,
        "Diversify Into Quality Assets",
        "Hold a larger share of blue-chip tokens and stablecoins.",
        "medium",
        "moderate",
    ),
    "staking": Rule(
        70,
        "Stake With Reputable Validators",
        "Lock more SOL for longer with well-known validators.",
        "low",
        "easy",
    ),
    "ecosystem": Rule(
        50,
        "Use Strategic DeFi Tools",
        "Try aggregators, limit orders, DCA or multisig and avoid high-risk protocols.",
        "low",
        "easy",
    ),
}

# Factors whose absence is itself worth acting on
START_USING: Dict[str, Rule] = {
    "staking": Rule(
        0,
        "Start Staking",
        "Delegate some SOL to a reputable validator to build staking history.",
        "medium",
        "easy",
    ),
    "borrowing": Rule(
        0,
        "Build a Borrowing Record",
        "A small loan on an established lending protocol, repaid in full, establishes credit history.",
        "low",
        "moderate",
    ),
}


def _recommend(factor: str, rule: Rule) -> Recommendation:
    return Recommendation(
        factor=factor,
        title=rule.title,
        description=rule.description,
        impact=rule.impact,
        difficulty=rule.difficulty,
    )


def build_recommendations(factors: Sequence[FactorScore]) -> List[Recommendation]:
    """
    Requirements:
    - scored factors under their rule threshold get that rule's suggestion
    - NoData only produces "start using" suggestions (staking, borrowing)
    - ordered by impact (high first), then by the weakest factor value
    """
    candidates = []
    for factor in factors:
        if factor.has_data:
            rule = RULES.get(factor.name)
            if rule and factor.value < rule.below:
                candidates.append((factor.value, _recommend(factor.name, rule)))
        elif factor.name in START_USING:
            candidates.append((factor.value, _recommend(factor.name, START_USING[factor.name])))

    candidates.sort(key=lambda item: (IMPACT_ORDER[item[1].impact], item[0], item[1].factor))
    return [recommendation for _, recommendation in candidates]


def weakest_areas(factors: Sequence[FactorScore], limit: int = 2) -> List[str]:
    """Names of the lowest-valued factors that produced data"""
    scored = sorted((f for f in factors if f.has_data), key=lambda f: (f.value, f.name))
    return [f.name for f in scored[:limit]]
