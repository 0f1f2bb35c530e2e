"""Domain models - pure Python dataclasses representing scoring entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class FactorBand(str, Enum):
    """Qualitative label attached to a single factor score"""

    NO_DATA = "No Data"
    POOR = "Poor"
    MODERATE = "Moderate"
    GOOD = "Good"
    EXCELLENT = "Excellent"


class StakingStatus(str, Enum):
    ACTIVE = "Active"
    DELEGATED = "Delegated"
    DEACTIVATING = "Deactivating"


@dataclass(frozen=True)
class NormalizedTransaction:
    """Canonical transaction record consumed by every factor calculator"""

    timestamp: int  # epoch seconds, 0 when unknown
    amount: float  # positive = inflow, negative = outflow
    currency: str
    type: str
    source: str = ""
    destination: str = ""
    description: str = ""
    protocol: str = ""
    program_id: str = ""
    fee: float = 0.0  # SOL
    signature: str = ""
    token_volume: float = 0.0  # sum of absolute token transfer amounts
    native_volume: float = 0.0  # sum of native transfer amounts, SOL

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp > 0


@dataclass(frozen=True)
class StakingRecord:
    """Stake position derived from a staking transaction"""

    validator_address: str
    amount: float
    status: StakingStatus
    timestamp: int
    validator_name: str = ""

    @property
    def is_locked(self) -> bool:
        return self.status != StakingStatus.DEACTIVATING


@dataclass(frozen=True)
class ScoringContext:
    """Per-request inputs shared by calculators besides the transaction list"""

    as_of: int  # epoch seconds, fixed for the whole scoring pass
    current_balance: float = 0.0  # SOL
    staking: Tuple[StakingRecord, ...] = ()
    fiat_rate: Optional[float] = None  # USD per SOL
    wallet_address: str = ""


@dataclass(frozen=True)
class FactorScore:
    """Output of one factor calculator"""

    name: str
    value: int
    band: FactorBand
    metrics: Dict[str, float] = field(default_factory=dict)
    summary: str = ""

    @property
    def has_data(self) -> bool:
        return self.band != FactorBand.NO_DATA

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "band": self.band.value,
            "metrics": dict(self.metrics),
            "summary": self.summary,
        }


@dataclass(frozen=True)
class WeightedAggregate:
    """Overall score derived from the available factor scores"""

    overall_score: int  # 0-100
    credit_score: int  # 300-850
    band: str
    credit_band: str
    factors_used: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "creditScore": self.credit_score,
            "band": self.band,
            "creditBand": self.credit_band,
            "factorsUsed": self.factors_used,
        }


@dataclass(frozen=True)
class Recommendation:
    """Single improvement suggestion for a weak factor"""

    factor: str
    title: str
    description: str
    impact: str  # "high" | "medium" | "low"
    difficulty: str  # "easy" | "moderate" | "hard"

    def to_dict(self) -> Dict[str, str]:
        return {
            "factor": self.factor,
            "title": self.title,
            "description": self.description,
            "impact": self.impact,
            "difficulty": self.difficulty,
        }


@dataclass
class ScoreReport:
    """Complete result of one scoring pass, handed to the presentation layer"""

    factors: List[FactorScore]
    aggregate: WeightedAggregate
    recommendations: List[Recommendation] = field(default_factory=list)
    weakest_areas: List[str] = field(default_factory=list)

    def factor(self, name: str) -> Optional[FactorScore]:
        return next((f for f in self.factors if f.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factors": [f.to_dict() for f in self.factors],
            "overall": self.aggregate.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "weakestAreas": list(self.weakest_areas),
        }
