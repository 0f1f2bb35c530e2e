"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accept and emit camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreRequest(CamelModel):
    """Request body for POST /v1/score"""

    wallet_address: str = Field("", description="Wallet the transactions belong to")
    # Individual records stay untyped: malformed ones degrade inside the normalizer
    transactions: List[Any] = Field(..., description="Raw provider transaction records")
    staking: List[Any] = Field(default_factory=list, description="Raw staking records")
    current_balance: float = Field(0.0, description="Current SOL balance")
    fiat_rate: Optional[float] = Field(None, description="USD per SOL")
    as_of: Optional[int] = Field(None, gt=0, description="Scoring reference time, epoch seconds")


class FactorSchema(CamelModel):
    name: str
    value: int
    band: str
    metrics: Dict[str, float]
    summary: str = ""


class OverallSchema(CamelModel):
    overall_score: int
    credit_score: int
    band: str
    credit_band: str
    factors_used: int


class RecommendationSchema(CamelModel):
    factor: str
    title: str
    description: str
    impact: str
    difficulty: str


class ScoreResponse(CamelModel):
    """Response for POST /v1/score"""

    factors: List[FactorSchema]
    overall: OverallSchema
    recommendations: List[RecommendationSchema]
    weakest_areas: List[str]
