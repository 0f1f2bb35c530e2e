"""Pytest fixtures for testing"""

import pytest
from typing import Callable, List
from fastapi.testclient import TestClient

from branq_scoring.api.main import create_app
from branq_scoring.domain.models import NormalizedTransaction, ScoringContext

# 2023-11-14T22:13:20Z; every test scores against this fixed clock
AS_OF = 1_700_000_000
DAY = 86_400
WALLET = "WaLLet1111111111111111111111111111111111111"


def make_tx(
    days_ago: float = 1,
    amount: float = 1.0,
    currency: str = "SOL",
    type: str = "TRANSFER",
    **fields,
) -> NormalizedTransaction:
    """Normalized transaction dated relative to AS_OF"""
    timestamp = int(AS_OF - days_ago * DAY) if days_ago is not None else 0
    return NormalizedTransaction(timestamp=timestamp, amount=amount, currency=currency, type=type, **fields)


def raw_tx(days_ago: float = 1, amount=1.0, **fields) -> dict:
    """Raw provider record dated relative to AS_OF"""
    record = {"timestamp": int(AS_OF - days_ago * DAY), "amount": amount, "currency": "SOL", "type": "TRANSFER"}
    record.update(fields)
    return record


@pytest.fixture
def as_of() -> int:
    return AS_OF


@pytest.fixture
def context() -> ScoringContext:
    """Scoring context with a modest balance and no staking"""
    return ScoringContext(as_of=AS_OF, current_balance=10.0, fiat_rate=100.0, wallet_address=WALLET)


@pytest.fixture
def context_factory() -> Callable[..., ScoringContext]:
    def build(**overrides) -> ScoringContext:
        values = {"as_of": AS_OF, "current_balance": 10.0, "fiat_rate": 100.0, "wallet_address": WALLET}
        values.update(overrides)
        return ScoringContext(**values)

    return build


@pytest.fixture
def steady_wallet() -> List[NormalizedTransaction]:
    """A year of weekly inflows and smaller outflows in SOL and USDC"""
    transactions = []
    for week in range(52):
        transactions.append(make_tx(days_ago=week * 7 + 1, amount=2.0, signature=f"in_{week}"))
        transactions.append(make_tx(days_ago=week * 7 + 3, amount=-0.5, signature=f"out_{week}"))
        transactions.append(make_tx(days_ago=week * 7 + 5, amount=50.0, currency="USDC", signature=f"usdc_{week}"))
    return transactions


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client"""
    return TestClient(create_app())
