"""Shared contract for factor calculators"""

import functools
import logging
from typing import Callable, Dict, Mapping, Optional, Sequence

from branq_scoring.domain.bands import factor_band
from branq_scoring.domain.models import FactorBand, FactorScore, NormalizedTransaction, ScoringContext
from branq_scoring.utils.numeric import finite, to_score

Calculator = Callable[[Sequence[NormalizedTransaction], ScoringContext], FactorScore]


def _clean_metrics(metrics: Optional[Mapping[str, float]]) -> Dict[str, float]:
    return {key: round(finite(value), 4) for key, value in (metrics or {}).items()}


def no_data(name: str, metrics: Optional[Mapping[str, float]] = None, summary: str = "No data available") -> FactorScore:
    return FactorScore(
        name=name,
        value=0,
        band=FactorBand.NO_DATA,
        metrics=_clean_metrics(metrics),
        summary=summary,
    )


def scored(name: str, raw_value: float, metrics: Optional[Mapping[str, float]] = None, summary: str = "") -> FactorScore:
    """Build a FactorScore from a raw value: NaN/inf -> 0, rounded, clamped to 0-100"""
    value = to_score(raw_value)
    return FactorScore(
        name=name,
        value=value,
        band=factor_band(value),
        metrics=_clean_metrics(metrics),
        summary=summary,
    )


def factor_calculator(name: str) -> Callable[[Calculator], Calculator]:
    """
    Register a calculator under a factor name and guard it.

    Any exception raised inside the calculator is logged and turned into the
    factor's NoData state, so one bad factor never reaches the aggregator.
    """

    def decorator(fn: Calculator) -> Calculator:
        @functools.wraps(fn)
        def wrapper(transactions: Sequence[NormalizedTransaction], context: ScoringContext) -> FactorScore:
            try:
                return fn(transactions, context)
            except Exception as e:
                logging.warning(
                    f"Factor calculation failed: {e}",
                    exc_info=True,
                    extra={"factor": name, "step": "factor_error"},
                )
                return no_data(name, summary="Calculation error")

        wrapper.factor_name = name
        return wrapper

    return decorator


def to_sol(amount: float, currency: str, fiat_rate: Optional[float]) -> float:
    """
    Express an amount in SOL.

    Non-SOL amounts are divided by the SOL/USD rate; without a usable rate
    they are counted one-to-one.
    """
    rate = finite(fiat_rate)
    if currency.upper() == "SOL" or rate <= 0:
        return amount
    return finite(amount / rate)


def sol_transactions(transactions: Sequence[NormalizedTransaction]) -> list:
    """Native SOL movements with a usable timestamp, newest first"""
    return sorted(
        (tx for tx in transactions if tx.currency == "SOL" and tx.has_timestamp),
        key=lambda tx: (-tx.timestamp, tx.signature, tx.amount),
    )
