"""POST /v1/score - wallet behavioral credit score endpoint"""

import logging
import time

from fastapi import APIRouter, HTTPException, Request

from branq_scoring.api.dependencies import get_request_id
from branq_scoring.api.v1.schemas import ScoreRequest, ScoreResponse
from branq_scoring.domain.exceptions import ProtocolRegistryError
from branq_scoring.domain.scoring import score_wallet
from branq_scoring.infrastructure.observability.logging import log_score
from branq_scoring.infrastructure.observability.metrics import record_score

router = APIRouter()


@router.post("/score", response_model=ScoreResponse)
def create_score(request_body: ScoreRequest, request: Request):
    """
    Score a wallet from its raw transaction history.

    Flow:
    1. Normalize raw transaction and staking records
    2. Run every factor calculator
    3. Aggregate into overall and credit scores
    4. Build the improvement plan
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        report = score_wallet(
            request_body.transactions,
            staking_records=request_body.staking,
            current_balance=request_body.current_balance,
            fiat_rate=request_body.fiat_rate,
            as_of=request_body.as_of,
            wallet_address=request_body.wallet_address,
        )

    except ProtocolRegistryError as e:
        logging.error(f"Protocol registry unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Scoring configuration unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration = time.time() - start_time
    record_score(report, duration)
    log_score(
        request_id,
        request_body.wallet_address,
        report.aggregate.overall_score,
        report.aggregate.band,
        duration * 1000,
        report.aggregate.factors_used,
    )

    return ScoreResponse.model_validate(report.to_dict())
