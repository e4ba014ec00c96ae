"""
Key analysis endpoints - POST /v1/analysis/{weak,strong}
"""

import logging

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from prometheus_client import Counter, Histogram

from picklock.crypto import KeyType, format_int, parse_int, to_pem
from picklock.errors import (
    ConfigError,
    DecodeError,
    FactorizationFailed,
    InvalidBitSize,
    NoInverseExists,
    SearchExhausted,
)
from picklock.models import AnalysisRequest, AnalysisResponse
from picklock.services.descriptor import PickLock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/analysis", tags=["analysis"])

# Prometheus metrics
analyses_total = Counter(
    'picklock_analyses_total',
    'Total key analyses',
    ['strategy', 'outcome']
)
analysis_duration = Histogram(
    'picklock_analysis_seconds',
    'Key analysis duration',
    ['strategy']
)

RESISTED_ERRORS = (FactorizationFailed, SearchExhausted, NoInverseExists)


def _build_lock(request: AnalysisRequest) -> PickLock:
    """Turn a validated request into a PickLock, mapping input errors to 400."""
    try:
        if request.public_key_pem is not None:
            lock = PickLock.from_pem(request.public_key_pem)
        else:
            lock = PickLock.from_exponent_and_modulus(parse_int(request.e, 10), parse_int(request.n, 10))
        if request.max_iterations is not None:
            lock.alter_max_iter(request.max_iterations)
    except (DecodeError, ConfigError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return lock


async def _analyze(request: AnalysisRequest, strategy: str) -> AnalysisResponse:
    lock = _build_lock(request)
    response = AnalysisResponse(
        status="resisted",
        strategy=strategy,
        modulus_bits=lock.n.bit_length(),
        max_iterations=lock.max_iter,
    )

    crack = lock.try_lock_pick_weak_private if strategy == "weak" else lock.try_lock_pick_strong_private
    try:
        with analysis_duration.labels(strategy=strategy).time():
            d = await run_in_threadpool(crack)
    except RESISTED_ERRORS as e:
        analyses_total.labels(strategy=strategy, outcome="resisted").inc()
        logger.info(f"{strategy} analysis of {response.modulus_bits}-bit key: {type(e).__name__}")
        response.reason = type(e).__name__
        response.detail = str(e)
        return response
    except (InvalidBitSize, ConfigError) as e:
        analyses_total.labels(strategy=strategy, outcome="rejected").inc()
        raise HTTPException(status_code=400, detail=str(e))

    analyses_total.labels(strategy=strategy, outcome="cracked").inc()
    logger.warning(f"{strategy} analysis cracked a {response.modulus_bits}-bit key")
    response.status = "cracked"
    response.private_exponent = format_int(d)
    if request.include_pem:
        response.private_key_pem = to_pem(d, KeyType.PRIVATE)
    return response


@router.post("/weak", response_model=AnalysisResponse)
async def analyze_weak(request: AnalysisRequest):
    """
    Run the close-prime (Fermat) crack against a public key.

    **Request Body:**
    - `public_key_pem`: PEM-encoded RSA public key, or
    - `e` and `n`: public exponent and modulus as decimal strings
    - `max_iterations`: optional cap on Fermat steps
    - `include_pem`: also return the recovered exponent as PEM

    **Returns:**
    - `status`: "cracked" with `private_exponent`, or "resisted" with `reason`
    """
    return await _analyze(request, "weak")


@router.post("/strong", response_model=AnalysisResponse)
async def analyze_strong(request: AnalysisRequest):
    """
    Run the experimental concurrent safe-prime guessing crack.

    Best effort only: a properly generated key is expected to resist.
    `max_iterations` caps the number of distinct candidate primes checked.
    """
    return await _analyze(request, "strong")
