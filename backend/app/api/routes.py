import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query

from app.schemas.projection import ErrorDetail, YearlyHistoryResponse
from forecasting import config
from forecasting.errors import (
    InsufficientDataError,
    NoTransactionsError,
    SourceUnavailableError,
    StoreError,
)
from forecasting.pipeline import (
    default_store,
    generate_and_save_projections,
    load_historical_yearly_data,
)
from forecasting.schemas import ProjectionResult
from forecasting.store import LoadStatus, ProjectionStore

logger = logging.getLogger(__name__)

router = APIRouter()

# one generation at a time; a second run would race on the store key
_generation_lock = asyncio.Lock()


def get_store() -> ProjectionStore:
    return default_store()


def get_source() -> Path:
    return config.source_path()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post(
    "/projections",
    response_model=ProjectionResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={409: {"model": ErrorDetail}, 422: {"model": ErrorDetail}, 503: {"model": ErrorDetail}},
)
async def create_projections(
    currency: str = Query(config.DEFAULT_CURRENCY, min_length=1),
    store: ProjectionStore = Depends(get_store),
    source: Path = Depends(get_source),
):
    """
    Train income/expense models on the stored transactions for `currency`
    and persist a fresh 12-month projection.
    """
    if _generation_lock.locked():
        raise HTTPException(status_code=409, detail="Projection generation already in progress")

    async with _generation_lock:
        try:
            return await generate_and_save_projections(currency, source=source, store=store)
        except (NoTransactionsError, InsufficientDataError) as e:
            raise HTTPException(status_code=422, detail=str(e))
        except SourceUnavailableError as e:
            raise HTTPException(status_code=503, detail=str(e))
        except StoreError as e:
            raise HTTPException(status_code=500, detail=str(e))


@router.get(
    "/projections",
    response_model=ProjectionResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorDetail}, 500: {"model": ErrorDetail}},
)
def read_projections(store: ProjectionStore = Depends(get_store)):
    outcome = store.load_status()
    if outcome.status is LoadStatus.ABSENT:
        raise HTTPException(status_code=404, detail="No projections have been generated yet")
    if outcome.status is LoadStatus.CORRUPT:
        logger.error("Stored projections are unreadable: %s", outcome.reason)
        raise HTTPException(status_code=500, detail="Stored projections are unreadable")
    return outcome.value


@router.get(
    "/history/yearly",
    response_model=YearlyHistoryResponse,
    responses={503: {"model": ErrorDetail}},
)
async def yearly_history(
    currency: str = Query(config.DEFAULT_CURRENCY, min_length=1),
    source: Path = Depends(get_source),
):
    try:
        years = await load_historical_yearly_data(currency, source=source)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return YearlyHistoryResponse(currency=currency, years=years)
