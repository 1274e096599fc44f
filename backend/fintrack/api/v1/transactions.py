"""Transaction API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.api.deps import get_current_user, get_db
from fintrack.models.user import User
from fintrack.schemas.analytics import AggregationResponse
from fintrack.schemas.transaction import TransactionCreate, TransactionResponse
from fintrack.services.transaction_service import TransactionService

router = APIRouter()


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    time_range: str | None = Query(None, alias="timeRange"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's transactions, newest first.

    ``timeRange`` is one of ``week``, ``month`` or ``year``; omitted or
    unrecognized values return everything.
    """
    service = TransactionService(db)
    return await service.list_transactions(current_user, time_range=time_range)


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    data: TransactionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Record a transaction. ``amount`` may be sent as a number or a numeric string."""
    service = TransactionService(db)
    return await service.create_transaction(data, current_user)


@router.get("/summary", response_model=AggregationResponse)
async def get_summary(
    time_range: str | None = Query(None, alias="timeRange"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Daily income/expense buckets and totals for the selected range."""
    service = TransactionService(db)
    result = await service.summarize(current_user, time_range=time_range)
    return AggregationResponse.from_aggregation(result)
