"""Analytics schemas."""

from datetime import date

from pydantic import BaseModel

from fintrack.schemas.transaction import Money
from fintrack.services.aggregation import Aggregation, TimeRange


class DailyBucketItem(BaseModel):
    date: date
    label: str
    income: Money
    expenses: Money


class SummaryTotals(BaseModel):
    total_balance: Money
    total_income: Money
    total_expenses: Money


class AggregationResponse(BaseModel):
    time_range: TimeRange
    label: str
    buckets: list[DailyBucketItem]
    summary: SummaryTotals

    @classmethod
    def from_aggregation(cls, result: Aggregation) -> "AggregationResponse":
        return cls(
            time_range=result.time_range,
            label=result.time_range.label,
            buckets=[
                DailyBucketItem(
                    date=b.date,
                    label=b.label,
                    income=b.income,
                    expenses=b.expenses,
                )
                for b in result.buckets
            ],
            summary=SummaryTotals(
                total_balance=result.summary.total_balance,
                total_income=result.summary.total_income,
                total_expenses=result.summary.total_expenses,
            ),
        )
