"""
Chart views.

Two views are offered: money in vs money out, and spending by category.
Both are plain data; the UI decides how to draw the bars.
"""

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from piggybank.aggregation.engine import (
    compute_category_breakdown,
    compute_percentage,
    compute_totals,
)
from piggybank.models.ledger import Transaction


class ChartBar(BaseModel):
    """One labelled bar: an amount and its share of the chart total."""
    model_config = ConfigDict(frozen=True)

    label: str
    amount: Decimal
    percentage: Decimal


class IncomeExpenseChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    income: ChartBar
    expense: ChartBar
    net_balance: Decimal
    has_data: bool


class CategoryChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    bars: list[ChartBar]
    total_expense: Decimal

    @property
    def has_data(self) -> bool:
        return self.total_expense > 0


def income_vs_expense(transactions: Iterable[Transaction]) -> IncomeExpenseChart:
    """Money in and money out, each as a share of all money moved."""
    transactions = list(transactions)
    totals = compute_totals(transactions)
    moved = totals.income + totals.expense

    return IncomeExpenseChart(
        income=ChartBar(
            label="Money In",
            amount=totals.income,
            percentage=compute_percentage(totals.income, moved),
        ),
        expense=ChartBar(
            label="Money Out",
            amount=totals.expense,
            percentage=compute_percentage(totals.expense, moved),
        ),
        net_balance=totals.net,
        has_data=len(transactions) > 0,
    )


def spending_by_category(transactions: Iterable[Transaction]) -> CategoryChart:
    """One bar per expense category, largest first, as a share of all spending."""
    transactions = list(transactions)
    total_expense = compute_totals(transactions).expense
    breakdown = compute_category_breakdown(transactions)

    bars = [
        ChartBar(
            label=category.value,
            amount=amount,
            percentage=compute_percentage(amount, total_expense),
        )
        for category, amount in breakdown.items()
    ]
    return CategoryChart(bars=bars, total_expense=total_expense)
