"""Aggregation package: balance, totals, breakdowns, goal progress and charts."""

from piggybank.aggregation.charts import (
    CategoryChart,
    ChartBar,
    IncomeExpenseChart,
    income_vs_expense,
    spending_by_category,
)
from piggybank.aggregation.engine import (
    Totals,
    apply_goal_progress,
    compute_balance,
    compute_category_breakdown,
    compute_goal_progress,
    compute_percentage,
    compute_totals,
)

__all__ = [
    "CategoryChart",
    "ChartBar",
    "IncomeExpenseChart",
    "Totals",
    "apply_goal_progress",
    "compute_balance",
    "compute_category_breakdown",
    "compute_goal_progress",
    "compute_percentage",
    "compute_totals",
    "income_vs_expense",
    "spending_by_category",
]
