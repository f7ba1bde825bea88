from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from models.aggregation import (
    MILK_RATE_PER_LITER,
    as_dict,
    sum_field,
    estimate_income,
    in_month,
    net_profit,
)
from utils.errors import safe_number


@dataclass(frozen=True)
class ExpenseLine:
    date: str
    category: str
    amount: float


@dataclass
class ReportPayload:
    month: str
    total_milk: float
    total_expense: float
    estimated_income: float
    net_profit: float
    rate: float
    expense_lines: List[ExpenseLine] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "month": self.month,
            "total_milk": round(self.total_milk, 2),
            "total_expense": round(self.total_expense, 2),
            "estimated_income": round(self.estimated_income, 2),
            "net_profit": round(self.net_profit, 2),
            "rate": self.rate,
            "expense_lines": [
                {"date": e.date, "category": e.category, "amount": e.amount}
                for e in self.expense_lines
            ],
        }


def build_report(year_month: str, milk_entries: Iterable, expenses: Iterable,
                 rate: float = MILK_RATE_PER_LITER) -> ReportPayload:
    """Monthly production/expense report; expense lines keep their stored order."""
    milk = in_month(milk_entries, year_month)
    month_expenses = in_month(expenses, year_month)
    total_milk = sum_field(milk, "qty")
    total_expense = sum_field(month_expenses, "amount")
    income = estimate_income(total_milk, rate)
    lines = []
    for e in month_expenses:
        row = as_dict(e)
        lines.append(ExpenseLine(row.get("date"), row.get("category"), safe_number(row.get("amount"))))
    return ReportPayload(
        month=year_month,
        total_milk=total_milk,
        total_expense=total_expense,
        estimated_income=income,
        net_profit=net_profit(income, total_expense),
        rate=rate,
        expense_lines=lines,
    )
