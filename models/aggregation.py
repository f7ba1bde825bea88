"""Dashboard figures derived from record snapshots.

Every function here takes the records it needs as arguments. Records can be
the stored dicts or the dataclasses from ``models.records``.
"""
import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from models.animals import all_animals, animal_name
from models.customers import all_customers
from models.expenses import all_expenses
from models.milk import all_milk
from utils.errors import ParseFailed, parse_date, parse_year_month, safe_number
from utils.file_manager import RecordStore

LOG = logging.getLogger(__name__)

# Income is an estimate: milk volume is never linked to the customer who bought it.
MILK_RATE_PER_LITER = 50

SERIES_DAYS = 7
RECENT_ACTIVITY = 5


def as_dict(record) -> Dict:
    return record.to_dict() if hasattr(record, "to_dict") else record


def _record_date(record) -> Optional[date]:
    try:
        return parse_date(as_dict(record).get("date"))
    except ParseFailed:
        return None


def sum_field(records: Iterable, field: str) -> float:
    return sum(safe_number(as_dict(r).get(field)) for r in records)


def on_day(records: Iterable, day: date) -> List:
    return [r for r in records if _record_date(r) == day]


def in_month(records: Iterable, year_month: str) -> List:
    year, month = parse_year_month(year_month)
    out = []
    for r in records:
        d = _record_date(r)
        if d is not None and d.year == year and d.month == month:
            out.append(r)
    return out


def today_milk_total(milk_entries: Iterable, today: date) -> float:
    today = parse_date(today)
    return sum_field(on_day(milk_entries, today), "qty")


def month_milk_total(milk_entries: Iterable, year_month: str) -> float:
    return sum_field(in_month(milk_entries, year_month), "qty")


def month_expense_total(expenses: Iterable, year_month: str) -> float:
    return sum_field(in_month(expenses, year_month), "amount")


def last_7_days_series(milk_entries: Iterable, today: date) -> List[Tuple[str, float]]:
    """Daily milk totals for today-6 .. today, oldest first, labelled MM-DD."""
    today = parse_date(today)
    totals: Dict[date, float] = {}
    for m in milk_entries:
        d = _record_date(m)
        if d is not None:
            totals[d] = totals.get(d, 0.0) + safe_number(as_dict(m).get("qty"))
    series = []
    for offset in range(SERIES_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append((day.strftime("%m-%d"), totals.get(day, 0.0)))
    return series


def estimate_income(total_milk: float, rate: float = MILK_RATE_PER_LITER) -> float:
    return total_milk * rate


def net_profit(income: float, expense_total: float) -> float:
    return income - expense_total


def dashboard_summary(store: RecordStore, today: Optional[date] = None) -> Dict:
    today = parse_date(today or date.today())
    current_month = today.strftime("%Y-%m")
    animals = all_animals(store)
    milk = all_milk(store)
    expenses = all_expenses(store)

    # most recently stored entries, not most recent by date
    recent = []
    for m in reversed(milk[-RECENT_ACTIVITY:]):
        recent.append({
            "date": m.date,
            "type": "Milk Entry",
            "detail": f"{m.qty:.12g}L from {animal_name(animals, m.animal_id)} ({m.shift})",
        })

    return {
        "date": today.isoformat(),
        "total_animals": len(animals),
        "today_milk": round(today_milk_total(milk, today), 1),
        "active_customers": len(all_customers(store)),
        "month": current_month,
        "month_milk": round(month_milk_total(milk, current_month), 2),
        "month_expenses": round(month_expense_total(expenses, current_month), 2),
        "recent_activity": recent,
    }
