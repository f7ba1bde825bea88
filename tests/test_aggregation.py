from datetime import date
from models.aggregation import (
    MILK_RATE_PER_LITER, dashboard_summary, estimate_income, last_7_days_series,
    month_expense_total, month_milk_total, net_profit, today_milk_total,
)
from models.animals import save_animal
from models.milk import save_milk_entry
from utils.file_manager import RecordStore

def test_today_total_only_counts_matching_date():
    milk = [
        {"date": "2024-03-10", "qty": "2.5"},
        {"date": "2024-03-10", "qty": 1},
        {"date": "2024-03-09", "qty": 7},
    ]
    assert today_milk_total(milk, date(2024, 3, 10)) == 3.5
    assert today_milk_total([], date(2024, 3, 10)) == 0

def test_month_milk_total():
    milk = [{"date": "2024-03-01", "qty": 5}, {"date": "2024-03-02", "qty": 3}]
    assert month_milk_total(milk, "2024-03") == 8

def test_month_buckets_match_exactly():
    rows = [
        {"date": "2024-03-31", "amount": 10},
        {"date": "2024-03-31T08:00", "amount": 100},
        {"date": "2024-04-01", "amount": 1000},
        {"date": "2023-03-15", "amount": 10000},
        {"date": "", "amount": 5},
        {"amount": 5},
    ]
    assert month_expense_total(rows, "2024-03") == 10

def test_unparseable_amounts_count_as_zero():
    rows = [{"date": "2024-03-01", "amount": "abc"}, {"date": "2024-03-02", "amount": "40"}]
    assert month_expense_total(rows, "2024-03") == 40

def test_last_7_days_series():
    series = last_7_days_series([{"date": "2024-03-08", "qty": 4}], date(2024, 3, 10))
    assert series == [
        ("03-04", 0.0), ("03-05", 0.0), ("03-06", 0.0), ("03-07", 0.0),
        ("03-08", 4.0), ("03-09", 0.0), ("03-10", 0.0),
    ]

def test_last_7_days_series_crosses_month_and_ignores_outside():
    milk = [
        {"date": "2024-02-28", "qty": 1},
        {"date": "2024-03-01", "qty": 2},
        {"date": "2024-03-01", "qty": 3},
        {"date": "2024-03-04", "qty": 9},
    ]
    series = last_7_days_series(milk, date(2024, 3, 3))
    assert len(series) == 7
    assert series[0][0] == "02-26" and series[-1][0] == "03-03"
    assert dict(series)["02-28"] == 1 and dict(series)["03-01"] == 5
    assert sum(v for _, v in series) == 6

def test_income_and_profit():
    income = estimate_income(8, 50)
    assert income == 400
    assert net_profit(income, 1000) == -600
    assert estimate_income(2) == 2 * MILK_RATE_PER_LITER

def test_dashboard_summary(tmp_path):
    store = RecordStore(tmp_path)
    cow = save_animal(store, {"tagId": "T-1", "breed": "Gir"})
    for i, day in enumerate(["2024-03-01", "2024-03-09", "2024-03-10", "2024-03-10", "2024-03-10", "2024-03-10"]):
        save_milk_entry(store, {"animalId": cow.id, "qty": i + 1, "date": day})
    store.set("expenses", [{"id": "e", "date": "2024-03-02", "category": "Feed", "amount": "250"}])

    summary = dashboard_summary(store, date(2024, 3, 10))
    assert summary["total_animals"] == 1
    assert summary["today_milk"] == 3 + 4 + 5 + 6
    assert summary["month_milk"] == 21
    assert summary["month_expenses"] == 250
    assert summary["active_customers"] == 0
    recent = summary["recent_activity"]
    assert len(recent) == 5
    assert recent[0]["detail"] == "6L from T-1 (Gir) (Morning)"

def test_datetime_reference_is_treated_as_its_date():
    from datetime import datetime
    milk = [{"date": "2024-03-10", "qty": 4}]
    now = datetime(2024, 3, 10, 9)
    assert last_7_days_series(milk, now)[-1] == ("03-10", 4.0)
    assert today_milk_total(milk, now) == 4

def test_dashboard_detail_keeps_full_quantity(tmp_path):
    store = RecordStore(tmp_path)
    cow = save_animal(store, {"tagId": "T-2", "breed": "Murrah"})
    save_milk_entry(store, {"animalId": cow.id, "qty": 1234567.5, "date": "2024-03-10"})
    summary = dashboard_summary(store, date(2024, 3, 10))
    assert summary["recent_activity"][0]["detail"].startswith("1234567.5L from T-2 (Murrah)")
