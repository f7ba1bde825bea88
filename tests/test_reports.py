import pytest
from models.records import Expense
from models.reports import build_report
from utils.errors import ValidationFailed

def test_monthly_report():
    milk = [{"date": "2024-03-01", "qty": 5}, {"date": "2024-03-02", "qty": "3"},
            {"date": "2024-04-01", "qty": 100}]
    expenses = [
        {"date": "2024-03-20", "category": "Veterinary", "amount": "600"},
        {"date": "2024-02-28", "category": "Feed", "amount": 50},
        {"date": "2024-03-05", "category": "Feed", "amount": 400},
    ]
    report = build_report("2024-03", milk, expenses, rate=50)
    assert report.total_milk == 8
    assert report.total_expense == 1000
    assert report.estimated_income == 400
    assert report.net_profit == -600
    assert [(l.date, l.category, l.amount) for l in report.expense_lines] == [
        ("2024-03-20", "Veterinary", 600.0),
        ("2024-03-05", "Feed", 400.0),
    ]

def test_empty_month():
    report = build_report("2031-07", [], [])
    data = report.to_dict()
    assert data["total_milk"] == 0 and data["total_expense"] == 0
    assert data["estimated_income"] == 0 and data["net_profit"] == 0
    assert data["expense_lines"] == []

def test_accepts_record_objects():
    rows = [Expense("e1", "2024-03-01", "Salary", 250.0)]
    assert build_report("2024-03", [], rows).total_expense == 250

def test_deterministic():
    milk = [{"date": "2024-03-01", "qty": 5}]
    assert build_report("2024-03", milk, []) == build_report("2024-03", milk, [])

def test_invalid_month():
    with pytest.raises(ValidationFailed):
        build_report("2024-13", [], [])
