from datetime import date
from typing import Dict, List, Optional
from models.records import Expense, delete_record, read_records, save_record
from utils.file_manager import RecordStore

def all_expenses(store: RecordStore) -> List[Expense]:
    return read_records(store, Expense)

def save_expense(store: RecordStore, data: Dict, today: Optional[date] = None) -> Expense:
    data = {k: v for k, v in data.items() if k != "id"}
    return save_record(store, Expense, data, today)

def delete_expense(store: RecordStore, expense_id: str) -> bool:
    return delete_record(store, Expense.collection, expense_id)

def sorted_expenses(expenses: List[Expense]) -> List[Expense]:
    # ISO dates sort lexicographically
    return sorted(expenses, key=lambda e: e.date, reverse=True)
