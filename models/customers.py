from typing import Dict, List, Optional
from models.records import Customer, delete_record, read_records, save_record
from utils.file_manager import RecordStore

DAYS_PER_MONTH = 30

def all_customers(store: RecordStore) -> List[Customer]:
    return read_records(store, Customer)

def get_customer(store: RecordStore, customer_id: str) -> Optional[Customer]:
    return next((c for c in all_customers(store) if c.id == customer_id), None)

def save_customer(store: RecordStore, data: Dict) -> Optional[Customer]:
    return save_record(store, Customer, data)

def delete_customer(store: RecordStore, customer_id: str) -> bool:
    return delete_record(store, Customer.collection, customer_id)

def customer_monthly_estimate(customer: Customer) -> float:
    """Expected monthly bill from the customer's daily quota, not actual deliveries."""
    return round(customer.rate * DAYS_PER_MONTH * (customer.daily_qty or 1), 2)
