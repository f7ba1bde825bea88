"""Record types for the four collections and the read/write boundary.

Records are kept on disk with camelCase field names. Reading is
lenient (missing fields get defaults, bad numbers count as 0); saving goes
through ``validate`` which raises ``ValidationFailed`` before anything is
written.
"""
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from utils.errors import ParseFailed, ValidationFailed, parse_date, safe_number, to_number
from utils.file_manager import RecordStore
from utils.ids import new_id

LOG = logging.getLogger(__name__)


class AnimalType(str, Enum):
    Cow = "Cow"
    Buffalo = "Buffalo"


class AnimalStatus(str, Enum):
    Milking = "Milking"
    Dry = "Dry"
    Sick = "Sick"


class Shift(str, Enum):
    Morning = "Morning"
    Evening = "Evening"


class ExpenseCategory(str, Enum):
    Feed = "Feed"
    Veterinary = "Veterinary"
    Maintenance = "Maintenance"
    Salary = "Salary"
    Other = "Other"


def _text(data: Dict, key: str, default: str = "") -> str:
    value = data.get(key)
    return default if value is None else str(value).strip()


def _choice(enum_cls, value, default):
    if value in (None, ""):
        return default.value
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationFailed(f"{enum_cls.__name__} must be one of {allowed}, got {value!r}")


def _positive(value, message: str) -> float:
    if value in (None, ""):
        raise ValidationFailed(message)
    try:
        number = to_number(value)
    except ParseFailed:
        raise ValidationFailed(message)
    if number <= 0:
        raise ValidationFailed(message)
    return number


def _date_field(value, today: Optional[date]) -> str:
    if value in (None, ""):
        return (today or date.today()).isoformat()
    try:
        return parse_date(value).isoformat()
    except ParseFailed:
        raise ValidationFailed(f"Date must look like YYYY-MM-DD, got {value!r}")


@dataclass
class Animal:
    id: str
    tag_id: str
    type: str = AnimalType.Cow.value
    breed: str = ""
    age: Optional[float] = None
    status: str = AnimalStatus.Milking.value

    collection = "animals"

    @classmethod
    def from_dict(cls, data: Dict) -> "Animal":
        age = data.get("age")
        return cls(
            id=_text(data, "id"),
            tag_id=_text(data, "tagId"),
            type=_text(data, "type", AnimalType.Cow.value),
            breed=_text(data, "breed"),
            age=None if age in (None, "") else safe_number(age),
            status=_text(data, "status", AnimalStatus.Milking.value),
        )

    @classmethod
    def validate(cls, data: Dict, record_id: str, today: Optional[date] = None) -> "Animal":
        tag = _text(data, "tagId")
        if not tag:
            raise ValidationFailed("Tag ID is required")
        age = data.get("age")
        if age in (None, ""):
            age = None
        else:
            try:
                age = to_number(age)
            except ParseFailed:
                raise ValidationFailed("Age must be a number")
            if age < 0:
                raise ValidationFailed("Age cannot be negative")
        return cls(
            id=record_id,
            tag_id=tag,
            type=_choice(AnimalType, data.get("type"), AnimalType.Cow),
            breed=_text(data, "breed"),
            age=age,
            status=_choice(AnimalStatus, data.get("status"), AnimalStatus.Milking),
        )

    def to_dict(self) -> Dict:
        return {"id": self.id, "tagId": self.tag_id, "type": self.type,
                "breed": self.breed, "age": self.age, "status": self.status}


@dataclass
class MilkEntry:
    id: str
    date: str
    shift: str
    animal_id: str
    qty: float

    collection = "milk"

    @classmethod
    def from_dict(cls, data: Dict) -> "MilkEntry":
        return cls(
            id=_text(data, "id"),
            date=_text(data, "date"),
            shift=_text(data, "shift", Shift.Morning.value),
            animal_id=_text(data, "animalId"),
            qty=safe_number(data.get("qty")),
        )

    @classmethod
    def validate(cls, data: Dict, record_id: str, today: Optional[date] = None) -> "MilkEntry":
        return cls(
            id=record_id,
            date=_date_field(data.get("date"), today),
            shift=_choice(Shift, data.get("shift"), Shift.Morning),
            animal_id=_text(data, "animalId"),
            qty=_positive(data.get("qty"), "Valid Quantity is required"),
        )

    def to_dict(self) -> Dict:
        return {"id": self.id, "date": self.date, "shift": self.shift,
                "animalId": self.animal_id, "qty": self.qty}


@dataclass
class Customer:
    id: str
    name: str
    rate: float
    phone: str = ""
    daily_qty: float = 1.0

    collection = "customers"

    @classmethod
    def from_dict(cls, data: Dict) -> "Customer":
        daily = data.get("dailyQty")
        return cls(
            id=_text(data, "id"),
            name=_text(data, "name"),
            rate=safe_number(data.get("rate")),
            phone=_text(data, "phone"),
            daily_qty=1.0 if daily in (None, "") else safe_number(daily),
        )

    @classmethod
    def validate(cls, data: Dict, record_id: str, today: Optional[date] = None) -> "Customer":
        name = _text(data, "name")
        if not name or data.get("rate") in (None, ""):
            raise ValidationFailed("Name and Rate are required")
        daily = data.get("dailyQty")
        return cls(
            id=record_id,
            name=name,
            rate=_positive(data.get("rate"), "Rate must be a positive number"),
            phone=_text(data, "phone"),
            daily_qty=1.0 if daily in (None, "") else _positive(daily, "Daily quantity must be a positive number"),
        )

    def to_dict(self) -> Dict:
        return {"id": self.id, "name": self.name, "phone": self.phone,
                "dailyQty": self.daily_qty, "rate": self.rate}


@dataclass
class Expense:
    id: str
    date: str
    category: str
    amount: float
    details: str = ""

    collection = "expenses"

    @classmethod
    def from_dict(cls, data: Dict) -> "Expense":
        return cls(
            id=_text(data, "id"),
            date=_text(data, "date"),
            category=_text(data, "category", ExpenseCategory.Other.value),
            amount=safe_number(data.get("amount")),
            details=_text(data, "details"),
        )

    @classmethod
    def validate(cls, data: Dict, record_id: str, today: Optional[date] = None) -> "Expense":
        return cls(
            id=record_id,
            date=_date_field(data.get("date"), today),
            category=_choice(ExpenseCategory, data.get("category"), ExpenseCategory.Feed),
            amount=_positive(data.get("amount"), "Amount is required"),
            details=_text(data, "details"),
        )

    def to_dict(self) -> Dict:
        return {"id": self.id, "date": self.date, "category": self.category,
                "details": self.details, "amount": self.amount}


def read_records(store: RecordStore, record_cls) -> List:
    return [record_cls.from_dict(r) for r in store.get(record_cls.collection)]


def save_record(store: RecordStore, record_cls, data: Dict, today: Optional[date] = None):
    """Insert when ``data`` has no id, otherwise replace the record with that id.

    Returns the saved record, or None when the id to replace is not stored.
    """
    record_id = _text(data, "id")
    record = record_cls.validate(data, record_id or new_id(), today)
    rows = store.get(record_cls.collection)
    if record_id:
        idx = next((i for i, r in enumerate(rows) if r.get("id") == record_id), None)
        if idx is None:
            LOG.info("No %s record with id %s to replace", record_cls.collection, record_id)
            return None
        rows[idx] = record.to_dict()
    else:
        rows.append(record.to_dict())
    store.set(record_cls.collection, rows)
    LOG.info("Saved %s record %s", record_cls.collection, record.id)
    return record


def delete_record(store: RecordStore, collection: str, record_id: str) -> bool:
    rows = store.get(collection)
    idx = next((i for i, r in enumerate(rows) if r.get("id") == record_id), None)
    if idx is None:
        return False
    del rows[idx]
    store.set(collection, rows)
    LOG.info("Deleted %s record %s", collection, record_id)
    return True
