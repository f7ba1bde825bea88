from datetime import date
from typing import Dict, List, Optional
from models.animals import milking_animals
from models.records import MilkEntry, Shift, delete_record, read_records, save_record
from utils.errors import ValidationFailed
from utils.file_manager import RecordStore

def all_milk(store: RecordStore) -> List[MilkEntry]:
    return read_records(store, MilkEntry)

def milk_for_date(store: RecordStore, date_iso: str) -> List[MilkEntry]:
    return [m for m in all_milk(store) if m.date == date_iso]

def save_milk_entry(store: RecordStore, data: Dict, today: Optional[date] = None) -> MilkEntry:
    if not milking_animals(store):
        raise ValidationFailed('No milking animals found. Add an animal with "Milking" status first.')
    # entries are append-only, an incoming id is never used to replace
    data = {k: v for k, v in data.items() if k != "id"}
    return save_record(store, MilkEntry, data, today)

def delete_milk_entry(store: RecordStore, entry_id: str) -> bool:
    return delete_record(store, MilkEntry.collection, entry_id)

def sorted_milk(entries: List[MilkEntry]) -> List[MilkEntry]:
    """Newest first; on the same day the Evening shift comes before Morning."""
    def key(m):
        return (m.date, 1 if m.shift == Shift.Evening.value else 0)
    return sorted(entries, key=key, reverse=True)
