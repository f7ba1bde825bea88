from typing import Dict, List, Optional
from models.records import Animal, AnimalStatus, delete_record, read_records, save_record
from utils.file_manager import RecordStore

def all_animals(store: RecordStore) -> List[Animal]:
    return read_records(store, Animal)

def get_animal(store: RecordStore, animal_id: str) -> Optional[Animal]:
    return next((a for a in all_animals(store) if a.id == animal_id), None)

def milking_animals(store: RecordStore) -> List[Animal]:
    return [a for a in all_animals(store) if a.status == AnimalStatus.Milking.value]

def save_animal(store: RecordStore, data: Dict) -> Optional[Animal]:
    return save_record(store, Animal, data)

def delete_animal(store: RecordStore, animal_id: str) -> bool:
    # milk entries keep their animalId and show up as "Unknown"
    return delete_record(store, Animal.collection, animal_id)

def animal_name(animals: List[Animal], animal_id: str) -> str:
    a = next((x for x in animals if x.id == animal_id), None)
    return f"{a.tag_id} ({a.breed})" if a else "Unknown"
