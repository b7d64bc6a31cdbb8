import threading
import uuid
from typing import Optional

from pydantic import BaseModel

from availit.models import HospitalAvailability
from availit.repositories import InMemoryRecordStore, Sort


class Ward(BaseModel):
    code: Optional[str] = None
    name: str
    beds: Optional[int] = None


def test_custom_identifier_field_and_factory():
    store = InMemoryRecordStore(Ward, id_field="code", id_factory=lambda: uuid.uuid4().hex)

    saved = store.save(Ward(name="Ward A", beds=5))

    assert isinstance(saved.code, str)
    assert store.find_by_id(saved.code).name == "Ward A"
    # No version field on Ward, so updates are unconditional
    assert store.version_field is None
    assert store.save(saved.model_copy(update={"beds": 6})).beds == 6


def test_none_values_sort_last_ascending_first_descending():
    store = InMemoryRecordStore(Ward, id_field="code", id_factory=lambda: uuid.uuid4().hex)
    store.save_all([Ward(name="b", beds=2), Ward(name="none"), Ward(name="a", beds=1)])

    ascending = [w.name for w in store.find_all(sort=Sort.by("beds"))]
    descending = [w.name for w in store.find_all(sort=Sort.by("beds", direction="desc"))]

    assert ascending == ["a", "b", "none"]
    assert descending == ["none", "b", "a"]


def test_concurrent_inserts_get_distinct_ids(memory_store):
    def insert_many():
        for i in range(25):
            memory_store.save(HospitalAvailability(hospital_name=f"H{i}"))

    threads = [threading.Thread(target=insert_many) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [r.id for r in memory_store.find_all()]
    assert memory_store.count() == 200
    assert len(set(ids)) == 200
