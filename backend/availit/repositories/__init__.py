from .base import RecordStore
from .hospital_availability import (
    HospitalAvailabilityRepository,
    InMemoryHospitalAvailabilityRepository,
    create_hospital_availability_repository,
)
from .memory import InMemoryRecordStore
from .paging import Direction, Order, Page, PageRequest, RecordSequence, Sort
from .sql import SQLRecordStore

__all__ = [
    "RecordStore",
    "SQLRecordStore",
    "InMemoryRecordStore",
    "HospitalAvailabilityRepository",
    "InMemoryHospitalAvailabilityRepository",
    "create_hospital_availability_repository",
    "Direction",
    "Order",
    "Sort",
    "PageRequest",
    "Page",
    "RecordSequence",
]
