"""
In-memory record store.

Holds records in a dict for tests and local runs. The dict is the medium
here, so its lock plays the role a database's row locking plays for
``SQLRecordStore``.
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Type

from ..errors import ConflictError, NotFoundError
from .base import ID, RecordStore, T
from .paging import Page, PageRequest, RecordSequence, Sort

logger = logging.getLogger(__name__)


class _NoneLast:
    """Sort key wrapper that orders ``None`` after every other value."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def __lt__(self, other: "_NoneLast") -> bool:
        if self.value is None:
            return False
        if other.value is None:
            return True
        return self.value < other.value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, _NoneLast) and self.value == other.value


class InMemoryRecordStore(RecordStore[T, ID]):
    def __init__(
        self,
        model: Type[T],
        id_field: str = "id",
        version_field: Optional[str] = "version",
        id_factory: Optional[Callable[[], ID]] = None,
    ):
        super().__init__(model, id_field=id_field, version_field=version_field)
        self._records: Dict[ID, T] = {}
        self._lock = threading.Lock()
        self._next_id = id_factory or itertools.count(1).__next__

    def _copy(self, record: T) -> T:
        # model_copy would carry over the ORM instance state of table models
        return self.model(**copy.deepcopy(record.model_dump(by_alias=True)))

    def save(self, record: T) -> T:
        stored = self._copy(record)
        self._check_required(stored)
        id = self.identifier_of(stored)
        with self._lock:
            if id is None:
                id = self._next_id()
                setattr(stored, self.id_field, id)
                if self.version_field:
                    setattr(stored, self.version_field, 0)
                action = "Inserted"
            else:
                current = self._records.get(id)
                if current is None:
                    raise NotFoundError(f"{self._describe(id)} does not exist", details={"id": id})
                if self.version_field:
                    self._check_version(id, current, self.version_of(stored))
                    setattr(stored, self.version_field, (self.version_of(current) or 0) + 1)
                action = "Updated"
            self._records[id] = stored
        logger.debug("%s %s", action, self._describe(id))
        return self._copy(stored)

    def _check_required(self, record: T) -> None:
        missing = [
            name for name in self.model.model_fields
            if name not in (self.id_field, self.version_field)
            and getattr(record, name, None) is None
            and not self._nullable(name)
        ]
        if missing:
            raise ConflictError(
                f"{self.model.__name__} write rejected: {', '.join(missing)} must not be null",
                code="integrity_violation",
                details={"fields": missing},
            )

    def _check_version(self, id: ID, current: T, expected: Optional[int]) -> None:
        actual = self.version_of(current)
        if expected is not None and expected != actual:
            raise ConflictError(
                f"{self._describe(id)} was modified concurrently",
                code="version_mismatch",
                details={"id": id, "expected_version": expected, "actual_version": actual},
            )

    def find_by_id(self, id: ID) -> Optional[T]:
        with self._lock:
            record = self._records.get(id)
        return self._copy(record) if record is not None else None

    def exists_by_id(self, id: ID) -> bool:
        with self._lock:
            return id in self._records

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def _snapshot(self) -> List[T]:
        with self._lock:
            return list(self._records.values())

    def find_all(self, page: Optional[PageRequest] = None, sort: Optional[Sort] = None) -> RecordSequence[T]:
        effective = self._effective_sort(page, sort)

        def load() -> Iterator[T]:
            records = self._snapshot()
            if page or effective:
                records.sort(key=lambda r: _NoneLast(getattr(r, self.id_field)))
            # Stable sorts applied from the least significant order outwards
            for order in reversed(effective.orders if effective else ()):
                records.sort(key=lambda r: _NoneLast(getattr(r, order.field)), reverse=order.descending)
            if page:
                records = records[page.offset:page.offset + page.limit]
            for record in records:
                yield self._copy(record)

        return RecordSequence(load, request=page, sort=effective)

    def find_page(self, page: PageRequest) -> Page[T]:
        return Page(list(self.find_all(page)), page, self.count())

    def delete_by_id(self, id: ID) -> None:
        with self._lock:
            removed = self._records.pop(id, None)
        if removed is None:
            logger.debug("Delete of missing %s ignored", self._describe(id))
        else:
            logger.debug("Deleted %s", self._describe(id))

    def delete(self, record: T) -> None:
        id = self.identifier_of(record)
        if id is None:
            return
        with self._lock:
            current = self._records.get(id)
            if current is None:
                logger.debug("Delete of missing %s ignored", self._describe(id))
                return
            if self.version_field:
                self._check_version(id, current, self.version_of(record))
            del self._records[id]
        logger.debug("Deleted %s", self._describe(id))

    def delete_all(self, records: Optional[Iterable[T]] = None) -> None:
        if records is not None:
            for record in records:
                self.delete(record)
            return
        with self._lock:
            deleted = len(self._records)
            self._records.clear()
        logger.debug("Deleted all %d %s records", deleted, self.model.__name__)
