"""
Generic record-store contract.

Decouples callers from the backing medium: every adapter (SQL, in-memory)
implements the same CRUD and paging operations for an entity type ``T``
keyed by ``ID``.
"""

from __future__ import annotations

import logging
import types
from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from ..errors import ValidationError
from .paging import Page, PageRequest, RecordSequence, Sort

T = TypeVar("T", bound=BaseModel)
ID = TypeVar("ID")

# typing.Union plus PEP 604 unions (int | None) where the interpreter has them
_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))

logger = logging.getLogger(__name__)


class RecordStore(ABC, Generic[T, ID]):
    """
    Base record store.

    Records are pydantic (or SQLModel) models. ``id_field`` names the
    identifier; when the model declares ``version_field`` that field is used
    as an optimistic-lock counter.
    """

    def __init__(self, model: Type[T], id_field: str = "id", version_field: Optional[str] = "version"):
        if id_field not in model.model_fields:
            raise ValueError(f"{model.__name__} has no identifier field {id_field!r}")
        self.model = model
        self.id_field = id_field
        self.version_field = version_field if version_field in model.model_fields else None

    @abstractmethod
    def save(self, record: T) -> T:
        """
        Insert ``record`` when its identifier is unset, otherwise update the
        stored record with that identifier.

        Raises:
            NotFoundError: the identifier is set but not stored.
            ConflictError: the record's version is stale.
        """

    @abstractmethod
    def find_by_id(self, id: ID) -> Optional[T]:
        pass

    @abstractmethod
    def find_all(self, page: Optional[PageRequest] = None, sort: Optional[Sort] = None) -> RecordSequence[T]:
        """Lazy, restartable sequence of records. ``sort`` overrides ``page.sort``."""

    @abstractmethod
    def find_page(self, page: PageRequest) -> Page[T]:
        pass

    @abstractmethod
    def delete_by_id(self, id: ID) -> None:
        """Remove the record; a missing identifier is a no-op."""

    @abstractmethod
    def delete(self, record: T) -> None:
        """
        Remove ``record``. No-op when it has no identifier or is already gone.

        Raises:
            ConflictError: the record's version is stale.
        """

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def exists_by_id(self, id: ID) -> bool:
        pass

    @abstractmethod
    def delete_all(self, records: Optional[Iterable[T]] = None) -> None:
        """Delete ``records``, or every record when none are given."""

    def save_all(self, records: Iterable[T]) -> List[T]:
        return [self.save(r) for r in records]

    def find_all_by_id(self, ids: Iterable[ID]) -> List[T]:
        found = []
        for id in ids:
            record = self.find_by_id(id)
            if record is not None:
                found.append(record)
        return found

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        for id in ids:
            self.delete_by_id(id)

    def identifier_of(self, record: T) -> Optional[ID]:
        return getattr(record, self.id_field, None)

    def version_of(self, record: T) -> Optional[int]:
        if self.version_field is None:
            return None
        return getattr(record, self.version_field, None)

    def _effective_sort(self, page: Optional[PageRequest], sort: Optional[Sort]) -> Optional[Sort]:
        effective = sort if sort else (page.sort if page else None)
        if effective:
            unknown = [f for f in effective.fields() if f not in self.model.model_fields or not self._orderable(f)]
            if unknown:
                raise ValidationError(
                    f"Cannot sort {self.model.__name__} by {', '.join(unknown)}",
                    code="invalid_sort_field",
                    details={"fields": unknown},
                )
        return effective

    def _describe(self, id: Any) -> str:
        return f"{self.model.__name__}({self.id_field}={id!r})"

    def _orderable(self, field: str) -> bool:
        """Scalars order; containers and nested models (JSON on the SQL side) do not."""
        annotation = _strip_optional(self.model.model_fields[field].annotation)
        origin = get_origin(annotation) or annotation
        if origin in (list, dict, set, frozenset, tuple):
            return False
        return not (isinstance(origin, type) and issubclass(origin, BaseModel))

    def _nullable(self, field: str) -> bool:
        annotation = self.model.model_fields[field].annotation
        if annotation is Any or annotation is None or annotation is type(None):
            return True
        return get_origin(annotation) in _UNION_ORIGINS and type(None) in get_args(annotation)


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in _UNION_ORIGINS:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation
