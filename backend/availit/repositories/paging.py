"""
Paging and sorting value types shared by every record store.

``Sort.parse`` accepts the ``field,direction`` expressions clients send as
query parameters (``hospitalName,asc``); camelCase names are mapped to the
snake_case attributes of the entity.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar, Union

from ..errors import ValidationError

T = TypeVar("T")

# "hospitalName" -> hospital_Name, "ICUBeds" -> ICU_Beds
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Union[str, "Direction"]) -> "Direction":
        if isinstance(value, Direction):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Invalid sort direction: {value!r}",
                code="invalid_sort_direction",
            )


@dataclass(frozen=True)
class Order:
    field: str
    direction: Direction = Direction.ASC

    @property
    def descending(self) -> bool:
        return self.direction is Direction.DESC


@dataclass(frozen=True)
class Sort:
    orders: Tuple[Order, ...] = ()

    @classmethod
    def by(cls, *fields: str, direction: Union[str, Direction] = Direction.ASC) -> "Sort":
        d = Direction.parse(direction)
        return cls(tuple(Order(to_snake(f), d) for f in fields))

    @classmethod
    def parse(cls, expressions: Union[str, Iterable[str], None]) -> "Sort":
        """
        Parse ``"field[,dir]"`` expressions.

        A single expression may also list several fields sharing one trailing
        direction, e.g. ``"totalBeds,hospitalName,desc"``.
        """
        if expressions is None:
            return cls()
        if isinstance(expressions, str):
            expressions = [expressions]

        orders: List[Order] = []
        for expr in expressions:
            parts = [p.strip() for p in expr.split(",") if p.strip()]
            if not parts:
                continue
            direction = Direction.ASC
            if parts[-1].lower() in (Direction.ASC.value, Direction.DESC.value):
                direction = Direction.parse(parts.pop())
            if not parts:
                raise ValidationError(f"Sort expression has no field: {expr!r}", code="invalid_sort")
            orders.extend(Order(to_snake(p), direction) for p in parts)
        return cls(tuple(orders))

    def __bool__(self) -> bool:
        return bool(self.orders)

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)

    def fields(self) -> List[str]:
        return [o.field for o in self.orders]


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 20
    sort: Optional[Sort] = None

    def __post_init__(self):
        if self.page < 0:
            raise ValidationError("Page index must not be negative", code="invalid_page", details={"page": self.page})
        if self.size < 1:
            raise ValidationError("Page size must be at least 1", code="invalid_page_size", details={"size": self.size})

    @classmethod
    def of_offset(cls, offset: int, limit: int, sort: Optional[Sort] = None) -> "PageRequest":
        if limit < 1:
            raise ValidationError("Limit must be at least 1", code="invalid_page_size", details={"limit": limit})
        if offset < 0 or offset % limit:
            raise ValidationError(
                "Offset must be a non-negative multiple of the limit",
                code="invalid_offset",
                details={"offset": offset, "limit": limit},
            )
        return cls(page=offset // limit, size=limit, sort=sort)

    @property
    def offset(self) -> int:
        return self.page * self.size

    @property
    def limit(self) -> int:
        return self.size

    def next(self) -> "PageRequest":
        return PageRequest(self.page + 1, self.size, self.sort)


@dataclass
class Page(Generic[T]):
    content: List[T]
    request: PageRequest
    total_elements: int

    @property
    def number(self) -> int:
        return self.request.page

    @property
    def size(self) -> int:
        return self.request.size

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.total_elements else 0

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)


@dataclass
class RecordSequence(Generic[T]):
    """
    Lazy view over a ``find_all`` query.

    Nothing is read until iteration starts, and every new iteration reads the
    medium again, so the sequence reflects writes made between passes.
    """

    loader: Callable[[], Iterator[T]]
    request: Optional[PageRequest] = None
    sort: Optional[Sort] = None

    def __iter__(self) -> Iterator[T]:
        return self.loader()

    def to_list(self) -> List[T]:
        return list(self)
