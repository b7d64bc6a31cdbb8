from __future__ import annotations

from typing import Any, Generic, List, Optional, TypeVar, Union

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .config import Settings, get_settings
from .errors import ValidationError
from .models import HospitalAvailability
from .repositories.paging import Page, PageRequest, Sort

ItemT = TypeVar("ItemT")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HospitalAvailabilityIn(CamelModel):
    """Create/update payload, validated the way the hospital form validates it."""

    hospital_name: str = Field(..., min_length=1, max_length=255)
    total_beds: int = Field(0, ge=0)
    available_beds: int = Field(0, ge=0)
    oxygen_available: bool = False
    address: str = Field(..., min_length=1, max_length=500)
    contact_number: str = Field(..., min_length=1, max_length=30)
    icu_beds: int = Field(0, ge=0)
    ventilators: int = Field(0, ge=0)
    locations: List[Any] = Field(default_factory=list)
    version: Optional[int] = None

    @field_validator("hospital_name", "address", "contact_number")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @classmethod
    def parse(cls, payload: dict) -> "HospitalAvailabilityIn":
        try:
            return cls.model_validate(payload)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Invalid hospital availability",
                details={"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    def to_entity(self, id: Optional[int] = None) -> HospitalAvailability:
        return HospitalAvailability(id=id, **self.model_dump())


class HospitalAvailabilityOut(CamelModel):
    id: int
    hospital_name: str
    total_beds: int
    available_beds: int
    oxygen_available: bool
    address: str
    contact_number: str
    icu_beds: int
    ventilators: int
    locations: List[Any]
    version: Optional[int] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PageOut(CamelModel, Generic[ItemT]):
    content: List[ItemT]
    total_elements: int
    total_pages: int
    number: int
    size: int
    first: bool
    last: bool


def hospital_page_out(page: Page[HospitalAvailability]) -> PageOut[HospitalAvailabilityOut]:
    return PageOut[HospitalAvailabilityOut](
        content=[HospitalAvailabilityOut.model_validate(h) for h in page.content],
        total_elements=page.total_elements,
        total_pages=page.total_pages,
        number=page.number,
        size=page.size,
        first=not page.has_previous,
        last=not page.has_next,
    )


class PageQuery(BaseModel):
    """``page``/``size``/``sort`` query values as sent by the client (``sort=hospitalName,asc``)."""

    page: int = Field(0, ge=0)
    size: Optional[int] = Field(None, ge=1)
    sort: Union[str, List[str], None] = None

    def to_request(self, settings: Optional[Settings] = None) -> PageRequest:
        settings = settings or get_settings()
        size = min(self.size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        return PageRequest(page=self.page, size=size, sort=Sort.parse(self.sort) or None)
