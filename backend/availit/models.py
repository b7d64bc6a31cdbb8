from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class HospitalAvailability(SQLModel, table=True):
    __tablename__ = "hospital_availability"
    # Identifiers are never handed out twice, even after the highest one is deleted
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    hospital_name: str = Field(index=True)
    total_beds: int = 0
    available_beds: int = 0
    oxygen_available: bool = False
    address: str = ""
    contact_number: str = ""
    icu_beds: int = 0
    ventilators: int = 0
    locations: List[Any] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    version: Optional[int] = Field(default=None)
