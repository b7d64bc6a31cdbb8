from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy.engine import Engine

from ..config import Settings, get_settings
from ..db import create_db_and_tables, engine_for
from ..models import HospitalAvailability
from .memory import InMemoryRecordStore
from .sql import SQLRecordStore

logger = logging.getLogger(__name__)


class HospitalAvailabilityRepository(SQLRecordStore[HospitalAvailability]):
    def __init__(self, engine: Engine):
        super().__init__(engine, HospitalAvailability)


class InMemoryHospitalAvailabilityRepository(InMemoryRecordStore[HospitalAvailability, int]):
    def __init__(self):
        super().__init__(HospitalAvailability)


def create_hospital_availability_repository(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
) -> Union[HospitalAvailabilityRepository, InMemoryHospitalAvailabilityRepository]:
    """
    Build the repository selected by ``STORE_BACKEND``.

    For the SQL backend the tables are created if missing. An explicit
    ``engine`` takes precedence over ``DATABASE_URL``.
    """
    settings = settings or get_settings()
    if settings.STORE_BACKEND == "memory":
        logger.info("Using in-memory hospital availability store")
        return InMemoryHospitalAvailabilityRepository()

    engine = engine or engine_for(settings)
    create_db_and_tables(engine)
    logger.info("Using SQL hospital availability store at %s", engine.url.render_as_string(hide_password=True))
    return HospitalAvailabilityRepository(engine)
