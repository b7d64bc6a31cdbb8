"""
Shared fixtures: an in-memory SQLite engine and a store parametrized over
both backends, so contract tests run against each medium.
"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from availit.db import build_engine, create_db_and_tables
from availit.repositories import HospitalAvailabilityRepository, InMemoryHospitalAvailabilityRepository

TEST_DATABASE_URL = "sqlite://"


@pytest.fixture
def engine():
    engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    create_db_and_tables(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def sql_store(engine):
    return HospitalAvailabilityRepository(engine)


@pytest.fixture
def memory_store():
    return InMemoryHospitalAvailabilityRepository()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")
