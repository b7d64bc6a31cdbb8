import logging

from availit.config import Settings
from availit.logging_config import setup_logging
from availit.models import HospitalAvailability
from availit.repositories import (
    HospitalAvailabilityRepository,
    InMemoryHospitalAvailabilityRepository,
    create_hospital_availability_repository,
)


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./other.db")
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("DEBUG", "true")

    settings = Settings(_env_file=None)

    assert settings.DATABASE_URL == "sqlite:///./other.db"
    assert settings.STORE_BACKEND == "memory"
    assert settings.DEBUG is True


def test_factory_builds_memory_store():
    repo = create_hospital_availability_repository(Settings(_env_file=None, STORE_BACKEND="memory"))

    assert isinstance(repo, InMemoryHospitalAvailabilityRepository)
    assert repo.save(HospitalAvailability(hospital_name="Ward A", total_beds=5)).id == 1


def test_factory_builds_sql_store_and_tables(tmp_path):
    settings = Settings(_env_file=None, DATABASE_URL=f"sqlite:///{tmp_path / 'availit.db'}")

    repo = create_hospital_availability_repository(settings)

    assert isinstance(repo, HospitalAvailabilityRepository)
    assert repo.count() == 0
    repo.engine.dispose()


def test_factory_prefers_explicit_engine(engine):
    repo = create_hospital_availability_repository(Settings(_env_file=None), engine=engine)

    assert repo.engine is engine


def test_setup_logging_levels():
    setup_logging(Settings(_env_file=None, DEBUG=True))
    assert logging.getLogger("availit").level == logging.DEBUG

    setup_logging(Settings(_env_file=None, DEBUG=False))
    assert logging.getLogger("availit").level == logging.INFO
