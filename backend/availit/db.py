from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlmodel import SQLModel, create_engine

from .config import Settings, get_settings
from .errors import StoreUnavailableError

logger = logging.getLogger(__name__)


def build_engine(
    url: str,
    echo: bool = False,
    connect_timeout: int = 30,
    pool_pre_ping: bool = True,
    **kwargs,
) -> Engine:
    """Create an engine for ``url``; SQLite files get their parent directory created."""
    sa_url = make_url(url)
    connect_args = dict(kwargs.pop("connect_args", {}))
    if sa_url.get_backend_name() == "sqlite":
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", connect_timeout)
        if sa_url.database and sa_url.database != ":memory:":
            Path(sa_url.database).resolve().parent.mkdir(parents=True, exist_ok=True)
    else:
        connect_args.setdefault("connect_timeout", connect_timeout)

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=pool_pre_ping,
        connect_args=connect_args,
        **kwargs,
    )


@lru_cache()
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_timeout=settings.DB_CONNECT_TIMEOUT,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )


def create_db_and_tables(engine: Optional[Engine] = None) -> None:
    # Registers the table models on SQLModel.metadata
    from . import models  # noqa: F401

    try:
        SQLModel.metadata.create_all(engine or get_engine())
    except OperationalError as exc:
        raise StoreUnavailableError(f"Could not create tables: {exc.orig}") from exc


def verify_connection(engine: Optional[Engine] = None) -> None:
    """Fail fast if the database cannot be reached."""
    engine = engine or get_engine()
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
    except DBAPIError as exc:
        logger.exception("Database connectivity check failed")
        raise StoreUnavailableError(
            "Database connectivity check failed",
            details={"url": engine.url.render_as_string(hide_password=True)},
        ) from exc


def engine_for(settings: Settings) -> Engine:
    """The cached engine when ``settings`` are the process settings, else a fresh one."""
    if settings is get_settings():
        return get_engine()
    return build_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_timeout=settings.DB_CONNECT_TIMEOUT,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
    )
