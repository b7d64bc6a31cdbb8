"""
SQL-backed record store on SQLModel/SQLAlchemy.

Each operation runs in its own session and commits before returning.
Updates and versioned deletes are conditional statements, so concurrent
writers to the same row are serialized by the database itself.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional, Type

from sqlalchemy import JSON, delete, func, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError
from sqlmodel import Session, SQLModel, select

from ..errors import ConflictError, NotFoundError, StoreUnavailableError
from .base import RecordStore, T
from .paging import Page, PageRequest, RecordSequence, Sort

logger = logging.getLogger(__name__)


class SQLRecordStore(RecordStore[T, Any]):
    """Record store for a SQLModel table model."""

    def __init__(
        self,
        engine: Engine,
        model: Type[SQLModel],
        id_field: str = "id",
        version_field: Optional[str] = "version",
    ):
        super().__init__(model, id_field=id_field, version_field=version_field)
        self.engine = engine
        self.table = model.__table__

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with Session(self.engine, expire_on_commit=False) as session:
            # Connect up front so an unreachable database is told apart from SQL faults
            try:
                session.connection()
            except DBAPIError as exc:
                raise self._unavailable(exc) from exc
            try:
                yield session
            except IntegrityError as exc:
                raise ConflictError(
                    f"{self.model.__name__} write rejected by the database: {exc.orig}",
                    code="integrity_violation",
                ) from exc
            except DBAPIError as exc:
                if exc.connection_invalidated or isinstance(exc, InterfaceError):
                    raise self._unavailable(exc) from exc
                raise

    def _unavailable(self, exc: DBAPIError) -> StoreUnavailableError:
        logger.warning("Database unavailable for %s: %s", self.model.__name__, exc.orig)
        return StoreUnavailableError(
            f"Database unavailable: {exc.orig}",
            details={"url": self.engine.url.render_as_string(hide_password=True)},
        )

    def _orderable(self, field: str) -> bool:
        column = self.table.c.get(field)
        if column is not None and isinstance(column.type, JSON):
            return False
        return super()._orderable(field)

    def save(self, record: T) -> T:
        id = self.identifier_of(record)
        if id is None:
            return self._insert(record)
        return self._update(id, record)

    def _insert(self, record: T) -> T:
        data = record.model_dump(exclude={self.id_field})
        if self.version_field:
            data[self.version_field] = 0
        entity = self.model(**data)
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
        logger.debug("Inserted %s", self._describe(self.identifier_of(entity)))
        return entity

    def _update(self, id: Any, record: T) -> T:
        pk = self.table.c[self.id_field]
        excluded = {self.id_field}
        stmt = update(self.table).where(pk == id)

        expected = self.version_of(record)
        if self.version_field:
            excluded.add(self.version_field)
            version_col = self.table.c[self.version_field]
            if expected is not None:
                stmt = stmt.where(version_col == expected)

        values = record.model_dump(exclude=excluded)
        if self.version_field:
            values[self.version_field] = func.coalesce(version_col, 0) + 1

        with self._session() as session:
            result = session.connection().execute(stmt.values(**values))
            if result.rowcount == 0:
                self._raise_missing_or_stale(session, id, expected)
            session.commit()
            entity = session.get(self.model, id, populate_existing=True)
        logger.debug("Updated %s", self._describe(id))
        return entity

    def _raise_missing_or_stale(self, session: Session, id: Any, expected: Optional[int]) -> None:
        current = session.get(self.model, id)
        if current is None:
            raise NotFoundError(f"{self._describe(id)} does not exist", details={"id": id})
        raise ConflictError(
            f"{self._describe(id)} was modified concurrently",
            code="version_mismatch",
            details={"id": id, "expected_version": expected, "actual_version": self.version_of(current)},
        )

    def find_by_id(self, id: Any) -> Optional[T]:
        with self._session() as session:
            return session.get(self.model, id)

    def exists_by_id(self, id: Any) -> bool:
        pk = getattr(self.model, self.id_field)
        with self._session() as session:
            return session.exec(select(pk).where(pk == id).limit(1)).first() is not None

    def count(self) -> int:
        with self._session() as session:
            return session.exec(select(func.count()).select_from(self.model)).one()

    def find_all(self, page: Optional[PageRequest] = None, sort: Optional[Sort] = None) -> RecordSequence[T]:
        effective = self._effective_sort(page, sort)
        stmt = select(self.model)

        order_by = []
        for order in effective or ():
            col = getattr(self.model, order.field)
            # NULLs order as the greatest value on every dialect
            if order.descending:
                order_by.extend([col.is_(None).desc(), col.desc()])
            else:
                order_by.extend([col.is_(None), col.asc()])
        if (page or effective) and self.id_field not in (effective.fields() if effective else []):
            order_by.append(getattr(self.model, self.id_field).asc())
        if order_by:
            stmt = stmt.order_by(*order_by)
        if page:
            stmt = stmt.offset(page.offset).limit(page.limit)

        def load() -> Iterator[T]:
            with self._session() as session:
                for entity in session.exec(stmt):
                    yield entity

        return RecordSequence(load, request=page, sort=effective)

    def find_page(self, page: PageRequest) -> Page[T]:
        content = list(self.find_all(page))
        return Page(content, page, self.count())

    def delete_by_id(self, id: Any) -> None:
        pk = self.table.c[self.id_field]
        with self._session() as session:
            deleted = session.connection().execute(delete(self.table).where(pk == id)).rowcount
            session.commit()
        if deleted == 0:
            logger.debug("Delete of missing %s ignored", self._describe(id))
        else:
            logger.debug("Deleted %s", self._describe(id))

    def delete(self, record: T) -> None:
        id = self.identifier_of(record)
        if id is None:
            return
        expected = self.version_of(record)
        if expected is None:
            self.delete_by_id(id)
            return

        stmt = delete(self.table).where(
            self.table.c[self.id_field] == id,
            self.table.c[self.version_field] == expected,
        )
        with self._session() as session:
            result = session.connection().execute(stmt)
            if result.rowcount == 0:
                if session.get(self.model, id) is None:
                    logger.debug("Delete of missing %s ignored", self._describe(id))
                    return
                self._raise_missing_or_stale(session, id, expected)
            session.commit()
        logger.debug("Deleted %s", self._describe(id))

    def delete_all(self, records: Optional[Iterable[T]] = None) -> None:
        if records is not None:
            for record in records:
                self.delete(record)
            return
        with self._session() as session:
            deleted = session.connection().execute(delete(self.table)).rowcount
            session.commit()
        logger.debug("Deleted all %d %s records", deleted, self.model.__name__)
