"""Table-level query surface of the backend.

Controllers never touch the SQLAlchemy session directly; they go through
``TableClient`` so every remote call is attempted once, and a failure always
arrives as a ``BackendError``. A single-row lookup that matches nothing
raises ``RecordNotFoundError``, which callers can tell apart from a generic
failure by its ``code``.
"""

import logging
from contextlib import contextmanager
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.exceptions import BackendError, RecordNotFoundError

logger = logging.getLogger(__name__)


class TableClient:
    """Issues reads and writes against the portal tables."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _remote_call(self, action: str, table: str):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise BackendError(f"Failed to {action} '{table}': {exc.__class__.__name__}") from exc

    def select(self, model, *criteria, order_by=None, descending: bool = False, limit: int | None = None) -> list:
        with self._remote_call("query", model.__tablename__):
            query = self.db.query(model).filter(*criteria)
            if order_by is not None:
                query = query.order_by(order_by.desc() if descending else order_by.asc())
            if limit is not None:
                query = query.limit(limit)
            return query.all()

    def maybe_single(self, model, **filters):
        with self._remote_call("query", model.__tablename__):
            return self.db.query(model).filter_by(**filters).one_or_none()

    def single(self, model, **filters):
        row = self.maybe_single(model, **filters)
        if row is None:
            raise RecordNotFoundError(model.__tablename__, filters)
        return row

    def select_in(self, model, column: str, values: Iterable) -> list:
        """Fetch every row whose ``column`` is one of ``values`` in a single query."""
        keys = {value for value in values if value is not None}
        if not keys:
            return []
        with self._remote_call("query", model.__tablename__):
            return self.db.query(model).filter(getattr(model, column).in_(keys)).all()

    def count(self, model, *criteria) -> int:
        with self._remote_call("count", model.__tablename__):
            return self.db.query(func.count()).select_from(model).filter(*criteria).scalar() or 0

    def insert(self, *rows) -> list:
        """Insert all rows in one transaction."""
        table = ", ".join(sorted({row.__tablename__ for row in rows}))
        with self._remote_call("insert into", table):
            self.db.add_all(rows)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)
        return list(rows)

    def update(self, model, values: dict, **filters) -> int:
        with self._remote_call("update", model.__tablename__):
            updated = self.db.query(model).filter_by(**filters).update(values, synchronize_session="fetch")
            self.db.commit()
        logger.debug("Updated %s row(s) in %s where %s", updated, model.__tablename__, filters)
        return updated

    def delete(self, model, **filters) -> int:
        # Rows are deleted one by one through the ORM so relationship cascades run.
        with self._remote_call("delete from", model.__tablename__):
            rows = self.db.query(model).filter_by(**filters).all()
            for row in rows:
                self.db.delete(row)
            self.db.commit()
        return len(rows)
