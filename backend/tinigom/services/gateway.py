"""
Persistence gateway over the four collections (transactions, settings, todos, quotes).

One gateway is built per request around a SQLAlchemy session and injected into
the routers and the quote service. Every storage failure is rolled back and
re-raised as StorageUnavailableError so callers can answer 500 without
knowing about SQLAlchemy.
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tinigom.database import Base
from tinigom.models.finance import AppSettings, MotivationalQuote, Todo, Transaction

logger = logging.getLogger(__name__)

SETTINGS_ID = 1


class StorageUnavailableError(Exception):
    """The relational store could not complete the operation."""


class NotFoundError(Exception):
    """No row with the requested id."""


class Collection:
    """Row-level CRUD over one mapped table."""

    def __init__(self, db: Session, model: Type[Base]):
        self.db = db
        self.model = model

    def _fail(self, action: str, e: Exception):
        self.db.rollback()
        logger.error(f"[DB] {action} on {self.model.__tablename__} failed: {e}")
        raise StorageUnavailableError(str(e)) from e

    def list(
        self,
        order_by: Optional[List[Any]] = None,
        filters: Optional[List[Any]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list:
        try:
            query = self.db.query(self.model)
            for criterion in filters or []:
                query = query.filter(criterion)
            if order_by:
                query = query.order_by(*order_by)
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            self._fail("list", e)

    def count(self, filters: Optional[List[Any]] = None) -> int:
        try:
            query = self.db.query(self.model)
            for criterion in filters or []:
                query = query.filter(criterion)
            return query.count()
        except SQLAlchemyError as e:
            self._fail("count", e)

    def get(self, row_id: int):
        try:
            return self.db.get(self.model, row_id)
        except SQLAlchemyError as e:
            self._fail("get", e)

    def insert(self, values: Dict[str, Any]):
        try:
            row = self.model(**values)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            self._fail("insert", e)

    def update(self, row_id: int, values: Dict[str, Any]):
        row = self.get(row_id)
        if row is None:
            raise NotFoundError(f"{self.model.__name__} {row_id} not found")
        try:
            for key, value in values.items():
                setattr(row, key, value)
            self.db.commit()
            self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            self._fail("update", e)

    def delete(self, row_id: int) -> None:
        row = self.get(row_id)
        if row is None:
            raise NotFoundError(f"{self.model.__name__} {row_id} not found")
        try:
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self._fail("delete", e)

    def delete_where(self, filters: List[Any]) -> int:
        try:
            query = self.db.query(self.model)
            for criterion in filters:
                query = query.filter(criterion)
            deleted = query.delete(synchronize_session=False)
            self.db.commit()
            return deleted
        except SQLAlchemyError as e:
            self._fail("delete_where", e)


class PersistenceGateway:
    def __init__(self, db: Session):
        self.db = db
        self.transactions = Collection(db, Transaction)
        self.settings = Collection(db, AppSettings)
        self.todos = Collection(db, Todo)
        self.quotes = Collection(db, MotivationalQuote)

    def get_settings(self) -> AppSettings:
        row = self.settings.get(SETTINGS_ID)
        if row is None:
            raise StorageUnavailableError("Settings row is missing")
        return row

    def ensure_settings(self, default_goal: float, invoice_start: int) -> AppSettings:
        """Create the settings singleton when it does not exist yet."""
        row = self.settings.get(SETTINGS_ID)
        if row is None:
            logger.info(f"[DB] Creating settings row with goal {default_goal:,.0f}")
            row = self.settings.insert({
                "id": SETTINGS_ID,
                "savings_goal": default_goal,
                "last_invoice_number": invoice_start,
            })
        return row
