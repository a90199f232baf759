"""
Logo storage backends: an in-memory store and a SQLAlchemy-backed store.

Both satisfy the ``LogoStore`` protocol. The backend is picked once at
start-up from the ``DATA_BACKEND`` setting via ``build_logo_store``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Protocol

from sqlalchemy import Column, String, create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from logos.config import Settings
from logos.errors import ConfigError, InvalidPageToken, LogoNotFound, LogoStoreError

logger = logging.getLogger(__name__)

ANONYMOUS = "Anonymous"

# Offsets are bound as signed 64-bit integers by the SQL drivers.
MAX_PAGE_OFFSET = 2**63 - 1


@dataclass
class LogoRecord:
    title: str
    created_by: str = ANONYMOUS
    created_by_id: Optional[str] = None
    image_url: Optional[str] = None
    id: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "createdBy": self.created_by,
            "createdById": self.created_by_id,
            "imageUrl": self.image_url,
        }


Page = tuple[list[LogoRecord], Optional[str]]


class LogoStore(Protocol):
    """Interface every logo backend implements."""

    def list(self, limit: int, page_token: Optional[str] = None) -> Page:
        ...

    def list_by(
        self, owner_id: str, limit: int, page_token: Optional[str] = None
    ) -> Page:
        ...

    def read(self, logo_id: str) -> LogoRecord:
        ...

    def create(self, record: LogoRecord) -> LogoRecord:
        ...

    def update(self, logo_id: str, record: LogoRecord) -> LogoRecord:
        ...

    def delete(self, logo_id: str) -> None:
        ...


def decode_page_token(page_token: Optional[str]) -> int:
    """Turn a page token into a row offset. Empty means the first page."""
    if not page_token:
        return 0
    if not page_token.isdecimal() or len(page_token) > len(str(MAX_PAGE_OFFSET)):
        raise InvalidPageToken(page_token)
    offset = int(page_token)
    if offset > MAX_PAGE_OFFSET:
        raise InvalidPageToken(page_token)
    return offset


def next_page_token(offset: int, limit: int, fetched: int) -> Optional[str]:
    # A short page means there is nothing left to fetch.
    if fetched < limit:
        return None
    return str(offset + fetched)


class InMemoryLogoStore:
    """Simple in-memory store for development and tests."""

    def __init__(self):
        self.logos: Dict[str, LogoRecord] = {}

    def _page(self, records: list[LogoRecord], limit: int, page_token) -> Page:
        offset = decode_page_token(page_token)
        ordered = sorted(records, key=lambda r: (r.title, r.id))
        page = ordered[offset : offset + limit]
        return [replace(r) for r in page], next_page_token(offset, limit, len(page))

    def list(self, limit: int, page_token: Optional[str] = None) -> Page:
        return self._page(list(self.logos.values()), limit, page_token)

    def list_by(
        self, owner_id: str, limit: int, page_token: Optional[str] = None
    ) -> Page:
        owned = [r for r in self.logos.values() if r.created_by_id == owner_id]
        return self._page(owned, limit, page_token)

    def read(self, logo_id: str) -> LogoRecord:
        record = self.logos.get(logo_id)
        if record is None:
            raise LogoNotFound(logo_id)
        return replace(record)

    def create(self, record: LogoRecord) -> LogoRecord:
        stored = replace(record, id=uuid.uuid4().hex)
        self.logos[stored.id] = stored
        return replace(stored)

    def update(self, logo_id: str, record: LogoRecord) -> LogoRecord:
        existing = self.logos.get(logo_id)
        if existing is None:
            raise LogoNotFound(logo_id)
        existing.title = record.title
        existing.image_url = record.image_url
        return replace(existing)

    def delete(self, logo_id: str) -> None:
        if self.logos.pop(logo_id, None) is None:
            raise LogoNotFound(logo_id)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.logos.clear()


class SqlLogoStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL: SQLite works
    out of the box, Postgres needs the ``postgres`` extra
    (``postgresql+psycopg://...``).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ConfigError("DATABASE_URL is required for the sql backend")
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection, otherwise every thread sees an empty db.
            self.engine = create_engine(
                database_url,
                future=True,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(
                database_url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "LogoRow") -> LogoRecord:
        return LogoRecord(
            id=row.id,
            title=row.title,
            created_by=row.created_by,
            created_by_id=row.created_by_id,
            image_url=row.image_url,
        )

    def _page(self, stmt, limit: int, page_token: Optional[str]) -> Page:
        offset = decode_page_token(page_token)
        stmt = stmt.order_by(LogoRow.title.asc(), LogoRow.id.asc())
        try:
            with self.Session() as session:
                rows = session.execute(stmt.limit(limit).offset(offset)).scalars().all()
                records = [self._to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise _backend_error("list", exc) from exc
        return records, next_page_token(offset, limit, len(records))

    def list(self, limit: int, page_token: Optional[str] = None) -> Page:
        return self._page(select(LogoRow), limit, page_token)

    def list_by(
        self, owner_id: str, limit: int, page_token: Optional[str] = None
    ) -> Page:
        stmt = select(LogoRow).where(LogoRow.created_by_id == owner_id)
        return self._page(stmt, limit, page_token)

    def read(self, logo_id: str) -> LogoRecord:
        try:
            with self.Session() as session:
                row = session.get(LogoRow, logo_id)
                if not row:
                    raise LogoNotFound(logo_id)
                return self._to_record(row)
        except SQLAlchemyError as exc:
            raise _backend_error("read", exc) from exc

    def create(self, record: LogoRecord) -> LogoRecord:
        try:
            with self.Session() as session:
                row = LogoRow(
                    id=uuid.uuid4().hex,
                    title=record.title,
                    created_by=record.created_by,
                    created_by_id=record.created_by_id,
                    image_url=record.image_url,
                )
                session.add(row)
                session.commit()
                session.refresh(row)
                return self._to_record(row)
        except SQLAlchemyError as exc:
            raise _backend_error("create", exc) from exc

    def update(self, logo_id: str, record: LogoRecord) -> LogoRecord:
        try:
            with self.Session() as session:
                row = session.get(LogoRow, logo_id)
                if not row:
                    raise LogoNotFound(logo_id)
                row.title = record.title
                row.image_url = record.image_url
                session.commit()
                session.refresh(row)
                return self._to_record(row)
        except SQLAlchemyError as exc:
            raise _backend_error("update", exc) from exc

    def delete(self, logo_id: str) -> None:
        try:
            with self.Session() as session:
                row = session.get(LogoRow, logo_id)
                if not row:
                    raise LogoNotFound(logo_id)
                session.delete(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise _backend_error("delete", exc) from exc


def _backend_error(operation: str, exc: SQLAlchemyError) -> LogoStoreError:
    logger.error("sql %s failed: %s", operation, exc)
    return LogoStoreError(f"Could not {operation} logos")


Base = declarative_base()


class LogoRow(Base):
    __tablename__ = "logos"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False, index=True)
    created_by = Column(String, nullable=False, default=ANONYMOUS)
    created_by_id = Column(String, nullable=True, index=True)
    image_url = Column(String, nullable=True)


BACKENDS: Dict[str, Callable[[Settings], LogoStore]] = {
    "memory": lambda settings: InMemoryLogoStore(),
    "sql": lambda settings: SqlLogoStore(settings.database_url),
}


def build_logo_store(settings: Settings) -> LogoStore:
    """Resolve the configured backend. Called once when the app is built."""
    factory = BACKENDS.get(settings.data_backend)
    if factory is None:
        raise ConfigError(
            f"Unknown DATA_BACKEND {settings.data_backend!r}; "
            f"expected one of {sorted(BACKENDS)}"
        )
    logger.info("Using %s logo backend", settings.data_backend)
    return factory(settings)
