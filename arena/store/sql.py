"""SQL backend: every document is one row of the ``documents`` table."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from arena.errors import StoreError
from arena.store.base import _MISSING, DocumentStore, logger


class Base(DeclarativeBase):
    """Base class for store tables."""
    pass


class Document(Base):
    """A named JSON document (an array of records)."""

    __tablename__ = "documents"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    body: Mapped[Any] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SqlDocumentStore(DocumentStore):
    """Documents kept in one SQL database through an async SQLAlchemy engine."""

    def __init__(self, url: str, cache_ttl: float = 0.0):
        super().__init__(cache_ttl=cache_ttl)
        self.engine = create_async_engine(url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init(self) -> None:
        """Create the documents table."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    async def _load(self, name: str) -> Any:
        try:
            async with self.session_factory() as session:
                row = await session.get(Document, name)
                return row.body if row else _MISSING
        except SQLAlchemyError as e:
            logger.error("Failed to read document %s: %s", name, e)
            raise StoreError(f"Failed to read {name}") from e

    async def _save(self, name: str, data: Any) -> None:
        try:
            async with self.session_factory() as session:
                row = await session.get(Document, name)
                if row:
                    row.body = data
                    row.updated_at = datetime.utcnow()
                else:
                    session.add(Document(name=name, body=data))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to write document %s: %s", name, e)
            raise StoreError(f"Failed to write {name}") from e

    async def _remove(self, name: str) -> bool:
        try:
            async with self.session_factory() as session:
                existing = await session.execute(select(Document.name).where(Document.name == name))
                if existing.scalar_one_or_none() is None:
                    return False
                await session.execute(delete(Document).where(Document.name == name))
                await session.commit()
                return True
        except SQLAlchemyError as e:
            logger.error("Failed to delete document %s: %s", name, e)
            raise StoreError(f"Failed to delete {name}") from e
