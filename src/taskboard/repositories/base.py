"""Shared plumbing for the SQLModel repositories."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.sql import Executable
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import PersistenceError

RowT = TypeVar("RowT", bound=SQLModel)


@contextmanager
def _translate_driver_errors(context: str) -> Iterator[None]:
    """Driver failures become ``PersistenceError``; integrity violations pass through as 409s."""
    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as exc:
        raise PersistenceError(context) from exc


class BaseRepository(Generic[RowT]):
    """Query helpers bound to one ``AsyncSession`` and one table."""

    def __init__(self, session: AsyncSession, model_type: type[RowT]) -> None:
        self._session = session
        self._table = model_type

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def _execute(self, statement: Executable, *, context: str) -> Result[Any]:
        with _translate_driver_errors(context):
            return await self._session.execute(statement)

    async def get(self, row_id: int) -> RowT | None:
        with _translate_driver_errors(f"Error fetching {self._table.__tablename__}"):
            return await self._session.get(self._table, row_id)

    async def add(self, row: RowT) -> RowT:
        """Stage ``row`` and flush so its generated id is populated."""
        self._session.add(row)
        await self._session.flush()
        return row

    async def refresh(self, row: RowT) -> RowT:
        await self._session.refresh(row)
        return row
