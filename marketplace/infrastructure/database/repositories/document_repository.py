"""
Shared single-record operations for the document-style tables.

Each helper opens its own session and commits before returning, so one call
is one independent store write. Nothing here ever spans two records.
"""
from collections.abc import Callable
from typing import Any

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from marketplace.application.errors import NotFoundError
from marketplace.infrastructure.database.connection import Base


def first_index(items: list[Any], predicate: Callable[[Any], bool]) -> int | None:
    for i, item in enumerate(items):
        if predicate(item):
            return i
    return None


class DocumentRepository:
    model: type[Base]
    entity_name: str = "Record"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _where(self, key: dict[str, Any]) -> ColumnElement[bool]:
        return and_(*(getattr(self.model, column) == value for column, value in key.items()))

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.entity_name} Not Found.", code="NotFound")

    async def _update_fields(self, key: dict[str, Any], **values: Any) -> None:
        """SET only the named columns of one record."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                update(self.model).where(self._where(key)).values(**values)
            )
            if result.rowcount == 0:
                raise self._not_found()

    async def _read_list(self, key: dict[str, Any], column: str) -> list[Any] | None:
        async with self._session_factory() as session:
            return await session.scalar(select(getattr(self.model, column)).where(self._where(key)))

    async def _append(
        self, key: dict[str, Any], column: str, value: Any, *, unique: bool = False
    ) -> bool:
        """
        Append ``value`` to a list column while holding the row lock.

        With ``unique`` the append is skipped when an equal entry is already
        present. Returns whether the list changed.
        """
        async with self._session_factory() as session, session.begin():
            current = await session.scalar(
                select(getattr(self.model, column)).where(self._where(key)).with_for_update()
            )
            if current is None:
                raise self._not_found()
            if unique and value in current:
                return False
            await session.execute(
                update(self.model).where(self._where(key)).values({column: [*current, value]})
            )
        return True

    async def _remove_at(self, key: dict[str, Any], column: str, index: int, expected: Any) -> bool:
        """
        Remove the entry at ``index`` if it still equals ``expected``.

        The index comes from an earlier, separate read. When the list has
        changed in between, the removal is skipped and False is returned.
        """
        async with self._session_factory() as session, session.begin():
            current = await session.scalar(
                select(getattr(self.model, column)).where(self._where(key)).with_for_update()
            )
            if current is None:
                raise self._not_found()
            if index >= len(current) or current[index] != expected:
                return False
            await session.execute(
                update(self.model)
                .where(self._where(key))
                .values({column: current[:index] + current[index + 1 :]})
            )
        return True

    async def _remove_first(
        self, key: dict[str, Any], column: str, predicate: Callable[[Any], bool]
    ) -> bool:
        """
        Remove the first matching entry: scan, then remove by position.

        The scan and the removal are two store calls; see ``_remove_at`` for
        what happens when another writer gets in between.
        """
        current = await self._read_list(key, column)
        if current is None:
            raise self._not_found()
        index = first_index(current, predicate)
        if index is None:
            return False
        return await self._remove_at(key, column, index, current[index])
