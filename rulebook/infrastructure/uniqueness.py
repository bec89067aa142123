"""SQLAlchemy backed answer to "is this value already taken?"."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from anyio import to_thread
from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError

from rulebook.domain.entities import CheckContext
from rulebook.domain.errors import ValidationConfigurationError

logger = logging.getLogger(__name__)


class SqlAlchemyUniquenessOracle:
    """Report a value unique when no row of the entity table holds it.

    The table is the entity name unless ``table_names`` maps it elsewhere; the
    column is the property name. Reflected tables are cached per instance.
    """

    def __init__(self, engine: Engine, table_names: Mapping[str, str] | None = None) -> None:
        self._engine = engine
        self._table_names = dict(table_names or {})
        self._tables: dict[str, Table] = {}
        self._tables_lock = threading.Lock()

    async def __call__(self, value: Any, context: CheckContext | None = None) -> bool:
        if context is None or not context.entity_name:
            raise ValidationConfigurationError(
                "The unique check needs an entity name to locate its table"
            )
        if not context.property_name:
            raise ValidationConfigurationError("The unique check needs a property name")

        return await to_thread.run_sync(
            self._is_unique, context.entity_name, context.property_name, value
        )

    def _table_for(self, entity_name: str) -> Table:
        table_name = self._table_names.get(entity_name, entity_name)
        with self._tables_lock:
            table = self._tables.get(table_name)
            if table is not None:
                return table

            try:
                table = Table(table_name, MetaData(), autoload_with=self._engine)
            except NoSuchTableError as exc:
                raise ValidationConfigurationError(
                    f"Table '{table_name}' for entity '{entity_name}' does not exist"
                ) from exc

            self._tables[table_name] = table
            return table

    def _is_unique(self, entity_name: str, property_name: str, value: Any) -> bool:
        table = self._table_for(entity_name)
        if property_name not in table.c:
            raise ValidationConfigurationError(
                f"Column '{property_name}' does not exist in table '{table.name}'"
            )

        statement = select(func.count()).select_from(table).where(table.c[property_name] == value)
        with self._engine.connect() as connection:
            matches = connection.execute(statement).scalar_one()

        logger.debug(
            "Uniqueness lookup on %s.%s matched %d row(s)", table.name, property_name, matches
        )
        return matches == 0


__all__ = ["SqlAlchemyUniquenessOracle"]
