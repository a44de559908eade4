"""
Row-level store adapter.

Services talk to the database only through predicate-filtered row operations
(select / insert / update / delete) against the tables declared in
``taruf.models``. Filters in a list are ANDed; ``any_of`` ORs a fixed set of
conditions. Every call returns plain dicts.

Operations outside ``Store.transaction()`` each run in their own short
transaction. Inside it, they share one session and commit or roll back
together.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Sequence

from sqlalchemy import Table, delete, false, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from . import models  # noqa: F401  registers the tables on Base.metadata
from .database import Base, SessionLocal
from .errors import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Filter:
    column: str
    op: str
    value: Any = None
    clauses: tuple["Filter", ...] = ()


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column, "gt", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def any_of(*filters: Filter) -> Filter:
    return Filter("", "or", clauses=tuple(filters))


def _table(name: str) -> Table:
    table = Base.metadata.tables.get(name)
    if table is None:
        raise ValueError(f"Unknown table: {name}")
    return table


def _column(table: Table, name: str):
    try:
        return table.c[name]
    except KeyError:
        raise ValueError(f"Unknown column: {table.name}.{name}") from None


def _primary_key(table: Table):
    return list(table.primary_key.columns)[0]


def _clause(table: Table, f: Filter):
    if f.op == "or":
        if not f.clauses:
            return false()
        return or_(*[_clause(table, c) for c in f.clauses])
    col = _column(table, f.column)
    if f.op == "eq":
        return col.is_(None) if f.value is None else col == f.value
    if f.op == "neq":
        return col.is_not(None) if f.value is None else col != f.value
    if f.op == "gt":
        return col > f.value
    if f.op == "in":
        values = list(f.value or ())
        return col.in_(values) if values else false()
    raise ValueError(f"Unsupported filter op: {f.op}")


def _ordering(table: Table, order_by: Sequence[str]) -> list[Any]:
    out: list[Any] = []
    for item in order_by:
        desc = item.startswith("-")
        col = _column(table, item.lstrip("-"))
        out.append(col.desc() if desc else col.asc())
    out.append(_primary_key(table).asc())
    return out


def _check_columns(table: Table, row: dict[str, Any]) -> None:
    for key in row:
        _column(table, key)


class StoreSession:
    def __init__(self, db) -> None:
        self._db = db

    def select(
        self,
        table_name: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        table = _table(table_name)
        stmt = select(table).where(*[_clause(table, f) for f in filters]).order_by(*_ordering(table, order_by))
        if limit is not None:
            stmt = stmt.limit(limit)
        return [dict(r) for r in self._db.execute(stmt).mappings().all()]

    def insert(self, table_name: str, rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        table = _table(table_name)
        pk = _primary_key(table)
        ids: list[Any] = []
        for row in rows:
            _check_columns(table, row)
            result = self._db.execute(insert(table).values(**row))
            ids.append(result.inserted_primary_key[0])
        if not ids:
            return []
        fetched = {r[pk.name]: r for r in self.select(table_name, [in_(pk.name, ids)])}
        return [fetched[i] for i in ids if i in fetched]

    def update(self, table_name: str, patch: dict[str, Any], filters: Sequence[Filter]) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("update requires at least one filter")
        table = _table(table_name)
        _check_columns(table, patch)
        pk = _primary_key(table)
        ids = [r[pk.name] for r in self.select(table_name, filters)]
        if not ids:
            return []
        self._db.execute(update(table).where(pk.in_(ids)).values(**patch))
        return self.select(table_name, [in_(pk.name, ids)])

    def delete(self, table_name: str, filters: Sequence[Filter]) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("delete requires at least one filter")
        table = _table(table_name)
        pk = _primary_key(table)
        matched = self.select(table_name, filters)
        if matched:
            self._db.execute(delete(table).where(pk.in_([r[pk.name] for r in matched])))
        return matched


class Store:
    def __init__(self, session_factory: Callable[[], Any] | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    @contextmanager
    def transaction(self) -> Iterator[StoreSession]:
        try:
            with self._session_factory() as db:
                try:
                    yield StoreSession(db)
                    db.commit()
                except BaseException:
                    db.rollback()
                    raise
        except SQLAlchemyError as exc:
            logger.error("[store] transaction failed: %s", exc)
            raise StoreError("Database error") from exc

    def select(
        self,
        table_name: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[str] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        with self.transaction() as tx:
            return tx.select(table_name, filters, order_by=order_by, limit=limit)

    def insert(self, table_name: str, rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        with self.transaction() as tx:
            return tx.insert(table_name, rows)

    def update(self, table_name: str, patch: dict[str, Any], filters: Sequence[Filter]) -> list[dict[str, Any]]:
        with self.transaction() as tx:
            return tx.update(table_name, patch, filters)

    def delete(self, table_name: str, filters: Sequence[Filter]) -> list[dict[str, Any]]:
        with self.transaction() as tx:
            return tx.delete(table_name, filters)
