"""Shared fixtures: throwaway tables and an in-memory SQLite database."""

from __future__ import annotations

import itertools
from typing import Callable, Iterator, List

import pytest
from sqlalchemy import Column, Float, Integer, MetaData, String, Table, create_engine
from sqlalchemy.engine import Engine

from model_filter.config import DEFAULT_SETTINGS
from model_filter.filterable import forget_config

ROWS = [
    {"id": 1, "name": "bolt", "price": 1.0, "qty": 10},
    {"id": 2, "name": "nut", "price": 2.0, "qty": 0},
    {"id": 3, "name": "washer", "price": 3.0, "qty": 5},
    {"id": 4, "name": "", "price": 5.0, "qty": 7},
    {"id": 5, "name": "screw", "price": 6.5, "qty": 2},
    {"id": 6, "name": "rivet", "price": 7.3, "qty": 1},
    {"id": 7, "name": "pin", "price": 8.0, "qty": 9},
    {"id": 8, "name": "clip", "price": 10.0, "qty": 3},
    {"id": 9, "name": "spring", "price": 12.0, "qty": 4},
    {"id": 10, "name": "gear", "price": 20.0, "qty": 6},
]

_table_counter = itertools.count()


@pytest.fixture
def make_table() -> Iterator[Callable[[], Table]]:
    """Factory for fresh ``parts`` tables, each with its own filter config."""
    created: List[Table] = []

    def _make() -> Table:
        table = Table(
            f"parts_{next(_table_counter)}",
            MetaData(),
            Column("id", Integer, primary_key=True),
            Column("name", String(50)),
            Column("price", Float),
            Column("qty", Integer),
        )
        created.append(table)
        return table

    yield _make
    for table in created:
        forget_config(table)


@pytest.fixture
def parts(make_table) -> Table:
    return make_table()


@pytest.fixture
def engine(parts: Table) -> Iterator[Engine]:
    eng = create_engine("sqlite://")
    parts.metadata.create_all(eng)
    with eng.begin() as conn:
        conn.execute(parts.insert(), ROWS)
    yield eng
    eng.dispose()


@pytest.fixture
def fetch_ids(engine: Engine) -> Callable:
    """Run a statement and return the sorted ``id`` column."""

    def _fetch(stmt) -> List[int]:
        with engine.connect() as conn:
            return sorted(row.id for row in conn.execute(stmt))

    return _fetch


@pytest.fixture(autouse=True)
def restore_default_settings() -> Iterator[None]:
    saved = dict(DEFAULT_SETTINGS)
    yield
    DEFAULT_SETTINGS.clear()
    DEFAULT_SETTINGS.update(saved)
