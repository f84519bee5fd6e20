"""
Shared test fixtures.

The Supabase double below keeps real table state in memory: inserts are
visible to later selects, deletes remove rows, filters and ordering apply.
fail_on() makes a chosen table operation raise, to exercise partial-failure
paths.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are required at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import copy
import pytest
from datetime import datetime, timezone
from typing import Any, Generator, Optional
from uuid import uuid4

# ===================
# MOCK SUPABASE CLIENT
# ===================

SERVICE_MODULES = [
    "services.product_service",
    "services.catalog_import_service",
    "services.order_archive_service",
    "services.history_service",
    "services.supplier_service",
    "services.simple_order_service",
]


class MockSupabaseError(Exception):
    """Raised by an injected failure."""


class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: Any = None, count: Optional[int] = None):
        self.data = data if data is not None else []
        self.count = count


class MockSupabaseQuery:
    """Chainable query builder evaluated against the client's tables."""

    def __init__(self, client: "MockSupabaseClient", table_name: str):
        self._client = client
        self._table = table_name
        self._op = "select"
        self._payload: Any = None
        self._filters: list = []
        self._orders: list = []
        self._limit: Optional[int] = None
        self._range: Optional[tuple] = None
        self._single = False
        self._count_mode: Optional[str] = None
        self._negate_next = False

    # Operations

    def select(self, *columns, count: Optional[str] = None, **kwargs):
        self._op = "select"
        self._count_mode = count
        return self

    def insert(self, data):
        self._op = "insert"
        self._payload = data
        return self

    def update(self, data: dict):
        self._op = "update"
        self._payload = data
        return self

    def delete(self):
        self._op = "delete"
        return self

    # Filters

    def _add_filter(self, predicate):
        if self._negate_next:
            self._negate_next = False
            self._filters.append(lambda row: not predicate(row))
        else:
            self._filters.append(predicate)
        return self

    @property
    def not_(self):
        self._negate_next = True
        return self

    def eq(self, column, value):
        return self._add_filter(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._add_filter(lambda row: row.get(column) != value)

    def in_(self, column, values):
        allowed = list(values)
        return self._add_filter(lambda row: row.get(column) in allowed)

    def is_(self, column, value):
        if value in (None, "null"):
            return self._add_filter(lambda row: row.get(column) is None)
        return self._add_filter(lambda row: row.get(column) == value)

    # Shaping

    def order(self, column, desc: bool = False, **kwargs):
        self._orders.append((column, desc))
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def range(self, start: int, end: int):
        self._range = (start, end)
        return self

    def single(self):
        self._single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(predicate(row) for predicate in self._filters)

    def _shape(self, rows: list) -> list:
        # Stable sorts applied last key first give multi-column ordering
        for column, desc in reversed(self._orders):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r.get(column), reverse=desc)
            rows = present + missing
        if self._range is not None:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]
        return rows

    def execute(self) -> MockSupabaseResponse:
        self._client._record(self._table, self._op, self._payload)
        self._client._maybe_fail(self._table, self._op)

        table = self._client.rows(self._table)

        if self._op == "insert":
            records = self._payload if isinstance(self._payload, list) else [self._payload]
            inserted = []
            for record in records:
                row = copy.deepcopy(record)
                row.setdefault("id", str(uuid4()))
                row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
                table.append(row)
                inserted.append(copy.deepcopy(row))
            if self._table in self._client._empty_returns:
                return MockSupabaseResponse(data=[])
            return MockSupabaseResponse(data=inserted)

        matched = [row for row in table if self._matches(row)]

        if self._op == "update":
            for row in matched:
                row.update(copy.deepcopy(self._payload))
            return MockSupabaseResponse(data=copy.deepcopy(matched))

        if self._op == "delete":
            ids = {id(row) for row in matched}
            table[:] = [row for row in table if id(row) not in ids]
            return MockSupabaseResponse(data=copy.deepcopy(matched))

        rows = self._shape(copy.deepcopy(matched))
        count = len(matched) if self._count_mode else None
        if self._single:
            return MockSupabaseResponse(data=rows[0] if rows else None, count=count)
        return MockSupabaseResponse(data=rows, count=count)


class MockSupabaseTable:
    """Entry point for queries on one table."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name).insert(data)

    def update(self, data):
        return MockSupabaseQuery(self._client, self._name).update(data)

    def delete(self):
        return MockSupabaseQuery(self._client, self._name).delete()


class MockSupabaseClient:
    """
    In-memory Supabase client.

    Attributes:
        calls: (table, operation, payload) for every executed query
    """

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self._failures: dict[tuple, dict] = {}
        self._executed: dict[tuple, int] = {}
        self._empty_returns: set[str] = set()
        self.calls: list[tuple] = []

    def set_table_data(self, table_name: str, data: list):
        """Replace a table's rows."""
        self._tables[table_name] = copy.deepcopy(list(data))

    def rows(self, table_name: str) -> list[dict]:
        """Live row list of a table."""
        return self._tables.setdefault(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        return MockSupabaseTable(self, name)

    def fail_on(self, table_name: str, op: str, after: int = 0, message: str = "connection reset"):
        """
        Make `op` on `table_name` raise once `after` executions have succeeded.
        """
        self._failures[(table_name, op)] = {"after": after, "message": message}

    def return_nothing_on(self, table_name: str):
        """Apply inserts on `table_name` but return no rows."""
        self._empty_returns.add(table_name)

    def writes(self, table_name: Optional[str] = None) -> list[tuple]:
        """Executed insert/update/delete calls, optionally for one table."""
        return [
            call for call in self.calls
            if call[1] in ("insert", "update", "delete")
            and (table_name is None or call[0] == table_name)
        ]

    def _record(self, table_name: str, op: str, payload: Any):
        self.calls.append((table_name, op, copy.deepcopy(payload)))

    def _maybe_fail(self, table_name: str, op: str):
        key = (table_name, op)
        done = self._executed.get(key, 0)
        failure = self._failures.get(key)
        if failure is not None and done >= failure["after"]:
            raise MockSupabaseError(failure["message"])
        self._executed[key] = done + 1


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "name": "Fish Ball", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def draft_cache():
    """Fresh process-wide draft cache."""
    from services.draft_cache import DraftCache
    from config import settings
    return DraftCache(settings.draft_cache_namespace)


@pytest.fixture
def mock_db(mock_supabase, draft_cache, monkeypatch) -> Generator:
    """
    Patch the database client with mock and reset service singletons.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    import importlib

    monkeypatch.setattr("config.database.get_supabase_client", lambda: mock_supabase)
    for module_name in SERVICE_MODULES:
        module = importlib.import_module(module_name)
        monkeypatch.setattr(module, "get_supabase_client", lambda: mock_supabase)

    monkeypatch.setattr("services.product_service._product_service", None)
    monkeypatch.setattr("services.catalog_import_service._service", None)
    monkeypatch.setattr("services.order_archive_service._service", None)
    monkeypatch.setattr("services.history_service._reader", None)
    monkeypatch.setattr("services.history_service._editor", None)
    monkeypatch.setattr("services.supplier_service._service", None)
    monkeypatch.setattr("services.simple_order_service._service", None)
    monkeypatch.setattr("services.draft_cache._cache", draft_cache)

    yield mock_supabase


@pytest.fixture
def test_client(mock_db):
    """FastAPI TestClient backed by the mock database."""
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def sample_products_list() -> list:
    """Three catalog products from two companies."""
    from tests.factories import ProductFactory
    return [
        ProductFactory.create(
            id="prod-1", name="Fish Ball", company_name="Xinya", batch_code="0001",
            image_url="data:image/png;base64,AAA", created_at="2026-01-01T10:00:00+00:00",
        ),
        ProductFactory.create(
            id="prod-2", name="Beef Ball", company_name="Xinya", batch_code="0001",
            created_at="2026-01-01T10:00:01+00:00",
        ),
        ProductFactory.create(
            id="prod-3", name="Dumpling", company_name="Golden", batch_code="0002",
            created_at="2026-01-02T10:00:00+00:00",
        ),
    ]
