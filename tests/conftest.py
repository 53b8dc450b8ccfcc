from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from expense_tracker.config import Settings
from expense_tracker.crud import ExpenseStore
from expense_tracker.main import create_app
from expense_tracker.service import ExpenseService


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{(tmp_path / 'expenses.db').as_posix()}"


@pytest.fixture
def store(database_url: str) -> Generator[ExpenseStore, None, None]:
    expense_store = ExpenseStore.from_url(database_url)
    expense_store.ensure_schema()
    yield expense_store
    expense_store.dispose()


@pytest.fixture
def service(store: ExpenseStore) -> ExpenseService:
    return ExpenseService(store)


class SteppingClock:
    """Hands out preset timestamps, one per call."""

    def __init__(self, *moments: datetime):
        self._moments = list(moments)

    def __call__(self) -> datetime:
        return self._moments.pop(0)


@pytest.fixture
def base_time() -> datetime:
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def stepping_clock(base_time: datetime):
    def build(*offsets_in_minutes: int) -> SteppingClock:
        return SteppingClock(*(base_time + timedelta(minutes=m) for m in offsets_in_minutes))

    return build


@pytest.fixture
def client(database_url: str, store: ExpenseStore) -> Generator[TestClient, None, None]:
    app = create_app(settings=Settings(database_url=database_url), store=store)
    with TestClient(app) as test_client:
        yield test_client
