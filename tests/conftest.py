import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from todoodle_storage import TodoodleStore


class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def todos_file(tmp_path):
    return tmp_path / "data" / "todoodles.json"


@pytest.fixture
def store(todos_file, clock):
    todoodle_store = TodoodleStore(todos_file, clock=clock)
    asyncio.run(todoodle_store.initialize())
    return todoodle_store
