from datetime import datetime
from pathlib import Path
import sys

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from helpers import FakeClock
from waiter_app.persistence import MemoryStore
from waiter_app.state import OrderBook


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def notices():
    return []


@pytest.fixture
def book(store, clock, notices):
    return OrderBook(store, table_count=8, clock=clock, notify=lambda message, kind: notices.append((kind, message)))
