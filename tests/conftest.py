"""
Shared test fixtures for wit daemon tests.

Provides fixtures for:
- State stores (memory and JSON file)
- Mock transmitter
- Controller and scheduler daemon instances
- API client (httpx over ASGI)
- Fixed points in time
"""
import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Ensure src/ is on sys.path for direct pytest runs
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from wit.api import create_app, set_daemon_instance
from wit.config import Settings
from wit.control.controller import ClimateController
from wit.control.scheduler import SchedulerDaemon
from wit.control.state_store import JsonFileStateStore, MemoryStateStore
from wit.hardware.irsend_mock import IrSendMock
from wit.models.state import State


# ============================================================================
# Time Fixtures
# ============================================================================

# 2024-01-10 is a Wednesday, 2024-01-13 a Saturday
WEDNESDAY = datetime(2024, 1, 10)
SATURDAY = datetime(2024, 1, 13)


def weekday_at(hour: int, minute: int = 0) -> datetime:
    return WEDNESDAY.replace(hour=hour, minute=minute)


def weekend_at(hour: int, minute: int = 0) -> datetime:
    return SATURDAY.replace(hour=hour, minute=minute)


# ============================================================================
# State Fixtures
# ============================================================================

@pytest.fixture
def memory_store() -> MemoryStateStore:
    """Empty in-memory state store."""
    return MemoryStateStore()


@pytest.fixture
def file_store(tmp_path) -> JsonFileStateStore:
    """JSON file state store in a temporary cache directory."""
    return JsonFileStateStore(tmp_path / "cache" / "state.json")


def store_with(state: State) -> MemoryStateStore:
    """In-memory store pre-loaded with a state (does not count as a write)."""
    return MemoryStateStore(state.to_json())


# ============================================================================
# Controller Fixtures
# ============================================================================

@pytest.fixture
def mock_actuator() -> IrSendMock:
    """Mock IR transmitter."""
    return IrSendMock()


@pytest.fixture
def controller(memory_store, mock_actuator) -> ClimateController:
    """Controller over an empty memory store and the mock transmitter."""
    return ClimateController(memory_store, mock_actuator)


@pytest.fixture
def scheduler_daemon(memory_store, controller) -> SchedulerDaemon:
    """Scheduler daemon with no delay between cycles."""
    return SchedulerDaemon(
        memory_store,
        controller,
        interval_seconds=0,
        clock=lambda: weekday_at(9),
    )


# ============================================================================
# Settings and App Fixtures
# ============================================================================

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Create test settings."""
    return Settings(
        cache_dir=tmp_path / "cache",
        irsend_mock=True,
        opmodes="COOL74,HEAT72",
        home_url="http://home.local/",
        log_level="DEBUG",
        json_logs=False,
    )


@pytest.fixture
def daemon(test_settings, memory_store, mock_actuator, controller, scheduler_daemon):
    """Stand-in for WitDaemon, registered for the API."""
    instance = SimpleNamespace(
        settings=test_settings,
        store=memory_store,
        actuator=mock_actuator,
        controller=controller,
        scheduler=scheduler_daemon,
    )
    set_daemon_instance(instance)
    yield instance
    set_daemon_instance(None)


@pytest_asyncio.fixture
async def async_client(daemon, test_settings) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to a test application."""
    app = create_app(test_settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
