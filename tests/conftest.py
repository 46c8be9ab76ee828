"""
Pytest configuration and fixtures for FrisFocus tests.
"""

import asyncio
import os
import pytest
from unittest.mock import MagicMock

# Set test environment before importing frisfocus modules
os.environ["FRISFOCUS_ENV"] = "development"
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")

from onboarding.persistence import PersistenceGateway, ProgressSnapshot
from onboarding.rewards import AwardResult, AwardStatus
from onboarding.state import OnboardingProgress


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class FakeProgressRepository:
    """In-memory ProgressRepository recording every write."""

    def __init__(self, snapshot: ProgressSnapshot | None = None):
        self.snapshot = snapshot or ProgressSnapshot()
        self.progress_writes: list[dict] = []
        self.reward_writes: list[bool] = []
        self.fetch_calls = 0
        self.fetch_delay = 0.0
        self.fail_fetch = False
        self.fail_save = False

    async def fetch(self, user_id: str) -> ProgressSnapshot:
        self.fetch_calls += 1
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.fail_fetch:
            raise ConnectionError("network down")
        return self.snapshot

    async def save_progress(self, user_id: str, progress: dict) -> None:
        if self.fail_save:
            raise ConnectionError("network down")
        self.progress_writes.append(progress)

    async def save_reward_granted(self, user_id: str, granted: bool) -> None:
        if self.fail_save:
            raise ConnectionError("network down")
        self.reward_writes.append(granted)


class FakeRewardService:
    """Grants once, then reports already granted."""

    def __init__(self, fail: bool = False):
        self.calls: list[tuple[str, str]] = []
        self.granted: set[tuple[str, str]] = set()
        self.fail = fail

    async def award_once(self, user_id: str, event_type: str) -> AwardResult:
        self.calls.append((user_id, event_type))
        if self.fail:
            return AwardResult(AwardStatus.FAILED, message="boom")
        key = (user_id, event_type)
        if key in self.granted:
            return AwardResult(AwardStatus.ALREADY_GRANTED)
        self.granted.add(key)
        return AwardResult(AwardStatus.GRANTED, fp_awarded=50)


class RecordingNavigator:
    def __init__(self):
        self.routes: list[str] = []

    def navigate(self, route: str) -> None:
        self.routes.append(route)


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.upsert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def repository():
    return FakeProgressRepository()


@pytest.fixture
def rewards():
    return FakeRewardService()


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def gateway(repository):
    return PersistenceGateway("user-1", repository, debounce_seconds=0.01)


@pytest.fixture
def fresh_progress():
    return OnboardingProgress()
