"""
Onboarding Progress Persistence.

Storage is one row per user in the onboarding_progress table:

    user_id          uuid primary key
    progress         jsonb      (OnboardingProgress.to_dict(), null = never started)
    reward_granted   boolean
    updated_at       timestamptz

The progress record and the reward flag are written as separate field
groups; each upsert only touches its own columns, so the last write of
each group wins independently.

PersistenceGateway wraps a repository for one user session: hydration
happens once, progress writes are debounced, and the reward flag is
written immediately. Failures are logged and swallowed. In-memory state
stays authoritative for the session.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from frisfocus.config import settings
from frisfocus.db.adapter import DatabaseAdapter

from .cards import CATALOG, CardCatalog
from .scheduler import Debouncer
from .state import OnboardingProgress

logger = logging.getLogger(__name__)


@dataclass
class ProgressSnapshot:
    """What storage knows about a user's tour."""
    progress: OnboardingProgress | None = None  # None = never started
    reward_granted: bool = False


class ProgressRepository(Protocol):
    async def fetch(self, user_id: str) -> ProgressSnapshot: ...

    async def save_progress(self, user_id: str, progress: dict[str, Any]) -> None: ...

    async def save_reward_granted(self, user_id: str, granted: bool) -> None: ...


class SupabaseProgressRepository:
    """ProgressRepository backed by a Supabase table."""

    def __init__(
        self,
        client: DatabaseAdapter,
        table: str | None = None,
        catalog: CardCatalog = CATALOG,
    ):
        self.client = client
        self.table = table or settings.onboarding_progress_table
        self.catalog = catalog

    async def fetch(self, user_id: str) -> ProgressSnapshot:
        result = (
            self.client.table(self.table)
            .select("progress, reward_granted")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return ProgressSnapshot()

        row = result.data[0]
        raw = row.get("progress")
        progress = OnboardingProgress.from_dict(raw, self.catalog) if raw else None
        return ProgressSnapshot(
            progress=progress,
            reward_granted=bool(row.get("reward_granted")),
        )

    async def save_progress(self, user_id: str, progress: dict[str, Any]) -> None:
        self.client.table(self.table).upsert(
            {
                "user_id": user_id,
                "progress": progress,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="user_id",
        ).execute()

    async def save_reward_granted(self, user_id: str, granted: bool) -> None:
        self.client.table(self.table).upsert(
            {
                "user_id": user_id,
                "reward_granted": granted,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="user_id",
        ).execute()


class PersistenceGateway:
    """Per-session bridge between in-memory progress and storage."""

    def __init__(
        self,
        user_id: str,
        repository: ProgressRepository,
        debounce_seconds: float | None = None,
    ):
        self.user_id = user_id
        self.repository = repository
        if debounce_seconds is None:
            debounce_seconds = settings.onboarding_save_debounce_seconds
        self._debouncer = Debouncer(debounce_seconds, name=f"onboarding-save:{user_id}")

    async def hydrate(self) -> ProgressSnapshot | None:
        """Fetch the stored snapshot. Returns None if the fetch failed."""
        try:
            return await self.repository.fetch(self.user_id)
        except Exception as e:
            logger.warning(f"Failed to load onboarding progress for {self.user_id}: {e}")
            return None

    def schedule_save(self, snapshot: Callable[[], OnboardingProgress]) -> None:
        """
        Debounce a full-record write.

        snapshot is called when the write actually runs, so the newest
        state is what gets stored.
        """
        async def write() -> None:
            await self._save_progress(snapshot())

        self._debouncer.schedule(write)

    async def _save_progress(self, progress: OnboardingProgress) -> None:
        try:
            await self.repository.save_progress(self.user_id, progress.to_dict())
        except Exception as e:
            logger.warning(f"Failed to save onboarding progress for {self.user_id}: {e}")

    async def save_reward_granted(self) -> bool:
        """Write the reward flag right away, outside the debounce."""
        try:
            await self.repository.save_reward_granted(self.user_id, True)
            return True
        except Exception as e:
            logger.error(f"Failed to save reward flag for {self.user_id}: {e}")
            return False

    @property
    def save_pending(self) -> bool:
        return self._debouncer.pending

    async def flush(self) -> None:
        """Write any pending progress now (e.g. on logout or shutdown)."""
        await self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()
