"""
Skip eligibility for tour cards.

A card that asks the user to create something (a season, a task, ...) can
be skipped when the user already has one. The facts come from the rest of
the app as plain booleans; each card names at most one of them.
"""

import logging

from pydantic import BaseModel

from frisfocus.db.adapter import DatabaseAdapter

from .cards import Card, SkipCheck

logger = logging.getLogger(__name__)


class SkipFacts(BaseModel):
    """Existence facts about the user's data."""
    has_seasons: bool = False
    has_categories: bool = False
    has_tasks: bool = False
    has_penalties: bool = False
    has_todos: bool = False        # Any to-do, ever
    has_day_saved: bool = False    # Any daily log, ever
    has_milestones: bool = False
    has_goal_set: bool = False     # Fitness goal


SKIP_CHECK_FIELDS: dict[SkipCheck, str] = {
    SkipCheck.HAS_SEASONS: "has_seasons",
    SkipCheck.HAS_CATEGORIES: "has_categories",
    SkipCheck.HAS_TASKS: "has_tasks",
    SkipCheck.HAS_PENALTIES: "has_penalties",
    SkipCheck.HAS_TODOS: "has_todos",
    SkipCheck.HAS_DAY_SAVED: "has_day_saved",
    SkipCheck.HAS_MILESTONES: "has_milestones",
    SkipCheck.HAS_GOAL_SET: "has_goal_set",
}


def evaluate(check: SkipCheck | None, facts: SkipFacts) -> bool:
    """Value of the single fact a skip-check key names."""
    if check is None:
        return False
    return getattr(facts, SKIP_CHECK_FIELDS[check])


def is_skippable(card: Card | None, facts: SkipFacts) -> bool:
    """True when the user already satisfies what the card would ask for."""
    if card is None:
        return False
    return evaluate(card.skip_check, facts)


# =============================================================================
# Supabase-backed facts
# =============================================================================

# fact field -> table holding the user's rows
FACT_SOURCES: dict[str, str] = {
    "has_seasons": "seasons",
    "has_categories": "task_categories",
    "has_tasks": "tasks",
    "has_penalties": "penalty_rules",
    "has_todos": "todo_items",
    "has_day_saved": "user_daily_logs",
    "has_milestones": "milestones",
    "has_goal_set": "fitness_goals",
}


class SupabaseSkipFactsProvider:
    """Builds SkipFacts with one existence query per table."""

    def __init__(self, client: DatabaseAdapter):
        self.client = client

    def _exists(self, user_id: str, table: str) -> bool:
        result = (
            self.client.table(table)
            .select("id")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return bool(result.data)

    async def load(self, user_id: str) -> SkipFacts:
        """
        Load all facts for a user.

        A failing lookup counts as "not yet" so the card is shown rather
        than silently skipped.
        """
        values: dict[str, bool] = {}
        for fact, table in FACT_SOURCES.items():
            try:
                values[fact] = self._exists(user_id, table)
            except Exception as e:
                logger.warning(f"Skip fact {fact} lookup failed for {user_id}: {e}")
                values[fact] = False
        return SkipFacts(**values)
