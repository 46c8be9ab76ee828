"""
Focus-point reward for finishing the tour.

The award is one-time per user. The service must tolerate repeated
requests: a second request reports ALREADY_GRANTED instead of paying out
twice, and callers treat both outcomes as "the user has it".
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from postgrest.exceptions import APIError

from frisfocus.db.adapter import DatabaseAdapter

logger = logging.getLogger(__name__)

ONBOARDING_REWARD_EVENT = "completed_onboarding_tutorial"

# event type -> (focus points, description)
ONE_TIME_REWARDS: dict[str, tuple[int, str]] = {
    ONBOARDING_REWARD_EVENT: (50, "Completed the onboarding tutorial"),
}

UNIQUE_VIOLATION = "23505"


class AwardStatus(str, Enum):
    GRANTED = "granted"
    ALREADY_GRANTED = "already_granted"
    FAILED = "failed"


@dataclass
class AwardResult:
    status: AwardStatus
    fp_awarded: int = 0
    message: str = ""

    @property
    def confirmed(self) -> bool:
        """The user holds the reward, whether from this call or an earlier one."""
        return self.status in (AwardStatus.GRANTED, AwardStatus.ALREADY_GRANTED)


class RewardService(Protocol):
    async def award_once(self, user_id: str, event_type: str) -> AwardResult: ...


class SupabaseRewardService:
    """
    Awards one-time focus points through the fp_activity_log table.

    Relies on a unique (user_id, event_type) index for one-time events so a
    duplicate insert fails with a unique violation.
    """

    def __init__(self, client: DatabaseAdapter, table: str = "fp_activity_log"):
        self.client = client
        self.table = table

    async def award_once(self, user_id: str, event_type: str) -> AwardResult:
        rule = ONE_TIME_REWARDS.get(event_type)
        if rule is None:
            return AwardResult(AwardStatus.FAILED, message=f"Unknown FP event type: {event_type}")

        amount, description = rule
        try:
            self.client.table(self.table).insert({
                "user_id": user_id,
                "event_type": event_type,
                "fp_amount": amount,
                "description": description,
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                return AwardResult(AwardStatus.ALREADY_GRANTED, message=f"FP already awarded for {event_type}")
            logger.error(f"Error awarding FP for {event_type}: {e}")
            return AwardResult(AwardStatus.FAILED, message=str(e))

        return AwardResult(AwardStatus.GRANTED, fp_awarded=amount, message=description)
