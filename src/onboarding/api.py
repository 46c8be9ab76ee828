"""
Onboarding API Endpoints.

Server side of the tour's storage: the client engine reads its snapshot
once per session, writes progress back (debounced) and the reward flag
(immediately), and asks for the one-time completion reward.
"""

import logging
from dataclasses import asdict
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from frisfocus.config import settings
from frisfocus.db.client import get_service_client
from frisfocus.web.auth import AuthenticatedUser, get_current_user

from .cards import CATALOG
from .persistence import ProgressRepository, SupabaseProgressRepository
from .rewards import AwardStatus, RewardService, SupabaseRewardService
from .skip_checks import SkipFacts, SupabaseSkipFactsProvider
from .state import OnboardingProgress

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


# =============================================================================
# Dependencies
# =============================================================================


def get_progress_repository() -> ProgressRepository:
    return SupabaseProgressRepository(get_service_client())


def get_reward_service() -> RewardService:
    return SupabaseRewardService(get_service_client())


def get_skip_facts_provider() -> SupabaseSkipFactsProvider:
    return SupabaseSkipFactsProvider(get_service_client())


# =============================================================================
# Request/Response Models
# =============================================================================


class ProgressResponse(BaseModel):
    """Stored snapshot. progress is null when the user never started."""
    progress: dict[str, Any] | None = None
    reward_granted: bool = False


class ProgressWriteRequest(BaseModel):
    """Either field group may be sent on its own. The reward flag can only be set."""
    model_config = ConfigDict(extra="forbid")

    progress: dict[str, Any] | None = None
    reward_granted: Literal[True] | None = None


class RewardResponse(BaseModel):
    status: str
    fp_awarded: int = 0
    message: str = ""


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    user: AuthenticatedUser = Depends(get_current_user),
    repository: ProgressRepository = Depends(get_progress_repository),
) -> ProgressResponse:
    """Fetch the user's stored tour snapshot."""
    try:
        snapshot = await repository.fetch(user.id)
    except Exception as e:
        logger.error(f"Failed to load onboarding progress: {e}")
        raise HTTPException(status_code=500, detail="Failed to load progress")

    return ProgressResponse(
        progress=snapshot.progress.to_dict() if snapshot.progress else None,
        reward_granted=snapshot.reward_granted,
    )


@router.put("/progress", response_model=ProgressResponse)
async def put_progress(
    request: ProgressWriteRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    repository: ProgressRepository = Depends(get_progress_repository),
) -> ProgressResponse:
    """Persist the progress record and/or the reward flag."""
    if request.progress is None and request.reward_granted is None:
        raise HTTPException(status_code=400, detail="Nothing to save")

    progress = None
    try:
        if request.progress is not None:
            progress = OnboardingProgress.from_dict(request.progress, CATALOG)
            await repository.save_progress(user.id, progress.to_dict())
        if request.reward_granted is not None:
            await repository.save_reward_granted(user.id, request.reward_granted)
    except Exception as e:
        logger.error(f"Failed to save onboarding progress: {e}")
        raise HTTPException(status_code=500, detail="Failed to save progress")

    return ProgressResponse(
        progress=progress.to_dict() if progress else None,
        reward_granted=bool(request.reward_granted),
    )


@router.post("/reward", response_model=RewardResponse)
async def claim_reward(
    user: AuthenticatedUser = Depends(get_current_user),
    rewards: RewardService = Depends(get_reward_service),
    repository: ProgressRepository = Depends(get_progress_repository),
):
    """
    Award the tour completion focus points.

    Returns 409 when the user already received them.
    """
    result = await rewards.award_once(user.id, settings.onboarding_reward_event)
    body = RewardResponse(status=result.status.value, fp_awarded=result.fp_awarded, message=result.message)

    if result.status == AwardStatus.FAILED:
        raise HTTPException(status_code=500, detail=result.message or "Failed to award reward")

    try:
        await repository.save_reward_granted(user.id, True)
    except Exception as e:
        logger.warning(f"Reward granted but flag not saved for {user.id}: {e}")

    if result.status == AwardStatus.ALREADY_GRANTED:
        return JSONResponse(status_code=409, content=body.model_dump())
    return body


@router.get("/skip-facts", response_model=SkipFacts)
async def get_skip_facts(
    user: AuthenticatedUser = Depends(get_current_user),
    provider: SupabaseSkipFactsProvider = Depends(get_skip_facts_provider),
) -> SkipFacts:
    """Existence facts used to offer skipping cards the user already satisfies."""
    return await provider.load(user.id)


@router.get("/cards")
async def get_cards():
    """The card catalog and its sequences."""
    return {
        "cards": [asdict(card) for card in CATALOG.cards],
        "main_sequence": list(CATALOG.get_main_sequence()),
        "page_sequences": {
            page.value: list(seq) for page, seq in CATALOG.page_sequences.items()
        },
    }
