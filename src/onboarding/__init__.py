"""
FrisFocus Onboarding Tour.

A resumable, server-synchronized state machine for the guided product
tour: a main card sequence plus per-page walkthroughs, advanced by
buttons or by application events.

Modules:
- cards: immutable card catalog and sequences
- state: progress record and pure transitions
- skip_checks: skip eligibility from existence facts
- scheduler: trailing-edge debouncer
- persistence: hydration and write-back
- rewards: one-time completion reward
- orchestrator: per-user handle used by the rest of the app
- api: FastAPI routes backing persistence
"""

from .cards import CATALOG, Card, CardCatalog, Page, Trigger
from .orchestrator import TourOrchestrator
from .persistence import PersistenceGateway, ProgressSnapshot, SupabaseProgressRepository
from .rewards import AwardResult, AwardStatus, SupabaseRewardService
from .skip_checks import SkipFacts
from .state import OnboardingProgress

__all__ = [
    "CATALOG",
    "Card",
    "CardCatalog",
    "Page",
    "Trigger",
    "TourOrchestrator",
    "PersistenceGateway",
    "ProgressSnapshot",
    "SupabaseProgressRepository",
    "AwardResult",
    "AwardStatus",
    "SupabaseRewardService",
    "SkipFacts",
    "OnboardingProgress",
]
