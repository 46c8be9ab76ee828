"""
Tour Orchestrator.

One TourOrchestrator per signed-in user session. Callers across the app
hold this handle and call its operations; it owns the progress record,
applies the pure transitions from state.py, and takes care of the side
effects: debounced write-back, the one-time reward, and navigation.

Usage:
    tour = TourOrchestrator(user_id, gateway, rewards, navigator=router)
    await tour.hydrate()
    tour.show()
    tour.trigger_action("taskCreated")   # from the task form
    await tour.flush()                   # on logout
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from frisfocus.config import settings

from . import state as transitions
from .cards import CATALOG, ButtonAction, Card, CardCatalog, Page, Trigger
from .persistence import PersistenceGateway
from .rewards import RewardService
from .skip_checks import SkipFacts, is_skippable
from .state import OnboardingProgress

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    def navigate(self, route: str) -> None: ...


class TourOrchestrator:
    """Owned state container for one user's tour."""

    def __init__(
        self,
        user_id: str,
        gateway: PersistenceGateway,
        rewards: RewardService,
        navigator: Navigator | None = None,
        catalog: CardCatalog = CATALOG,
        reward_event: str | None = None,
    ):
        self.user_id = user_id
        self.gateway = gateway
        self.rewards = rewards
        self.navigator = navigator
        self.catalog = catalog
        self.reward_event = reward_event or settings.onboarding_reward_event

        self._progress = OnboardingProgress()
        self._hydrated = False
        self._reward_granted = False
        self._reward_pending = False
        self._reward_task: asyncio.Task | None = None
        self._listeners: list[Callable[[OnboardingProgress], None]] = []

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def progress(self) -> OnboardingProgress:
        """A copy of the current record."""
        return self._progress.copy()

    @property
    def current_card(self) -> Card | None:
        return self.catalog.get_card(self._progress.current_card_id)

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    @property
    def reward_granted(self) -> bool:
        return self._reward_granted

    def is_current_card_skippable(self, facts: SkipFacts) -> bool:
        return is_skippable(self.current_card, facts)

    def subscribe(self, listener: Callable[[OnboardingProgress], None]) -> None:
        """Call listener with the new record after every change."""
        self._listeners.append(listener)

    # -------------------------------------------------------------------------
    # Hydration
    # -------------------------------------------------------------------------

    async def hydrate(self) -> bool:
        """
        Load stored progress, at most once per session.

        Returns True if stored state was applied. A fetch that finishes
        after the first local change is discarded, so a slow network can
        never roll back progress made in this session.
        """
        if self._hydrated:
            return False

        snapshot = await self.gateway.hydrate()
        if snapshot is None:
            return False  # Fetch failed; a later call may retry
        if self._hydrated:
            logger.debug(f"Discarding late onboarding snapshot for {self.user_id}")
            return False

        self._hydrated = True
        self._reward_granted = snapshot.reward_granted
        if snapshot.progress is not None:
            self._progress = snapshot.progress
            self._notify()
        return True

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def show(self, force_replay: bool = False) -> None:
        self._apply(transitions.show(self._progress, force_replay, self.catalog))

    def show_page_walkthrough(self, page: Page | str) -> None:
        self._apply(transitions.show_page_walkthrough(self._progress, page, self.catalog))

    def hide(self) -> None:
        self._apply(transitions.hide(self._progress))

    def minimize_for_action(self) -> None:
        self._apply(transitions.minimize_for_action(self._progress, self.catalog))

    def advance(self) -> None:
        self._apply(transitions.advance(self._progress, self.catalog))

    def skip_current_card(self) -> None:
        card_id = self._progress.current_card_id
        self._apply(transitions.skip_current_card(self._progress, self.catalog))
        if card_id is not None:
            logger.info(f"User {self.user_id} skipped onboarding card {card_id}")

    def go_to_card(self, card_id: int) -> None:
        self._apply(transitions.go_to_card(self._progress, card_id, self.catalog))

    def set_exploring_mode(self, exploring: bool) -> None:
        self._apply(transitions.set_exploring_mode(self._progress, exploring))

    def trigger_action(self, trigger: Trigger | str) -> None:
        self._apply(transitions.trigger_action(self._progress, trigger, self.catalog))

    def trigger_page_visit(self, page: Page | str) -> None:
        self._apply(transitions.trigger_page_visit(self._progress, page, self.catalog))

    def complete_onboarding(self) -> None:
        self._apply(transitions.complete_onboarding(self._progress))
        self._request_reward()

    def reset_onboarding(self) -> None:
        self._apply(transitions.reset_onboarding())

    # -------------------------------------------------------------------------
    # Buttons
    # -------------------------------------------------------------------------

    def press_primary(self) -> None:
        """Run the displayed card's primary button (or Continue if it has none)."""
        card = self.current_card
        if card is None:
            return
        button = card.primary
        if button is None:
            self.advance()
        elif button.action == ButtonAction.EXPLORE:
            self.set_exploring_mode(True)
            self.advance()
        elif button.action == ButtonAction.NAVIGATE and button.navigate_to:
            if self.navigator is not None:
                self.navigator.navigate(button.navigate_to)
            self.advance()
        elif button.action == ButtonAction.COMPLETE:
            self.complete_onboarding()
        else:
            self.advance()

    def press_secondary(self) -> None:
        card = self.current_card
        if card is None or card.secondary is None:
            return
        button = card.secondary
        if button.action in (ButtonAction.SKIP, ButtonAction.COMPLETE):
            self.complete_onboarding()
        elif button.action == ButtonAction.NEXT:
            if button.go_to is not None:
                self.set_exploring_mode(False)
                self.go_to_card(button.go_to)
            else:
                self.advance()

    # -------------------------------------------------------------------------
    # Side effects
    # -------------------------------------------------------------------------

    async def flush(self) -> None:
        """Write pending progress and finish any outstanding reward request."""
        if self._reward_pending and self._reward_task is None:
            self._reward_pending = False
            await self._grant_reward()
        elif self._reward_task is not None:
            await asyncio.gather(self._reward_task, return_exceptions=True)
        await self.gateway.flush()

    def _apply(self, new: OnboardingProgress) -> None:
        if new == self._progress:
            return
        self._progress = new
        self._hydrated = True  # Close the latch: local state now wins
        self.gateway.schedule_save(lambda: self._progress)
        self._notify()

    def _notify(self) -> None:
        for listener in self._listeners:
            try:
                listener(self._progress.copy())
            except Exception:
                logger.exception("Onboarding listener failed")

    def _request_reward(self) -> None:
        if self._reward_granted or self._reward_task is not None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._reward_pending = True  # Sent on flush()
            return

        self._reward_task = loop.create_task(self._grant_reward())
        self._reward_task.add_done_callback(self._reward_done)

    def _reward_done(self, task: asyncio.Task) -> None:
        self._reward_task = None

    async def _grant_reward(self) -> None:
        try:
            result = await self.rewards.award_once(self.user_id, self.reward_event)
        except Exception as e:
            logger.error(f"Onboarding reward request failed for {self.user_id}: {e}")
            return

        if not result.confirmed:
            logger.error(f"Onboarding reward not granted for {self.user_id}: {result.message}")
            return

        self._reward_granted = True
        await self.gateway.save_reward_granted()
