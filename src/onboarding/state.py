"""
Onboarding Progress State Machine.

OnboardingProgress is the per-user tour record. Every transition below is a
pure function: it takes the current record and returns a new one, leaving
its input untouched. Transitions that cannot apply (unknown card, nothing
displayed, trigger that doesn't match) return an unchanged copy instead of
raising, because callers all over the app fire them opportunistically.

Two sequences can be active: the main tour, or a page walkthrough when
active_page_walkthrough is set. Advancing past the last card of a
walkthrough just closes it; advancing past the last main card finishes
the tour.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from .cards import CATALOG, CardCatalog, Page, Trigger

logger = logging.getLogger(__name__)


@dataclass
class OnboardingProgress:
    """
    Main tour state.

    Persisted to the onboarding_progress table as JSONB via to_dict().
    """
    current_card_id: int | None = None
    completed_card_ids: set[int] = field(default_factory=set)
    waiting_for_trigger: Trigger | None = None
    is_minimized: bool = False
    dismissed_by_user: bool = False
    exploring_mode: bool = False
    visited_pages: set[Page] = field(default_factory=set)
    active_page_walkthrough: Page | None = None

    # Completion latches
    onboarding_complete: bool = False
    main_onboarding_complete: bool = False
    final_card_shown: bool = False      # Permanent: celebration never again
    showing_final_card: bool = False    # Transient: show celebration now

    def copy(self) -> "OnboardingProgress":
        return replace(
            self,
            completed_card_ids=set(self.completed_card_ids),
            visited_pages=set(self.visited_pages),
        )

    def to_dict(self) -> dict:
        """Serialize state to dict for JSON storage."""
        return {
            "current_card_id": self.current_card_id,
            "completed_card_ids": sorted(self.completed_card_ids),
            "waiting_for_trigger": self.waiting_for_trigger.value if self.waiting_for_trigger else None,
            "is_minimized": self.is_minimized,
            "dismissed_by_user": self.dismissed_by_user,
            "exploring_mode": self.exploring_mode,
            "visited_pages": sorted(p.value for p in self.visited_pages),
            "active_page_walkthrough": self.active_page_walkthrough.value if self.active_page_walkthrough else None,
            "onboarding_complete": self.onboarding_complete,
            "main_onboarding_complete": self.main_onboarding_complete,
            "final_card_shown": self.final_card_shown,
            "showing_final_card": self.showing_final_card,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], catalog: CardCatalog = CATALOG) -> "OnboardingProgress":
        """
        Deserialize state from dict.

        Unknown keys, card ids and enum values are dropped, and the result
        is repaired so it satisfies the record's invariants.
        """
        trigger = _enum_or_none(Trigger, data.get("waiting_for_trigger"))
        walkthrough = _enum_or_none(Page, data.get("active_page_walkthrough"))

        current = data.get("current_card_id")
        if not catalog.has_card(current):
            current = None

        progress = cls(
            current_card_id=current,
            completed_card_ids={i for i in data.get("completed_card_ids") or [] if catalog.has_card(i)},
            waiting_for_trigger=trigger,
            is_minimized=bool(data.get("is_minimized", False)),
            dismissed_by_user=bool(data.get("dismissed_by_user", False)),
            exploring_mode=bool(data.get("exploring_mode", False)),
            visited_pages={
                p for p in (_enum_or_none(Page, v) for v in data.get("visited_pages") or []) if p
            },
            active_page_walkthrough=walkthrough,
            onboarding_complete=bool(data.get("onboarding_complete", False)),
            main_onboarding_complete=bool(data.get("main_onboarding_complete", False)),
            final_card_shown=bool(data.get("final_card_shown", False)),
            showing_final_card=bool(data.get("showing_final_card", False)),
        )
        return _repair(progress, catalog)


def _enum_or_none(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug(f"Ignoring unknown {enum_cls.__name__} value: {value!r}")
        return None


def _repair(progress: OnboardingProgress, catalog: CardCatalog) -> OnboardingProgress:
    """Restore invariants on a record that came from storage."""
    if progress.active_page_walkthrough is not None and (
        progress.current_card_id not in catalog.get_sequence(progress.active_page_walkthrough)
    ):
        progress.active_page_walkthrough = None
    if progress.is_minimized and (progress.waiting_for_trigger is None or progress.current_card_id is None):
        progress.is_minimized = False
    if progress.current_card_id is None:
        progress.waiting_for_trigger = None
    return progress


# =============================================================================
# Helpers
# =============================================================================


def active_sequence(progress: OnboardingProgress, catalog: CardCatalog = CATALOG) -> tuple[int, ...]:
    """The page walkthrough's sequence if one is active, else the main sequence."""
    if progress.active_page_walkthrough is not None:
        return catalog.get_sequence(progress.active_page_walkthrough)
    return catalog.get_main_sequence()


def all_sequences_complete(progress: OnboardingProgress, catalog: CardCatalog = CATALOG) -> bool:
    return catalog.all_sequence_card_ids() <= progress.completed_card_ids


def _check_final_card(progress: OnboardingProgress, catalog: CardCatalog) -> None:
    """Raise the celebration signal once every sequence has been traversed."""
    if not progress.final_card_shown and all_sequences_complete(progress, catalog):
        progress.showing_final_card = True


def _jump(progress: OnboardingProgress, card_id: int, walkthrough: Page | None) -> None:
    progress.current_card_id = card_id
    progress.active_page_walkthrough = walkthrough
    progress.waiting_for_trigger = None
    progress.is_minimized = False
    progress.dismissed_by_user = False


def _advance_from(progress: OnboardingProgress, card_id: int, catalog: CardCatalog) -> None:
    """
    Complete card_id and step to the next card of the active sequence.

    Shared by advance(), skip_current_card() and trigger_action() so the
    walkthrough exit and the final-card check behave the same everywhere.
    """
    sequence = active_sequence(progress, catalog)
    progress.completed_card_ids.add(card_id)
    progress.is_minimized = False

    next_id = catalog.next_in_sequence(sequence, card_id)
    if next_id is not None:
        progress.current_card_id = next_id
        next_card = catalog.get_card(next_id)
        if next_card.waits_for_event:
            progress.waiting_for_trigger = next_card.trigger
        else:
            progress.waiting_for_trigger = None
        return

    progress.current_card_id = None
    progress.waiting_for_trigger = None

    if progress.active_page_walkthrough is not None:
        progress.active_page_walkthrough = None
        _check_final_card(progress, catalog)
    else:
        progress.onboarding_complete = True
        progress.main_onboarding_complete = True


# =============================================================================
# Transitions
# =============================================================================


def show(
    progress: OnboardingProgress,
    force_replay: bool = False,
    catalog: CardCatalog = CATALOG,
) -> OnboardingProgress:
    """Open the main tour, resuming, restoring from minimized, or replaying."""
    if progress.main_onboarding_complete and not force_replay:
        return progress.copy()

    new = progress.copy()
    main = catalog.get_main_sequence()

    if force_replay or new.onboarding_complete or new.dismissed_by_user:
        new.completed_card_ids = set()
        new.exploring_mode = True
        _jump(new, main[0], None)
    elif new.is_minimized:
        new.is_minimized = False
    elif new.current_card_id is None:
        _jump(new, main[0], None)

    return new


def show_page_walkthrough(
    progress: OnboardingProgress,
    page: Page | str,
    catalog: CardCatalog = CATALOG,
) -> OnboardingProgress:
    """Start a page walkthrough on demand. Works before the main tour is done."""
    sequence = catalog.get_sequence(page)
    if not sequence:
        return progress.copy()

    new = progress.copy()
    _jump(new, sequence[0], Page(page))
    return new


def hide(progress: OnboardingProgress) -> OnboardingProgress:
    """Dismiss the tour without completing anything."""
    new = progress.copy()
    new.current_card_id = None
    new.is_minimized = False
    new.waiting_for_trigger = None
    new.active_page_walkthrough = None
    new.dismissed_by_user = True
    return new


def minimize_for_action(progress: OnboardingProgress, catalog: CardCatalog = CATALOG) -> OnboardingProgress:
    """Tuck the tour away while the user performs the card's real action."""
    new = progress.copy()
    card = catalog.get_card(new.current_card_id)
    if card is None or not card.waits_for_event:
        logger.debug(f"minimize_for_action ignored on card {new.current_card_id}")
        return new

    new.is_minimized = True
    new.waiting_for_trigger = card.trigger
    return new


def advance(progress: OnboardingProgress, catalog: CardCatalog = CATALOG) -> OnboardingProgress:
    """Complete the displayed card and move to the next one."""
    new = progress.copy()
    if new.current_card_id is None:
        return new
    _advance_from(new, new.current_card_id, catalog)
    return new


def skip_current_card(progress: OnboardingProgress, catalog: CardCatalog = CATALOG) -> OnboardingProgress:
    """Same transition as advance(); a separate entry point for skip buttons."""
    return advance(progress, catalog)


def go_to_card(
    progress: OnboardingProgress,
    card_id: int,
    catalog: CardCatalog = CATALOG,
) -> OnboardingProgress:
    """
    Jump straight to a card, bypassing sequence order.

    Cards jumped over are not marked complete.
    """
    new = progress.copy()
    if not catalog.has_card(card_id):
        logger.debug(f"go_to_card ignored unknown card {card_id}")
        return new

    new.current_card_id = card_id
    new.waiting_for_trigger = None
    new.is_minimized = False
    walkthrough = new.active_page_walkthrough
    if walkthrough is not None and card_id not in catalog.get_sequence(walkthrough):
        new.active_page_walkthrough = None
    return new


def set_exploring_mode(progress: OnboardingProgress, exploring: bool) -> OnboardingProgress:
    new = progress.copy()
    new.exploring_mode = exploring
    return new


def find_waiting_card(
    progress: OnboardingProgress,
    trigger: Trigger,
    catalog: CardCatalog = CATALOG,
) -> int | None:
    """
    First card of the active sequence, in sequence order, that waits on
    trigger and isn't completed yet.
    """
    for card_id in active_sequence(progress, catalog):
        if card_id in progress.completed_card_ids:
            continue
        card = catalog.get_card(card_id)
        if card.trigger == trigger:
            return card_id
    return None


def trigger_action(
    progress: OnboardingProgress,
    trigger: Trigger | str,
    catalog: CardCatalog = CATALOG,
) -> OnboardingProgress:
    """
    Advance the tour in response to an application event.

    Matches either the displayed card's own trigger, or (while minimized)
    the remembered waiting trigger, in which case the action may have been
    completed from a different page than the one that asked for it.
    Anything else is ignored.
    """
    new = progress.copy()
    try:
        trigger = Trigger(trigger)
    except ValueError:
        logger.debug(f"Ignoring unknown trigger {trigger!r}")
        return new

    card = catalog.get_card(new.current_card_id)
    if card is not None and card.trigger == trigger:
        _advance_from(new, card.id, catalog)
        return new

    if new.is_minimized and new.waiting_for_trigger == trigger:
        card_id = find_waiting_card(new, trigger, catalog)
        if card_id is not None:
            _advance_from(new, card_id, catalog)
    return new


def trigger_page_visit(
    progress: OnboardingProgress,
    page: Page | str,
    catalog: CardCatalog = CATALOG,
) -> OnboardingProgress:
    """Auto-start a page's walkthrough on its first visit after the main tour."""
    new = progress.copy()
    if not new.main_onboarding_complete:
        return new

    try:
        page = Page(page)
    except ValueError:
        return new

    sequence = catalog.get_sequence(page)
    if page in new.visited_pages or not sequence:
        return new

    new.visited_pages.add(page)
    _jump(new, sequence[0], page)
    return new


def complete_onboarding(progress: OnboardingProgress) -> OnboardingProgress:
    """Terminal transition. Calling it again changes nothing."""
    new = progress.copy()
    if new.current_card_id is not None:
        new.completed_card_ids.add(new.current_card_id)
    new.current_card_id = None
    new.is_minimized = False
    new.waiting_for_trigger = None
    new.active_page_walkthrough = None
    new.onboarding_complete = True
    new.main_onboarding_complete = True
    new.final_card_shown = True
    new.showing_final_card = False
    return new


def reset_onboarding() -> OnboardingProgress:
    return OnboardingProgress()
