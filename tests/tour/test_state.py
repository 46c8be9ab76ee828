"""
Tests for the onboarding progress state machine.

Transitions are pure, so every test feeds a record in and inspects the
record that comes out.
"""

import random

import pytest

from onboarding import state as tour
from onboarding.cards import CATALOG, Card, CardCatalog, Page, Trigger
from onboarding.state import OnboardingProgress


def at_card(card_id: int, **kwargs) -> OnboardingProgress:
    return OnboardingProgress(current_card_id=card_id, **kwargs)


def check_invariants(p: OnboardingProgress) -> None:
    if p.is_minimized:
        assert p.waiting_for_trigger is not None
        assert p.current_card_id is not None
    assert p.current_card_id is None or CATALOG.has_card(p.current_card_id)
    if p.active_page_walkthrough is not None:
        assert p.current_card_id in CATALOG.get_sequence(p.active_page_walkthrough)


class TestShow:
    def test_fresh_show_starts_at_card_1(self, fresh_progress):
        p = tour.show(fresh_progress)
        assert p.current_card_id == 1
        assert not p.dismissed_by_user

    def test_noop_after_main_complete(self):
        p = OnboardingProgress(main_onboarding_complete=True, onboarding_complete=True)
        assert tour.show(p) == p

    def test_force_replay_resets_to_card_1(self):
        p = OnboardingProgress(
            completed_card_ids={1, 2, 3},
            main_onboarding_complete=True,
            onboarding_complete=True,
            final_card_shown=True,
        )
        new = tour.show(p, force_replay=True)
        assert new.current_card_id == 1
        assert new.completed_card_ids == set()
        assert new.exploring_mode is True
        assert new.final_card_shown is True

    def test_show_after_dismiss_restarts(self):
        p = tour.hide(at_card(7, completed_card_ids={1, 2, 3, 4, 5, 6}))
        new = tour.show(p)
        assert new.current_card_id == 1
        assert new.completed_card_ids == set()
        assert not new.dismissed_by_user

    def test_show_while_minimized_restores_in_place(self):
        p = tour.minimize_for_action(at_card(14))
        new = tour.show(p)
        assert not new.is_minimized
        assert new.current_card_id == 14
        assert new.waiting_for_trigger == Trigger.TASK_CREATED

    def test_show_with_card_displayed_is_noop(self):
        p = at_card(8)
        assert tour.show(p) == p


class TestAdvance:
    def test_scenario_a_steps_in_order(self, fresh_progress):
        p = tour.show(fresh_progress)
        for expected_next in (2, 3, 4, 5):
            p = tour.advance(p)
            assert p.current_card_id == expected_next
        assert p.completed_card_ids == {1, 2, 3, 4}

    def test_advance_without_card_is_noop(self, fresh_progress):
        assert tour.advance(fresh_progress) == fresh_progress

    def test_advance_prearms_event_trigger(self):
        p = tour.advance(at_card(13))
        assert p.current_card_id == 14
        assert p.waiting_for_trigger == Trigger.TASK_CREATED

    def test_advance_clears_trigger_for_immediate_card(self):
        p = tour.advance(at_card(5, waiting_for_trigger=Trigger.SEASON_CREATED))
        assert p.current_card_id == 6
        assert p.waiting_for_trigger is None

    def test_completed_is_idempotent(self):
        p = tour.advance(at_card(3, completed_card_ids={3}))
        assert p.completed_card_ids == {3}

    def test_last_main_card_completes_tour(self):
        p = tour.advance(at_card(27))
        assert p.current_card_id is None
        assert p.onboarding_complete
        assert p.main_onboarding_complete

    def test_skip_matches_advance(self):
        p = at_card(9, waiting_for_trigger=Trigger.CATEGORY_CREATED)
        assert tour.skip_current_card(p) == tour.advance(p)

    def test_input_not_mutated(self):
        p = at_card(1)
        tour.advance(p)
        assert p.current_card_id == 1
        assert p.completed_card_ids == set()

    @pytest.mark.parametrize("page", [Page.HEALTH, Page.COMMUNITY, Page.INSIGHTS, Page.JOURNAL, Page.BADGES])
    def test_walkthrough_exhausts_within_length(self, page):
        p = tour.show_page_walkthrough(OnboardingProgress(), page)
        steps = 0
        while p.current_card_id is not None:
            p = tour.advance(p)
            steps += 1
        assert steps == len(CATALOG.get_sequence(page))

    def test_main_exhausts_within_length(self, fresh_progress):
        p = tour.show(fresh_progress)
        steps = 0
        while p.current_card_id is not None:
            p = tour.advance(p)
            steps += 1
        assert steps == 27
        assert p.main_onboarding_complete


class TestPageWalkthroughs:
    def test_scenario_d_explicit_walkthrough_ignores_main_gate(self, fresh_progress):
        p = tour.show_page_walkthrough(fresh_progress, "tasks")
        # tasks has no walkthrough of its own
        assert p == fresh_progress

        p = tour.show_page_walkthrough(fresh_progress, Page.HEALTH)
        assert p.current_card_id == 28
        assert p.active_page_walkthrough == Page.HEALTH
        assert not p.main_onboarding_complete

    def test_walkthrough_exit_does_not_complete_tour(self):
        p = tour.show_page_walkthrough(OnboardingProgress(), Page.JOURNAL)
        p = tour.advance(tour.advance(p))
        assert p.current_card_id is None
        assert p.active_page_walkthrough is None
        assert p.completed_card_ids == {42, 43}
        assert not p.onboarding_complete

    def test_page_visit_gated_on_main_tour(self, fresh_progress):
        assert tour.trigger_page_visit(fresh_progress, Page.HEALTH) == fresh_progress

    def test_page_visit_after_main_tour(self):
        p = OnboardingProgress(main_onboarding_complete=True, dismissed_by_user=True)
        new = tour.trigger_page_visit(p, "community")
        assert new.current_card_id == 33
        assert new.active_page_walkthrough == Page.COMMUNITY
        assert new.visited_pages == {Page.COMMUNITY}
        assert not new.dismissed_by_user

    def test_page_visit_only_once(self):
        p = OnboardingProgress(main_onboarding_complete=True)
        p = tour.hide(tour.trigger_page_visit(p, Page.INSIGHTS))
        assert tour.trigger_page_visit(p, Page.INSIGHTS) == p

    def test_page_visit_to_page_without_walkthrough(self):
        p = OnboardingProgress(main_onboarding_complete=True)
        new = tour.trigger_page_visit(p, Page.DAILY)
        assert new == p
        assert Page.DAILY not in new.visited_pages

    def test_page_visit_unknown_page(self):
        p = OnboardingProgress(main_onboarding_complete=True)
        assert tour.trigger_page_visit(p, "settings") == p


class TestTriggers:
    def test_scenario_b_direct_match(self):
        p = tour.go_to_card(OnboardingProgress(), 5)
        assert tour.trigger_action(p, "unrelatedEvent") == p
        assert tour.trigger_action(p, Trigger.TASK_CREATED) == p

        new = tour.trigger_action(p, "seasonCreated")
        assert new.current_card_id == 6
        assert 5 in new.completed_card_ids

    def test_scenario_c_minimize_then_trigger(self):
        p = tour.minimize_for_action(at_card(14))
        assert p.is_minimized
        assert p.waiting_for_trigger == Trigger.TASK_CREATED

        new = tour.trigger_action(p, "taskCreated")
        assert not new.is_minimized
        assert new.current_card_id == 15
        assert 14 in new.completed_card_ids

    def test_deferred_match_uses_first_uncompleted_card(self):
        p = at_card(
            13,
            completed_card_ids=set(range(1, 13)),
            waiting_for_trigger=Trigger.TASK_CREATED,
            is_minimized=True,
        )
        new = tour.trigger_action(p, Trigger.TASK_CREATED)
        assert new.current_card_id == 15
        assert 14 in new.completed_card_ids
        assert not new.is_minimized

    def test_deferred_match_ignored_when_not_minimized(self):
        p = at_card(13, waiting_for_trigger=Trigger.TASK_CREATED)
        assert tour.trigger_action(p, Trigger.TASK_CREATED) == p

    def test_deferred_match_with_nothing_left(self):
        p = at_card(
            13,
            completed_card_ids={14},
            waiting_for_trigger=Trigger.TASK_CREATED,
            is_minimized=True,
        )
        assert tour.trigger_action(p, Trigger.TASK_CREATED) == p

    def test_deferred_tie_break_is_sequence_order(self):
        cards = tuple(
            Card(id=i, page=Page.DASHBOARD, title=str(i), content=("x",), trigger=t)
            for i, t in [(1, None), (2, Trigger.GOAL_SET), (3, None), (4, Trigger.GOAL_SET)]
        )
        catalog = CardCatalog(cards=cards, main_sequence=(1, 4, 3, 2))
        p = at_card(1, waiting_for_trigger=Trigger.GOAL_SET, is_minimized=True)
        new = tour.trigger_action(p, Trigger.GOAL_SET, catalog)
        assert 4 in new.completed_card_ids
        assert 2 not in new.completed_card_ids
        assert new.current_card_id == 3

    def test_minimize_requires_event_trigger(self):
        for card_id in (1, 6):  # no trigger, immediate
            p = at_card(card_id)
            assert tour.minimize_for_action(p) == p
        assert tour.minimize_for_action(OnboardingProgress()) == OnboardingProgress()


class TestJumpsAndDismissal:
    def test_go_to_card_does_not_complete_skipped(self):
        p = tour.go_to_card(at_card(2), 4)
        assert p.current_card_id == 4
        assert p.completed_card_ids == set()

    def test_go_to_unknown_card(self):
        p = at_card(2)
        assert tour.go_to_card(p, 999) == p

    def test_go_to_card_clears_minimized(self):
        p = tour.go_to_card(tour.minimize_for_action(at_card(14)), 16)
        assert not p.is_minimized
        assert p.waiting_for_trigger is None

    def test_go_to_card_outside_walkthrough_ends_it(self):
        p = tour.show_page_walkthrough(OnboardingProgress(), Page.HEALTH)
        assert tour.go_to_card(p, 30).active_page_walkthrough == Page.HEALTH
        assert tour.go_to_card(p, 5).active_page_walkthrough is None

    def test_hide(self):
        p = tour.hide(tour.minimize_for_action(at_card(14, completed_card_ids={1})))
        assert p.current_card_id is None
        assert p.dismissed_by_user
        assert not p.is_minimized
        assert p.waiting_for_trigger is None
        assert p.completed_card_ids == {1}

    def test_set_exploring_mode(self, fresh_progress):
        assert tour.set_exploring_mode(fresh_progress, True).exploring_mode


class TestCompletion:
    def test_final_card_after_every_sequence(self):
        everything_but_last = set(range(1, 47))
        p = tour.show_page_walkthrough(OnboardingProgress(completed_card_ids=everything_but_last), Page.BADGES)
        p = tour.go_to_card(p, 47)
        p = tour.advance(p)
        assert p.showing_final_card
        assert not p.final_card_shown

        p = tour.complete_onboarding(p)
        assert p.final_card_shown
        assert not p.showing_final_card

    def test_final_card_never_twice(self):
        p = OnboardingProgress(completed_card_ids=set(range(1, 48)), final_card_shown=True)
        p = tour.show_page_walkthrough(p, Page.JOURNAL)
        p = tour.advance(tour.advance(p))
        assert not p.showing_final_card

    def test_final_card_via_trigger_exit(self):
        cards = (
            Card(id=1, page=Page.DASHBOARD, title="a", content=("x",)),
            Card(id=2, page=Page.HEALTH, title="b", content=("x",), trigger=Trigger.GOAL_SET),
        )
        catalog = CardCatalog(cards=cards, main_sequence=(1,), page_sequences={Page.HEALTH: (2,)})
        p = tour.show_page_walkthrough(OnboardingProgress(completed_card_ids={1}), Page.HEALTH, catalog)
        p = tour.trigger_action(p, Trigger.GOAL_SET, catalog)
        assert p.showing_final_card

    def test_incomplete_union_does_not_show_final(self):
        p = tour.show_page_walkthrough(OnboardingProgress(), Page.JOURNAL)
        p = tour.advance(tour.advance(p))
        assert not p.showing_final_card

    def test_complete_is_idempotent(self):
        p = tour.complete_onboarding(at_card(27, completed_card_ids={1}))
        assert tour.complete_onboarding(p) == p
        assert p.onboarding_complete and p.main_onboarding_complete
        assert p.current_card_id is None
        assert 27 in p.completed_card_ids

    def test_reset(self):
        p = tour.complete_onboarding(at_card(27))
        assert tour.reset_onboarding() == OnboardingProgress()
        assert p.final_card_shown  # reset builds a new record


class TestSerialization:
    def test_round_trip(self):
        p = OnboardingProgress(
            current_card_id=30,
            completed_card_ids={28, 29},
            waiting_for_trigger=None,
            visited_pages={Page.HEALTH},
            active_page_walkthrough=Page.HEALTH,
            main_onboarding_complete=True,
        )
        data = p.to_dict()
        assert data["completed_card_ids"] == [28, 29]
        assert data["visited_pages"] == ["health"]
        assert OnboardingProgress.from_dict(data) == p

    def test_from_dict_repairs_bad_snapshot(self):
        data = {
            "current_card_id": 5,
            "completed_card_ids": [1, 2, 500],
            "is_minimized": True,
            "waiting_for_trigger": "somethingOld",
            "active_page_walkthrough": "health",
            "visited_pages": ["health", "nowhere"],
            "legacy_field": 1,
        }
        p = OnboardingProgress.from_dict(data)
        assert p.current_card_id == 5
        assert p.completed_card_ids == {1, 2}
        assert not p.is_minimized
        assert p.active_page_walkthrough is None
        assert p.visited_pages == {Page.HEALTH}

    def test_from_empty_dict(self):
        assert OnboardingProgress.from_dict({}) == OnboardingProgress()


OPERATIONS = [
    lambda p, r: tour.show(p, force_replay=r.random() < 0.1),
    lambda p, r: tour.show_page_walkthrough(p, r.choice(list(Page))),
    lambda p, r: tour.hide(p),
    lambda p, r: tour.minimize_for_action(p),
    lambda p, r: tour.advance(p),
    lambda p, r: tour.advance(p),
    lambda p, r: tour.skip_current_card(p),
    lambda p, r: tour.go_to_card(p, r.randint(0, 50)),
    lambda p, r: tour.set_exploring_mode(p, r.random() < 0.5),
    lambda p, r: tour.trigger_action(p, r.choice(list(Trigger))),
    lambda p, r: tour.trigger_page_visit(p, r.choice(list(Page))),
    lambda p, r: tour.complete_onboarding(p) if r.random() < 0.2 else p,
]


class TestReachableStates:
    @pytest.mark.parametrize("seed", range(20))
    def test_invariants_hold_on_random_walks(self, seed):
        rng = random.Random(seed)
        p = OnboardingProgress()
        for _ in range(300):
            before = p
            p = rng.choice(OPERATIONS)(p, rng)
            check_invariants(p)
            if before.final_card_shown:
                assert p.final_card_shown
            if not (p.current_card_id == 1 and p.completed_card_ids == set()):
                # only a hard reset from show() may shrink the completed set
                assert before.completed_card_ids <= p.completed_card_ids
