"""
Onboarding Card Catalog.

Immutable registry of tour cards and the sequences that traverse them:
one main sequence (cards 1-27) and one walkthrough sequence per page.
Page walkthroughs start automatically on the first visit to a page after
the main tour is finished, or on demand from the help menu.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property


class Page(str, Enum):
    """Application pages that own tour cards."""
    DASHBOARD = "dashboard"
    TASKS = "tasks"
    DAILY = "daily"
    HEALTH = "health"
    COMMUNITY = "community"
    INSIGHTS = "insights"
    JOURNAL = "journal"
    BADGES = "badges"


class Trigger(str, Enum):
    """What advances a card."""
    IMMEDIATE = "immediate"
    MANUAL = "manual"
    SEASON_CREATED = "seasonCreated"
    CATEGORY_CREATED = "categoryCreated"
    TASK_CREATED = "taskCreated"
    PENALTY_CREATED = "penaltyCreated"
    TODO_CREATED = "todoCreated"
    DAY_SAVED = "daySaved"
    MILESTONE_CREATED = "milestoneCreated"
    GOAL_SET = "goalSet"

    @property
    def is_event(self) -> bool:
        """True for triggers fired by a real action elsewhere in the app."""
        return self not in (Trigger.IMMEDIATE, Trigger.MANUAL)


class ButtonAction(str, Enum):
    NEXT = "next"
    EXPLORE = "explore"
    NAVIGATE = "navigate"
    COMPLETE = "complete"
    SKIP = "skip"


class SkipCheck(str, Enum):
    """Existence facts that make a card's request already satisfied."""
    HAS_SEASONS = "hasSeasons"
    HAS_CATEGORIES = "hasCategories"
    HAS_TASKS = "hasTasks"
    HAS_PENALTIES = "hasPenalties"
    HAS_TODOS = "hasTodos"
    HAS_DAY_SAVED = "hasDaySaved"
    HAS_MILESTONES = "hasMilestones"
    HAS_GOAL_SET = "hasGoalSet"


@dataclass(frozen=True)
class ButtonDirective:
    text: str
    action: ButtonAction
    navigate_to: str | None = None
    go_to: int | None = None  # Branch target card


@dataclass(frozen=True)
class Card:
    """One unit of tour content."""
    id: int
    page: Page
    title: str
    content: tuple[str, ...]
    trigger: Trigger | None = None
    primary: ButtonDirective | None = None
    secondary: ButtonDirective | None = None
    skip_check: SkipCheck | None = None
    highlight: str | None = None

    @property
    def waits_for_event(self) -> bool:
        return self.trigger is not None and self.trigger.is_event


@dataclass(frozen=True)
class CardCatalog:
    """
    Read-only card registry.

    Validated on construction so a broken sequence table fails at import
    rather than mid-tour.
    """
    cards: tuple[Card, ...]
    main_sequence: tuple[int, ...]
    page_sequences: dict[Page, tuple[int, ...]] = field(default_factory=dict)

    def __post_init__(self):
        ids = [c.id for c in self.cards]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate card ids in catalog")
        if any(i <= 0 for i in ids):
            raise ValueError("Card ids must be positive")

        known = set(ids)
        sequences = {"main": self.main_sequence}
        sequences.update({p.value: s for p, s in self.page_sequences.items()})
        for name, seq in sequences.items():
            missing = [i for i in seq if i not in known]
            if missing:
                raise ValueError(f"Sequence {name!r} references unknown cards: {missing}")

        for card in self.cards:
            for button in (card.primary, card.secondary):
                if button and button.go_to is not None and button.go_to not in known:
                    raise ValueError(f"Card {card.id} branches to unknown card {button.go_to}")

    @cached_property
    def _by_id(self) -> dict[int, Card]:
        return {c.id: c for c in self.cards}

    def get_card(self, card_id: int | None) -> Card | None:
        if card_id is None:
            return None
        return self._by_id.get(card_id)

    def has_card(self, card_id: int | None) -> bool:
        return card_id is not None and card_id in self._by_id

    def get_main_sequence(self) -> tuple[int, ...]:
        return self.main_sequence

    def get_sequence(self, page: Page | str) -> tuple[int, ...]:
        """Walkthrough sequence for a page (empty if it has none)."""
        try:
            page = Page(page)
        except ValueError:
            return ()
        return self.page_sequences.get(page, ())

    def get_cards_for_page(self, page: Page | str) -> list[Card]:
        return [c for c in self.cards if c.page == page]

    @cached_property
    def _union(self) -> frozenset[int]:
        ids = set(self.main_sequence)
        for seq in self.page_sequences.values():
            ids.update(seq)
        return frozenset(ids)

    def all_sequence_card_ids(self) -> frozenset[int]:
        """Every card id reachable through the main or any page sequence."""
        return self._union

    @staticmethod
    def next_in_sequence(sequence: tuple[int, ...], card_id: int) -> int | None:
        """Id following card_id in sequence, or None at the end / when absent."""
        try:
            idx = sequence.index(card_id)
        except ValueError:
            return None
        if idx + 1 < len(sequence):
            return sequence[idx + 1]
        return None

    def format_cards_for_prompt(self) -> str:
        """
        Render every card as plain text.

        Fed to the coach assistant so it can answer questions about the tour.
        """
        blocks = []
        for card in self.cards:
            body = "\n".join(card.content)
            blocks.append(f"Card {card.id} ({card.page.value}): {card.title}\n{body}")
        return "\n\n---\n\n".join(blocks)


# =============================================================================
# Card Content
# =============================================================================

_CARDS: tuple[Card, ...] = (
    # ---- Main flow: dashboard intro ----
    Card(
        id=1,
        page=Page.DASHBOARD,
        title="Welcome to FrisFocus",
        content=(
            "FrisFocus helps you organize your life around what actually matters, and follow through with structure, accountability, and visibility.",
            "This isn't about doing more. It's about doing what matters, consistently.",
            "You can start solo, or with others. You can keep things simple, or build something competitive. You can adjust anytime.",
            "There's no \"perfect\" setup. Just one that fits you right now.",
        ),
    ),
    Card(
        id=2,
        page=Page.DASHBOARD,
        title="Getting Started",
        content=(
            "There's a lot here, and you don't need to learn it all at once.",
            "You can flip through the remaining cards, or start exploring right away and learn as you go. Helpful guidance will appear as you move around the app, and you can always come back to these cards anytime from the question mark under the settings gear.",
        ),
        primary=ButtonDirective("Start Exploring", ButtonAction.EXPLORE),
        secondary=ButtonDirective("Keep Learning", ButtonAction.NEXT, go_to=4),
    ),
    Card(
        id=3,
        page=Page.DASHBOARD,
        title="Start Exploring",
        content=(
            "You're ready to start exploring.",
            "We'll begin on the Tasks page, where the structure behind everything else lives.",
            "This setup is designed to be quick. Most people finish in about five minutes, and nothing needs to be perfect. You can always adjust things later.",
        ),
        primary=ButtonDirective("Go to Tasks", ButtonAction.NAVIGATE, navigate_to="/tasks"),
    ),
    # ---- Main flow: tasks page ----
    Card(
        id=4,
        page=Page.TASKS,
        title="This is Where Your Structure Lives",
        content=(
            "Tasks hold the habits, routines, and commitments that support the direction you're working toward.",
            "Let's start by creating a season: a defined phase of focus that gives everything context.",
        ),
    ),
    Card(
        id=5,
        page=Page.TASKS,
        title="Understanding Seasons",
        content=(
            "Life doesn't stay static. Your goals, responsibilities, and energy change over time. FrisFocus is built to move with you.",
            "A Season represents a phase of your life. You define what matters right now, without locking yourself into a single path.",
            "For example, your priorities and the habits that build you up as a student will look much different than the priorities that you would need after you graduate. Both matter!",
            "You can create a season at any time from the banner at the top of this page.",
            "Let's start one now. Give it a name and use the description to capture what this phase of your life looks like or what you're focusing on.",
        ),
        trigger=Trigger.SEASON_CREATED,
        highlight="button-add-season",
        skip_check=SkipCheck.HAS_SEASONS,
    ),
    Card(
        id=6,
        page=Page.TASKS,
        title="Season Created!",
        content=(
            "Nice work, you've created your first season.",
            "When your priorities or circumstances shift, you can always create a new one.",
            "Past seasons are saved so you can look back, reflect, and see how you've grown over time.",
        ),
        trigger=Trigger.IMMEDIATE,
    ),
    Card(
        id=7,
        page=Page.TASKS,
        title="Now Let's Add Some Tasks",
        content=(
            "Tasks represent actions you repeat regularly to support your current season: workouts, study sessions, journaling, recovery habits, or daily routines.",
            "They form the foundation of consistency. Think about the person you want to be six months from now, and ask yourself: What actions would I need to take consistently to get there?",
            "Those actions belong here.",
        ),
    ),
    Card(
        id=8,
        page=Page.TASKS,
        title="No Fixed Number of Tasks",
        content=(
            "There's no fixed number of tasks.",
            "Create as many as make sense for you. Along with bigger habits, don't overlook the small, repeatable actions that keep your days running smoothly.",
            "Consistency is often built on the basics.",
        ),
    ),
    Card(
        id=9,
        page=Page.TASKS,
        title="Organizing with Categories",
        content=(
            "Tasks are organized using categories.",
            "Categories help you group responsibilities based on different areas of your life. They're fully customizable: common examples include health, career, spiritual, or social.",
            "Go ahead and create your first category by clicking the + icon in the category card.",
        ),
        trigger=Trigger.CATEGORY_CREATED,
        highlight="button-add-category",
        skip_check=SkipCheck.HAS_CATEGORIES,
    ),
    Card(
        id=10,
        page=Page.TASKS,
        title="Understanding Priority Levels",
        content=(
            "Tasks also have priority levels. This helps the system understand what matters most right now.",
            "**Must Do**: Core actions that directly support your goals. You'll be alerted if these aren't logged after three days.",
            "**Should Do**: Helpful actions that strengthen progress. You'll be alerted if you go ten days without logging them.",
            "**Could Do**: Supportive actions that add balance but won't derail progress if missed.",
        ),
        trigger=Trigger.IMMEDIATE,
    ),
    Card(
        id=11,
        page=Page.TASKS,
        title="Understanding Scoring",
        content=(
            "Finally, let's talk about scoring.",
            "You'll set a personal daily point goal and weekly point goal. Each task is assigned points that roll up toward these goals as you complete them.",
            "This is a private system designed to help you stay intentional and aware day to day.",
            "The default is 50 points per day and 350 points per week, but you're encouraged to adjust the scale as you get more comfortable.",
        ),
    ),
    Card(
        id=12,
        page=Page.TASKS,
        title="Scoring Tips",
        content=(
            "When assigning points to a task, think in context of your overall goal.",
            "If your daily target is 50 points, a single task probably shouldn't be worth 30. That can throw off the balance of your system.",
            "Score tasks based on both priority and difficulty. Tasks that directly support your main focus should be worth more.",
        ),
    ),
    Card(
        id=13,
        page=Page.TASKS,
        title="Boosters and Penalties",
        content=(
            "Tasks can also include boosters and penalties to reinforce consistency.",
            "Boosters reward patterns you want to build, for example earning extra points when you complete a task multiple times within a set period.",
            "Penalties work the opposite way, helping you notice when something important is being avoided or skipped. Both are optional.",
        ),
    ),
    Card(
        id=14,
        page=Page.TASKS,
        title="Create Your First Task",
        content=(
            "Now that you're familiar with tasks, let's create your first one.",
            "Click the green New Task button on this page to get started. You can fill everything out manually or have the system guide you through it step by step.",
        ),
        trigger=Trigger.TASK_CREATED,
        highlight="button-add-task",
        skip_check=SkipCheck.HAS_TASKS,
    ),
    Card(
        id=15,
        page=Page.TASKS,
        title="Task Created!",
        content=(
            "Nice work.",
            "Figuring out the right tasks can take some thought. If you're feeling unsure or stuck, you can use the Generate with AI button for help.",
        ),
        trigger=Trigger.IMMEDIATE,
    ),
    Card(
        id=16,
        page=Page.TASKS,
        title="Breaking Bad Habits",
        content=(
            "Have any habits or distractions you want to reduce?",
            "Penalties bring awareness and accountability to things you're working on changing. You can lose points when a habit shows up, and earn points for time spent without it.",
            "Take a moment to think of one habit or distraction, then click Create a Penalty under the tasks section to get started.",
        ),
        trigger=Trigger.PENALTY_CREATED,
        highlight="button-add-penalty",
        skip_check=SkipCheck.HAS_PENALTIES,
    ),
    Card(
        id=17,
        page=Page.TASKS,
        title="Head to Daily",
        content=(
            "Nice progress so far.",
            "Let's move to the Daily page using the top banner, right next to Tasks.",
        ),
        trigger=Trigger.IMMEDIATE,
        primary=ButtonDirective("Go to Daily", ButtonAction.NAVIGATE, navigate_to="/daily"),
    ),
    # ---- Main flow: daily page ----
    Card(
        id=18,
        page=Page.DAILY,
        title="Your Daily Hub",
        content=(
            "Now that you've created your task library, each day you'll come here to log the tasks you completed and track how you're actually spending your time.",
        ),
    ),
    Card(
        id=19,
        page=Page.DAILY,
        title="Daily Schedules",
        content=(
            "You can assign a schedule to each day. Create different schedule templates, like workdays, rest days, travel days, or weekends, and apply them as needed.",
            "This helps your tasks match the reality of your day instead of forcing one routine onto every day.",
        ),
    ),
    Card(
        id=20,
        page=Page.DAILY,
        title="Using To-Do Lists",
        content=(
            "To-do list items are flexible and optional.",
            "Some people use them to organize which tasks they plan to complete that day, while others use them for one-off items that don't belong in their regular routine.",
            "You can assign points to to-do items if you'd like. Just be mindful not to double-count points if a to-do item is already tracked as a task.",
            "If something doesn't get finished, you can import incomplete items from yesterday into today, so nothing gets lost.",
            "Go ahead and create one to-do item for today.",
        ),
        trigger=Trigger.TODO_CREATED,
        highlight="button-add-todo",
        skip_check=SkipCheck.HAS_TODOS,
    ),
    Card(
        id=21,
        page=Page.DAILY,
        title="Log As You Go",
        content=(
            "This page is where you log as you go.",
            "As you complete tasks or to-do items throughout the day, you can check them off here at any time.",
            "When you're ready, click Save Day to record your progress and lock in your points. You can always come back and update things as needed.",
        ),
        trigger=Trigger.IMMEDIATE,
    ),
    Card(
        id=22,
        page=Page.DAILY,
        title="Journal Notes",
        content=(
            "You can also add a journal note from here.",
            "Anything you write will appear directly in your journal: how you're feeling, a reflection on the day, or a quick check-in.",
            "Go ahead and write a short note, check off a task or to-do if you've completed one, and click Save Day when you're ready.",
        ),
        trigger=Trigger.DAY_SAVED,
        skip_check=SkipCheck.HAS_DAY_SAVED,
    ),
    Card(
        id=23,
        page=Page.DAILY,
        title="Foundation Complete!",
        content=(
            "You've got the foundation down.",
            "Now let's head back to the Dashboard, where everything you've set up starts to come together.",
        ),
        trigger=Trigger.IMMEDIATE,
        primary=ButtonDirective("Go to Dashboard", ButtonAction.NAVIGATE, navigate_to="/"),
    ),
    # ---- Main flow: dashboard final ----
    Card(
        id=24,
        page=Page.DASHBOARD,
        title="Your Dashboard Hub",
        content=(
            "The dashboard is your high-level view.",
            "It brings everything together so you can quickly see how you're doing: progress toward your weekly point goal, a breakdown of each day, your current streak, and alerts for tasks that still need attention.",
        ),
    ),
    Card(
        id=25,
        page=Page.DASHBOARD,
        title="Plan Ahead",
        content=(
            "The dashboard lets you add due dates, weekly to-do items, and milestones to organize what you're working toward.",
            "Due dates are for fixed obligations with real deadlines, like rent or important submissions.",
            "Weekly to-do items are for things that need to get done at some point during the week.",
            "Milestones represent the major outcomes and goals you want to achieve during this season.",
            "Think of one meaningful milestone for this season and add it here.",
        ),
        trigger=Trigger.MILESTONE_CREATED,
        highlight="button-add-milestone",
        skip_check=SkipCheck.HAS_MILESTONES,
    ),
    Card(
        id=26,
        page=Page.DASHBOARD,
        title="Customize Your Dashboard",
        content=(
            "This dashboard is meant to adapt to you.",
            "Use the settings gear at the top of the page to adjust colors, update your welcome message, choose which cards appear, and change their order.",
        ),
        trigger=Trigger.IMMEDIATE,
        highlight="button-dashboard-settings",
    ),
    Card(
        id=27,
        page=Page.DASHBOARD,
        title="You're All Set!",
        content=(
            "You've got the foundation in place.",
            "From here, you can explore FrisFocus naturally. As you move to different pages, short walkthroughs will appear to help you understand each feature in context.",
            "Use the system at your own pace. The more you engage with it, the more value it provides over time.",
        ),
        primary=ButtonDirective("Start My Journey", ButtonAction.COMPLETE),
    ),
    # ---- Health walkthrough ----
    Card(
        id=28,
        page=Page.HEALTH,
        title="Your Health Hub",
        content=(
            "This is your all inclusive Health hub!",
            "Whether you are trying to lose weight, gain weight, or just maintain, the system is designed to figure out the best plan for you.",
        ),
    ),
    Card(
        id=29,
        page=Page.HEALTH,
        title="Start by Choosing Your Goal",
        content=(
            "Pick what you're working toward. We'll handle the calculations and help you decide what to do next.",
        ),
        skip_check=SkipCheck.HAS_GOAL_SET,
    ),
    Card(
        id=30,
        page=Page.HEALTH,
        title="Track Nutrition",
        content=(
            "Now that your goal is set, it's time to track nutrition.",
            "Log meals manually, enter macros, describe your meal, or snap a photo to estimate calories.",
        ),
    ),
    Card(
        id=31,
        page=Page.HEALTH,
        title="Log Training & Track Progress",
        content=(
            "Create workout routines aligned to your goals and log sessions, then track weight over time to see if you're staying on pace.",
        ),
    ),
    Card(
        id=32,
        page=Page.HEALTH,
        title="Connect the Dots",
        content=(
            "Your caloric delta is the balance between what you eat and how much you move.",
            "You can log activity burn manually, or let the system estimate it from a short description of your workout.",
        ),
    ),
    # ---- Community walkthrough ----
    Card(
        id=33,
        page=Page.COMMUNITY,
        title="Community",
        content=(
            "FrisFocus works solo, but becomes more powerful with others.",
            "The community page is your hub for checking in on friends and holding each other accountable!",
        ),
    ),
    Card(
        id=34,
        page=Page.COMMUNITY,
        title="Friends: Shared Progress, Personal Support",
        content=(
            "Add friends to share progress, stay connected, and support each other along the way.",
            "Friends don't change your goals. They make consistency easier.",
        ),
    ),
    Card(
        id=35,
        page=Page.COMMUNITY,
        title="Sharing Progress",
        content=(
            "You choose what to share with each friend: task completions, streaks and milestones, progress updates, and fitness data.",
            "Your structure stays personal. Visibility is optional and intentional.",
        ),
    ),
    Card(
        id=36,
        page=Page.COMMUNITY,
        title="Circles",
        content=(
            "Circles are shared spaces where progress is visible and accountability is mutual.",
            "Members follow a common task list and build consistency together.",
        ),
    ),
    Card(
        id=37,
        page=Page.COMMUNITY,
        title="Awards & Badges in Circles",
        content=(
            "Within a Circle, you can create Awards and Badges to recognize progress and contribution.",
            "You can tie real life rewards to them if it makes sense for your circle!",
        ),
    ),
    Card(
        id=38,
        page=Page.COMMUNITY,
        title="Competition",
        content=(
            "Go 1v1 with a friend, or compete Circle vs Circle, where groups follow the same task structure and progress is tracked collectively.",
        ),
    ),
    Card(
        id=39,
        page=Page.COMMUNITY,
        title="Feed: Shared Progress, Not Noise",
        content=(
            "The Feed is a simple space to share progress, reflections, and wins with the community.",
            "It's not about likes or performance. It's about visibility, encouragement, and momentum.",
        ),
    ),
    # ---- Insights walkthrough ----
    Card(
        id=40,
        page=Page.INSIGHTS,
        title="Insights: Your Personal Assistant",
        content=(
            "Insights is your personal assistant, grounded in your data and your goals.",
            "It looks across your tasks, habits, streaks, and seasons to help you understand what's working and where small changes can make the biggest difference.",
        ),
    ),
    Card(
        id=41,
        page=Page.INSIGHTS,
        title="Customize Your Insights Assistant",
        content=(
            "Your Insights assistant isn't one-size-fits-all.",
            "Click the settings gear to tell it how you like feedback delivered, what to prioritize, and how strict or supportive to be.",
        ),
    ),
    # ---- Journal walkthrough ----
    Card(
        id=42,
        page=Page.JOURNAL,
        title="Journal: Reflection That Connects the Dots",
        content=(
            "The Journal is a space to capture thoughts, reflections, and check-ins as you move through your days.",
            "Your journal stays personal, but it works alongside your tasks, seasons, and insights to give your growth context.",
        ),
    ),
    Card(
        id=43,
        page=Page.JOURNAL,
        title="Organize Your Reflections",
        content=(
            "Create folders to group related entries, and build custom trackers to log specific things over time.",
        ),
    ),
    # ---- Recognition walkthrough ----
    Card(
        id=44,
        page=Page.BADGES,
        title="Recognition",
        content=(
            "Recognition highlights the effort behind your progress.",
            "This page brings together focus points, personal badges, and global stamps.",
        ),
    ),
    Card(
        id=45,
        page=Page.BADGES,
        title="Focus Points",
        content=(
            "Focus points represent achieved outcomes.",
            "They're awarded for reaching a milestone, staying consistent over time, winning a competition, or supporting others in your circles.",
        ),
    ),
    Card(
        id=46,
        page=Page.BADGES,
        title="Personal Badges",
        content=(
            "Badges are personal milestones you create for yourself.",
            "They're tied to your season, your tasks, and your definition of consistency.",
        ),
    ),
    Card(
        id=47,
        page=Page.BADGES,
        title="Community Stamps",
        content=(
            "Community stamps are platform-wide achievements earned through fixed criteria that apply to everyone.",
        ),
    ),
)

MAIN_SEQUENCE: tuple[int, ...] = tuple(c.id for c in _CARDS if c.id <= 27)

PAGE_SEQUENCES: dict[Page, tuple[int, ...]] = {
    Page.DASHBOARD: (),  # Covered by the main flow
    Page.TASKS: (),
    Page.DAILY: (),
    Page.HEALTH: (28, 29, 30, 31, 32),
    Page.COMMUNITY: (33, 34, 35, 36, 37, 38, 39),
    Page.INSIGHTS: (40, 41),
    Page.JOURNAL: (42, 43),
    Page.BADGES: (44, 45, 46, 47),
}

CATALOG = CardCatalog(
    cards=_CARDS,
    main_sequence=MAIN_SEQUENCE,
    page_sequences=PAGE_SEQUENCES,
)
