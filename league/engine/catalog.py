"""Event catalog -- point value and display label for every scoring event type.

All score calculations derive from this table. It is built once at import
time and exposed read-only; nothing in the process mutates it.
"""
from enum import Enum
from types import MappingProxyType

from league.errors import UnknownEventType


class EventType(str, Enum):
    INDIVIDUAL_IMMUNITY_WIN = "INDIVIDUAL_IMMUNITY_WIN"
    REWARD_CHALLENGE_WIN = "REWARD_CHALLENGE_WIN"
    TEAM_CHALLENGE_WIN = "TEAM_CHALLENGE_WIN"
    CORRECT_VOTE = "CORRECT_VOTE"
    IDOL_PLAY_SUCCESS = "IDOL_PLAY_SUCCESS"
    IDOL_FIND = "IDOL_FIND"
    FIRE_MAKING_WIN = "FIRE_MAKING_WIN"
    ZERO_VOTES_RECEIVED = "ZERO_VOTES_RECEIVED"
    SURVIVED_WITH_VOTES = "SURVIVED_WITH_VOTES"
    CAUSED_BLINDSIDE = "CAUSED_BLINDSIDE"
    MADE_JURY = "MADE_JURY"
    FINALIST = "FINALIST"
    WINNER = "WINNER"
    VOTED_OUT_WITH_IDOL = "VOTED_OUT_WITH_IDOL"
    QUIT = "QUIT"


# ============================================================
# Point values
# ============================================================
EVENT_POINTS = MappingProxyType({
    # Challenge performance
    EventType.INDIVIDUAL_IMMUNITY_WIN: 5,
    EventType.REWARD_CHALLENGE_WIN: 3,
    EventType.TEAM_CHALLENGE_WIN: 1,

    # Tribal council & strategy
    EventType.CORRECT_VOTE: 2,
    EventType.IDOL_PLAY_SUCCESS: 5,
    EventType.IDOL_FIND: 3,
    EventType.FIRE_MAKING_WIN: 5,

    # Social & game
    EventType.ZERO_VOTES_RECEIVED: 1,
    EventType.SURVIVED_WITH_VOTES: 2,
    EventType.CAUSED_BLINDSIDE: 2,

    # Endgame
    EventType.MADE_JURY: 5,
    EventType.FINALIST: 10,
    EventType.WINNER: 20,

    # Deductions
    EventType.VOTED_OUT_WITH_IDOL: -3,
    EventType.QUIT: -10,
})

# ============================================================
# Display labels
# ============================================================
EVENT_LABELS = MappingProxyType({
    EventType.INDIVIDUAL_IMMUNITY_WIN: "Individual Immunity Win",
    EventType.REWARD_CHALLENGE_WIN: "Reward Challenge Win",
    EventType.TEAM_CHALLENGE_WIN: "Team Challenge Win",
    EventType.CORRECT_VOTE: "Correct Vote",
    EventType.IDOL_PLAY_SUCCESS: "Successful Idol Play",
    EventType.IDOL_FIND: "Found Idol",
    EventType.FIRE_MAKING_WIN: "Fire Making Win",
    EventType.ZERO_VOTES_RECEIVED: "Zero Votes Received",
    EventType.SURVIVED_WITH_VOTES: "Survived with Votes",
    EventType.CAUSED_BLINDSIDE: "Caused Blindside",
    EventType.MADE_JURY: "Made Jury",
    EventType.FINALIST: "Finalist",
    EventType.WINNER: "Winner",
    EventType.VOTED_OUT_WITH_IDOL: "Voted Out with Idol",
    EventType.QUIT: "Quit",
})

_CATEGORIES = (
    ("Challenge Performance", (
        EventType.INDIVIDUAL_IMMUNITY_WIN,
        EventType.REWARD_CHALLENGE_WIN,
        EventType.TEAM_CHALLENGE_WIN,
    )),
    ("Tribal Council & Strategy", (
        EventType.CORRECT_VOTE,
        EventType.IDOL_PLAY_SUCCESS,
        EventType.IDOL_FIND,
        EventType.FIRE_MAKING_WIN,
    )),
    ("Social & Game", (
        EventType.ZERO_VOTES_RECEIVED,
        EventType.SURVIVED_WITH_VOTES,
        EventType.CAUSED_BLINDSIDE,
    )),
    ("Endgame", (
        EventType.MADE_JURY,
        EventType.FINALIST,
        EventType.WINNER,
    )),
    ("Deductions", (
        EventType.VOTED_OUT_WITH_IDOL,
        EventType.QUIT,
    )),
)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def parse_event_type(value) -> EventType:
    """Coerce a tag (enum member or its string value) to an EventType."""
    if isinstance(value, EventType):
        return value
    try:
        return EventType(value)
    except ValueError:
        raise UnknownEventType(value) from None


def points_for(event_type) -> int:
    return EVENT_POINTS[parse_event_type(event_type)]


def label_for(event_type) -> str:
    return EVENT_LABELS[parse_event_type(event_type)]


def event_types_by_category() -> dict[str, list[EventType]]:
    return {name: list(types) for name, types in _CATEGORIES}


def category_for(event_type) -> str:
    event_type = parse_event_type(event_type)
    for name, types in _CATEGORIES:
        if event_type in types:
            return name
    raise UnknownEventType(event_type)


def validate_event_points(event_type, points: int) -> bool:
    return points_for(event_type) == points


def resolve_points(overrides: dict | None = None) -> dict[EventType, int]:
    """Return the catalog merged with a sparse override map.

    Used by the simulator to try alternative point schemes; the catalog
    itself is left untouched.
    """
    table = dict(EVENT_POINTS)
    for key, value in (overrides or {}).items():
        table[parse_event_type(key)] = int(value)
    return table
