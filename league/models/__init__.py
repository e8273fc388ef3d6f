from .user import User
from .contestant import Contestant
from .tribe import Tribe, TribeMembership
from .episode import Episode
from .game_event import GameEvent
from .event import ScoringEvent
from .team import Team, TeamContestant
from .draft import Draft

__all__ = [
    "User",
    "Contestant",
    "Tribe",
    "TribeMembership",
    "Episode",
    "GameEvent",
    "ScoringEvent",
    "Team",
    "TeamContestant",
    "Draft",
]
