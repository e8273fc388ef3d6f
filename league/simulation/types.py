"""Data shapes for the draft/scoring simulator.

Historical seasons are loaded from JSON files; keys may be snake_case or
the camelCase used by the original season exports.
"""
from dataclasses import dataclass, field
from typing import Optional

from league.engine.catalog import EventType, parse_event_type

DRAFT_MODES = ("random", "manual", "hybrid")


def _pick(data: dict, *keys, default=None):
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass
class SimCastaway:
    id: str
    name: str
    tribe: str = ""
    placement: int = 0
    is_jury: bool = False
    is_finalist: bool = False
    is_winner: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "SimCastaway":
        return cls(
            id=str(data["id"]),
            name=data.get("name", str(data["id"])),
            tribe=data.get("tribe", "") or "",
            placement=int(data.get("placement", 0) or 0),
            is_jury=bool(_pick(data, "is_jury", "isJury", default=False)),
            is_finalist=bool(_pick(data, "is_finalist", "isFinalist", default=False)),
            is_winner=bool(_pick(data, "is_winner", "isWinner", default=False)),
        )


@dataclass
class SimEvent:
    type: EventType
    castaway_id: str
    episode: int
    points: int = 0
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SimEvent":
        return cls(
            type=parse_event_type(data["type"]),
            castaway_id=str(_pick(data, "castaway_id", "castawayId")),
            episode=int(data.get("episode", 0) or 0),
            points=int(data.get("points", 0) or 0),
            description=data.get("description", "") or "",
        )


@dataclass
class SimSeason:
    season: int
    name: str
    num_castaways: int
    num_episodes: int
    castaways: list[SimCastaway] = field(default_factory=list)
    events: list[SimEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SimSeason":
        castaways = [SimCastaway.from_dict(c) for c in data.get("castaways", [])]
        return cls(
            season=int(data["season"]),
            name=data.get("name", f"Season {data['season']}"),
            num_castaways=int(_pick(data, "num_castaways", "numCastaways", default=len(castaways))),
            num_episodes=int(_pick(data, "num_episodes", "numEpisodes", default=0)),
            castaways=castaways,
            events=[SimEvent.from_dict(e) for e in data.get("events", [])],
        )

    def summary(self) -> dict:
        return {
            "season": self.season,
            "name": self.name,
            "num_castaways": self.num_castaways,
            "num_episodes": self.num_episodes,
        }

    def events_for(self, castaway_id: str) -> list[SimEvent]:
        return [e for e in self.events if e.castaway_id == castaway_id]


@dataclass
class DraftConfig:
    num_players: int
    picks_per_player: int
    max_owners_per_contestant: int = 2
    mode: str = "random"
    # player index -> castaway ids, for manual/hybrid drafts
    manual_picks: dict[int, list[str]] = field(default_factory=dict)


@dataclass
class DraftResult:
    # player index -> castaway ids
    teams: dict[int, list[str]]
    # (round, pick in round, player index, castaway id)
    picks: list[tuple[int, int, int, str]]


@dataclass
class CastawayScore:
    id: str
    name: str
    score: int
    event_breakdown: dict[str, int]


@dataclass
class PlayerScore:
    player_index: int
    total_score: int
    castaways: list[CastawayScore]
    score_by_episode: dict[int, int]


@dataclass
class SimulationResult:
    season: int
    draft: DraftResult
    scores: list[PlayerScore]
    rankings: list[int]  # player indices, best first


@dataclass
class PinnedPicks:
    player_index: int
    castaway_ids: list[str]


@dataclass
class MonteCarloConfig:
    num_simulations: int
    draft_config: DraftConfig
    overrides: dict = field(default_factory=dict)
    pinned_picks: Optional[PinnedPicks] = None
