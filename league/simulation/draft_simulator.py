"""Snake-draft simulation over a historical season.

Each castaway may be drafted up to ``max_owners_per_contestant`` times, so
leagues with more picks than castaways share rosters, but never twice by
the same player. Random picks are weighted by the castaway's season points
plus noise, so stronger castaways go earlier without the draft being
deterministic.
"""
import random

from league.engine.catalog import resolve_points
from league.engine.draft import snake_order
from league.errors import ValidationError

from .score_calculator import castaway_points
from .types import DRAFT_MODES, DraftConfig, DraftResult, SimCastaway, SimSeason

PICK_NOISE = 10
PICK_WEIGHT_OFFSET = 30


def _pick_weighted(
    rng: random.Random,
    castaways: list[SimCastaway],
    draft_count: dict[str, int],
    max_owners: int,
    team: list[str],
    values: dict[str, int],
) -> str:
    available = [
        c for c in castaways
        if draft_count.get(c.id, 0) < max_owners and c.id not in team
    ]
    if not available:
        raise ValidationError("No castaways available to draft")

    weights = [
        max(1.0, values[c.id] + rng.uniform(-PICK_NOISE, PICK_NOISE) + PICK_WEIGHT_OFFSET)
        for c in available
    ]
    return rng.choices(available, weights=weights, k=1)[0].id


def simulate_draft(
    season: SimSeason,
    config: DraftConfig,
    overrides: dict | None = None,
    rng: random.Random | None = None,
) -> DraftResult:
    r = rng or random.Random()
    if config.mode not in DRAFT_MODES:
        raise ValidationError(f"Unknown draft mode: {config.mode}")
    if config.num_players < 1 or config.picks_per_player < 1:
        raise ValidationError("num_players and picks_per_player must be at least 1")
    if config.max_owners_per_contestant < 1:
        raise ValidationError("max_owners_per_contestant must be at least 1")

    max_owners = config.max_owners_per_contestant
    total_picks = config.num_players * config.picks_per_player
    total_slots = len(season.castaways) * max_owners
    if total_slots < total_picks:
        raise ValidationError(
            f"Not enough draft slots: {len(season.castaways)} castaways x {max_owners} "
            f"max owners = {total_slots} slots, but need {total_picks} picks"
        )
    # A player can hold each castaway once.
    if config.picks_per_player > len(season.castaways):
        raise ValidationError("picks_per_player exceeds the number of castaways")

    points = resolve_points(overrides)
    values = {c.id: castaway_points(season, c.id, points) for c in season.castaways}
    known = set(values)

    teams: dict[int, list[str]] = {i: [] for i in range(config.num_players)}
    picks: list[tuple[int, int, int, str]] = []
    draft_count: dict[str, int] = {}

    for pick_index, player in enumerate(snake_order(config.num_players, config.picks_per_player)):
        round_number = pick_index // config.num_players + 1
        pick_in_round = pick_index % config.num_players + 1
        team = teams[player]
        manual = config.manual_picks.get(player) or []

        if config.mode in ("manual", "hybrid") and manual:
            choice = next(
                (
                    cid for cid in manual
                    if cid in known and cid not in team and draft_count.get(cid, 0) < max_owners
                ),
                None,
            )
            if choice is None:
                if config.mode == "manual":
                    raise ValidationError(f"No more manual picks available for player {player}")
                choice = _pick_weighted(r, season.castaways, draft_count, max_owners, team, values)
        elif config.mode == "manual":
            raise ValidationError(f"No manual picks specified for player {player}")
        else:
            choice = _pick_weighted(r, season.castaways, draft_count, max_owners, team, values)

        draft_count[choice] = draft_count.get(choice, 0) + 1
        team.append(choice)
        picks.append((round_number, pick_in_round, player, choice))

    return DraftResult(teams=teams, picks=picks)
