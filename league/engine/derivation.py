"""Game-event derivation -- expands a compound game event into scoring events.

A tribal council, a challenge or an idol find is submitted once as a
GameEvent; ``derive`` turns it into the individual per-contestant scoring
events it implies. Derivation is a pure function of (type, payload): no I/O,
no randomness, so a pending game event can be safely re-derived after an
edit.

Inconsistent payloads (a contestant voting for themselves, an empty winners
list...) derive no events at all. Callers treat an empty result as a failed
submission.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from league.engine.catalog import EventType, points_for
from league.errors import ValidationError


class GameEventType(str, Enum):
    TRIBAL_COUNCIL = "TRIBAL_COUNCIL"
    IMMUNITY_CHALLENGE = "IMMUNITY_CHALLENGE"
    REWARD_CHALLENGE = "REWARD_CHALLENGE"
    IDOL_FOUND = "IDOL_FOUND"
    IDOL_PLAYED = "IDOL_PLAYED"
    FIRE_MAKING = "FIRE_MAKING"
    QUIT_MEDEVAC = "QUIT_MEDEVAC"
    ENDGAME = "ENDGAME"


GAME_EVENT_LABELS = {
    GameEventType.TRIBAL_COUNCIL: "Tribal Council",
    GameEventType.IMMUNITY_CHALLENGE: "Immunity Challenge",
    GameEventType.REWARD_CHALLENGE: "Reward Challenge",
    GameEventType.IDOL_FOUND: "Idol Found",
    GameEventType.IDOL_PLAYED: "Idol Played",
    GameEventType.FIRE_MAKING: "Fire Making Challenge",
    GameEventType.QUIT_MEDEVAC: "Quit / Medevac",
    GameEventType.ENDGAME: "Endgame",
}


@dataclass(frozen=True)
class DerivedEvent:
    type: EventType
    contestant_id: str
    points: int
    description: str

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "contestant_id": self.contestant_id,
            "points": self.points,
            "description": self.description,
        }


# ---------------------------------------------------------------------------
# Payload shapes, one per GameEventType
# ---------------------------------------------------------------------------

def _coerce_id(value):
    # JSON object keys are always strings, so ids are normalised to str
    # everywhere to keep vote targets and voters comparable.
    if isinstance(value, bool):
        raise ValueError("contestant id must be a string or integer")
    if isinstance(value, int):
        return str(value)
    return value


ContestantRef = Annotated[str, BeforeValidator(_coerce_id)]


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IdolPlay(_Payload):
    by: ContestantRef
    successful: bool = False


class TribalCouncilData(_Payload):
    eliminated: ContestantRef
    # vote target -> contestants who voted for them
    votes: dict[ContestantRef, list[ContestantRef]] = Field(default_factory=dict)
    attendees: Optional[list[ContestantRef]] = None
    eliminated_had_idol: bool = False
    is_blindside: bool = False
    blindside_leader: Optional[ContestantRef] = None
    idol_played: Optional[IdolPlay] = None
    sent_to_jury: bool = False


class ImmunityChallengeData(_Payload):
    winner: ContestantRef


class RewardChallengeData(_Payload):
    winners: list[ContestantRef]
    is_team_challenge: bool = False


class IdolFoundData(_Payload):
    finder: ContestantRef


class IdolPlayedData(_Payload):
    player: ContestantRef


class FireMakingData(_Payload):
    winner: ContestantRef
    loser: ContestantRef


class QuitMedevacData(_Payload):
    contestant: ContestantRef
    reason: Literal["quit", "medevac"] = "quit"


class EndgameData(_Payload):
    finalists: list[ContestantRef]
    winner: ContestantRef


PAYLOAD_MODELS: dict[GameEventType, type[_Payload]] = {
    GameEventType.TRIBAL_COUNCIL: TribalCouncilData,
    GameEventType.IMMUNITY_CHALLENGE: ImmunityChallengeData,
    GameEventType.REWARD_CHALLENGE: RewardChallengeData,
    GameEventType.IDOL_FOUND: IdolFoundData,
    GameEventType.IDOL_PLAYED: IdolPlayedData,
    GameEventType.FIRE_MAKING: FireMakingData,
    GameEventType.QUIT_MEDEVAC: QuitMedevacData,
    GameEventType.ENDGAME: EndgameData,
}


def parse_game_event_type(value) -> GameEventType:
    if isinstance(value, GameEventType):
        return value
    try:
        return GameEventType(value)
    except ValueError:
        raise ValidationError(f"Invalid game event type: {value}") from None


def parse_payload(game_event_type, payload) -> _Payload:
    """Validate a raw payload dict against the model for its game event type."""
    game_event_type = parse_game_event_type(game_event_type)
    model = PAYLOAD_MODELS[game_event_type]
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, dict):
        raise ValidationError(f"{game_event_type.value} payload must be an object")
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid {game_event_type.value} payload: {problems}") from None


# ---------------------------------------------------------------------------
# derive
# ---------------------------------------------------------------------------

def derive(game_event_type, payload) -> list[DerivedEvent]:
    """Derive the scoring events implied by a game event.

    *payload* may be a raw dict (validated here) or an already-parsed
    payload model. Raises ``ValidationError`` for an unknown type or a
    malformed payload; returns ``[]`` for a well-formed but inconsistent one.
    """
    game_event_type = parse_game_event_type(game_event_type)
    data = parse_payload(game_event_type, payload)
    return _DERIVERS[game_event_type](data)


def _event(event_type: EventType, contestant_id: str, description: str) -> DerivedEvent:
    return DerivedEvent(
        type=event_type,
        contestant_id=contestant_id,
        points=points_for(event_type),
        description=description,
    )


def _derive_tribal_council(data: TribalCouncilData) -> list[DerivedEvent]:
    eliminated = data.eliminated

    voters = [voter for ballot in data.votes.values() for voter in ballot]
    if len(voters) != len(set(voters)):
        return []
    for target, ballot in data.votes.items():
        if target in ballot:
            return []

    attendees = list(data.attendees) if data.attendees is not None else []
    if data.attendees is not None and eliminated not in attendees:
        return []
    for target in data.votes:
        if target not in attendees:
            attendees.append(target)

    events: list[DerivedEvent] = []

    for voter in data.votes.get(eliminated, []):
        events.append(_event(
            EventType.CORRECT_VOTE, voter, "Voted correctly at tribal council",
        ))

    for contestant_id in attendees:
        if contestant_id == eliminated:
            continue
        if not data.votes.get(contestant_id):
            events.append(_event(
                EventType.ZERO_VOTES_RECEIVED, contestant_id,
                "Received zero votes at tribal council",
            ))

    for contestant_id in attendees:
        if contestant_id == eliminated:
            continue
        received = len(data.votes.get(contestant_id, []))
        if received > 0:
            events.append(_event(
                EventType.SURVIVED_WITH_VOTES, contestant_id,
                f"Survived tribal council with {received} vote(s)",
            ))

    if data.is_blindside and data.blindside_leader:
        events.append(_event(
            EventType.CAUSED_BLINDSIDE, data.blindside_leader,
            "Led a blindside at tribal council",
        ))

    if data.idol_played is not None and data.idol_played.successful:
        events.append(_event(
            EventType.IDOL_PLAY_SUCCESS, data.idol_played.by,
            "Successfully played a hidden immunity idol",
        ))

    if data.eliminated_had_idol:
        events.append(_event(
            EventType.VOTED_OUT_WITH_IDOL, eliminated,
            "Voted out while holding a hidden immunity idol",
        ))

    if data.sent_to_jury:
        events.append(_event(EventType.MADE_JURY, eliminated, "Sent to the jury"))

    return events


def _derive_immunity_challenge(data: ImmunityChallengeData) -> list[DerivedEvent]:
    return [_event(
        EventType.INDIVIDUAL_IMMUNITY_WIN, data.winner, "Won individual immunity challenge",
    )]


def _derive_reward_challenge(data: RewardChallengeData) -> list[DerivedEvent]:
    if not data.winners or len(data.winners) != len(set(data.winners)):
        return []
    if data.is_team_challenge:
        event_type, description = EventType.TEAM_CHALLENGE_WIN, "Won team reward challenge"
    else:
        event_type, description = EventType.REWARD_CHALLENGE_WIN, "Won reward challenge"
    return [_event(event_type, winner, description) for winner in data.winners]


def _derive_idol_found(data: IdolFoundData) -> list[DerivedEvent]:
    return [_event(EventType.IDOL_FIND, data.finder, "Found a hidden immunity idol")]


def _derive_idol_played(data: IdolPlayedData) -> list[DerivedEvent]:
    return [_event(
        EventType.IDOL_PLAY_SUCCESS, data.player, "Successfully played a hidden immunity idol",
    )]


def _derive_fire_making(data: FireMakingData) -> list[DerivedEvent]:
    if data.winner == data.loser:
        return []
    return [_event(EventType.FIRE_MAKING_WIN, data.winner, "Won fire making challenge")]


def _derive_quit_medevac(data: QuitMedevacData) -> list[DerivedEvent]:
    description = "Quit the game" if data.reason == "quit" else "Medically evacuated"
    return [_event(EventType.QUIT, data.contestant, description)]


def _derive_endgame(data: EndgameData) -> list[DerivedEvent]:
    finalists = data.finalists
    if not finalists or len(finalists) != len(set(finalists)) or data.winner not in finalists:
        return []
    events = [
        _event(EventType.FINALIST, finalist, "Made it to the final tribal council")
        for finalist in finalists
    ]
    events.append(_event(EventType.WINNER, data.winner, "Won Survivor!"))
    return events


_DERIVERS = {
    GameEventType.TRIBAL_COUNCIL: _derive_tribal_council,
    GameEventType.IMMUNITY_CHALLENGE: _derive_immunity_challenge,
    GameEventType.REWARD_CHALLENGE: _derive_reward_challenge,
    GameEventType.IDOL_FOUND: _derive_idol_found,
    GameEventType.IDOL_PLAYED: _derive_idol_played,
    GameEventType.FIRE_MAKING: _derive_fire_making,
    GameEventType.QUIT_MEDEVAC: _derive_quit_medevac,
    GameEventType.ENDGAME: _derive_endgame,
}


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def game_event_label(game_event_type) -> str:
    return GAME_EVENT_LABELS[parse_game_event_type(game_event_type)]


def eliminated_contestant(game_event_type, payload) -> Optional[str]:
    """Contestant removed from the game when this event is approved, if any."""
    game_event_type = parse_game_event_type(game_event_type)
    data = parse_payload(game_event_type, payload)
    if game_event_type == GameEventType.TRIBAL_COUNCIL:
        return data.eliminated
    if game_event_type == GameEventType.QUIT_MEDEVAC:
        return data.contestant
    return None


def referenced_contestants(game_event_type, payload) -> list[str]:
    """Every contestant id named anywhere in the payload, in first-seen order.

    Includes ids that derive no scoring event, such as a tribal council's
    eliminated contestant or a fire-making loser.
    """
    game_event_type = parse_game_event_type(game_event_type)
    data = parse_payload(game_event_type, payload)

    if game_event_type == GameEventType.TRIBAL_COUNCIL:
        ids = [data.eliminated]
        for target, ballot in data.votes.items():
            ids.append(target)
            ids.extend(ballot)
        ids.extend(data.attendees or [])
        if data.blindside_leader:
            ids.append(data.blindside_leader)
        if data.idol_played is not None:
            ids.append(data.idol_played.by)
    elif game_event_type == GameEventType.IMMUNITY_CHALLENGE:
        ids = [data.winner]
    elif game_event_type == GameEventType.REWARD_CHALLENGE:
        ids = list(data.winners)
    elif game_event_type == GameEventType.IDOL_FOUND:
        ids = [data.finder]
    elif game_event_type == GameEventType.IDOL_PLAYED:
        ids = [data.player]
    elif game_event_type == GameEventType.FIRE_MAKING:
        ids = [data.winner, data.loser]
    elif game_event_type == GameEventType.QUIT_MEDEVAC:
        ids = [data.contestant]
    else:
        ids = [*data.finalists, data.winner]
    return list(dict.fromkeys(ids))


def summarize(game_event_type, payload, contestant_names: dict) -> str:
    """One-line description of a game event for listings."""
    game_event_type = parse_game_event_type(game_event_type)
    data = parse_payload(game_event_type, payload)

    def name(contestant_id):
        return contestant_names.get(contestant_id) or "Unknown"

    if game_event_type == GameEventType.TRIBAL_COUNCIL:
        text = f"{name(data.eliminated)} voted out"
        if data.is_blindside:
            text += " (blindside)"
        if data.sent_to_jury:
            text += ", sent to jury"
        return text
    if game_event_type == GameEventType.IMMUNITY_CHALLENGE:
        return f"{name(data.winner)} won individual immunity"
    if game_event_type == GameEventType.REWARD_CHALLENGE:
        return f"{', '.join(name(w) for w in data.winners)} won reward"
    if game_event_type == GameEventType.IDOL_FOUND:
        return f"{name(data.finder)} found a hidden immunity idol"
    if game_event_type == GameEventType.IDOL_PLAYED:
        return f"{name(data.player)} played a hidden immunity idol"
    if game_event_type == GameEventType.FIRE_MAKING:
        return f"{name(data.winner)} defeated {name(data.loser)} in fire making"
    if game_event_type == GameEventType.QUIT_MEDEVAC:
        verb = "quit" if data.reason == "quit" else "was medically evacuated"
        return f"{name(data.contestant)} {verb}"
    finalists = ", ".join(name(f) for f in data.finalists)
    return f"{name(data.winner)} won! Finalists: {finalists}"
