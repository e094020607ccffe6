"""Domain models for voting sessions."""

from dataclasses import asdict, dataclass, field, replace
from enum import IntEnum


class VotingState(IntEnum):
    """Lifecycle state of a voting session."""

    NOT_STARTED = 0
    ONGOING = 1
    FINISHED = 2


@dataclass(frozen=True)
class Candidate:
    """A named option with its vote tally."""

    name: str
    vote_count: int = 0


@dataclass(frozen=True)
class VotingRecord:
    """Represents a persisted voting session."""

    id: int
    creator: str
    end_time: int
    state: VotingState
    candidates: tuple[Candidate, ...]
    voted_by: frozenset[str] = field(default_factory=frozenset)
    winner: str | None = None

    def with_state(
        self, state: VotingState, winner: str | None = None
    ) -> "VotingRecord":
        """Return a copy advanced to the given state."""
        if winner is None:
            winner = self.winner
        return replace(self, state=state, winner=winner)

    def with_vote(self, index: int, voter: str) -> "VotingRecord":
        """Return a copy with one more vote for the candidate at ``index``."""
        candidates = list(self.candidates)
        chosen = candidates[index]
        candidates[index] = replace(chosen, vote_count=chosen.vote_count + 1)
        return replace(
            self,
            candidates=tuple(candidates),
            voted_by=self.voted_by | {voter},
        )


@dataclass(frozen=True)
class VotingView:
    """Read-only projection returned by voting queries."""

    creator: str
    end_time: int
    state: VotingState
    candidates: tuple[Candidate, ...]


@dataclass(frozen=True)
class VotingCreated:
    voting_id: int
    creator: str
    end_time: int


@dataclass(frozen=True)
class VoteCast:
    voting_id: int
    voter: str
    candidate_name: str


@dataclass(frozen=True)
class VotingFinished:
    voting_id: int
    winner_name: str


VotingEvent = VotingCreated | VoteCast | VotingFinished


_EVENT_TYPES: dict[str, type[VotingEvent]] = {
    "VotingCreated": VotingCreated,
    "VoteCast": VoteCast,
    "VotingFinished": VotingFinished,
}


def event_to_payload(event: VotingEvent) -> dict[str, object]:
    """Serialize an event with its type name under ``event``."""
    return {"event": type(event).__name__, **asdict(event)}


def event_from_payload(payload: dict[str, object]) -> VotingEvent:
    """Rebuild an event serialized by ``event_to_payload``."""
    fields = dict(payload)
    event_type = _EVENT_TYPES.get(str(fields.pop("event", "")))
    if event_type is None:
        raise ValueError(f"Unknown voting event: {payload.get('event')!r}")
    return event_type(**fields)
