"""In-memory repositories used when no database is configured."""

import threading
from dataclasses import dataclass, field

from movie_voting.domain.votings import VotingEvent, VotingRecord
from movie_voting.services.events import EventRepository
from movie_voting.services.votings import VotingRepository


@dataclass
class InMemoryVotingRepository(VotingRepository):
    """Process-local voting storage keyed by voting id."""

    votings: dict[int, VotingRecord] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def count_votings(self) -> int:
        with self._lock:
            return len(self.votings)

    def create_voting(self, record: VotingRecord) -> None:
        with self._lock:
            if record.id in self.votings:
                raise RuntimeError(f"Voting {record.id} already exists")
            self.votings[record.id] = record

    def get_voting(self, voting_id: int) -> VotingRecord | None:
        with self._lock:
            return self.votings.get(voting_id)

    def update_voting(self, record: VotingRecord) -> None:
        with self._lock:
            if record.id not in self.votings:
                raise RuntimeError(f"Voting {record.id} does not exist")
            self.votings[record.id] = record

    def list_votings(self, limit: int) -> list[VotingRecord]:
        with self._lock:
            ordered = sorted(self.votings.values(), key=lambda r: r.id, reverse=True)
        return ordered[:limit]


@dataclass
class InMemoryEventRepository(EventRepository):
    """Append-only event log kept in memory."""

    events: list[VotingEvent] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def create_event(self, event: VotingEvent) -> None:
        with self._lock:
            self.events.append(event)

    def list_events(self, voting_id: int | None, limit: int) -> list[VotingEvent]:
        with self._lock:
            events = list(reversed(self.events))
        if voting_id is not None:
            events = [event for event in events if event.voting_id == voting_id]
        return events[:limit]
