"""Voting lifecycle state machine."""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Protocol

from movie_voting.domain.errors import (
    AlreadyVoted,
    CandidateNotFound,
    InvalidInput,
    InvalidState,
    ReentrantCall,
    StillOngoing,
    Unauthorized,
    VotingError,
    VotingExpired,
    VotingNotFound,
)
from movie_voting.domain.votings import (
    Candidate,
    VoteCast,
    VotingCreated,
    VotingFinished,
    VotingRecord,
    VotingState,
    VotingView,
)
from movie_voting.services.clock import Clock, SystemClock
from movie_voting.services.events import EventService

_logger = logging.getLogger(__name__)


class VotingRepository(Protocol):
    """Persistence interface for voting sessions."""

    def count_votings(self) -> int:
        """Return how many votings have been created."""

    def create_voting(self, record: VotingRecord) -> None:
        """Store a newly created voting."""

    def get_voting(self, voting_id: int) -> VotingRecord | None:
        """Return a voting by id, if present."""

    def update_voting(self, record: VotingRecord) -> None:
        """Replace the stored state of an existing voting."""

    def list_votings(self, limit: int) -> list[VotingRecord]:
        """Return the most recently created votings first."""


@dataclass
class VotingService:
    """Registry of voting sessions enforcing the voting lifecycle.

    Each change to a session is committed under that session's lock, so a vote
    can never be counted without its voter being recorded. Checks run before
    anything is persisted; a rejected request leaves the session untouched.
    Events are published once the lock is released, but a thread may not
    mutate a session again until its own call on that session has returned.
    """

    repository: VotingRepository
    event_service: EventService
    clock: Clock = field(default_factory=SystemClock)
    _registry_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _locks: dict[int, threading.Lock] = field(
        default_factory=dict, init=False, repr=False
    )
    _locks_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _local: threading.local = field(
        default_factory=threading.local, init=False, repr=False
    )

    def create_voting(
        self, caller: str, candidate_names: list[str], duration: int
    ) -> int:
        """Create a voting that ends ``duration`` seconds from now."""
        if not candidate_names:
            raise InvalidInput("No movies provided")
        if duration < 0:
            raise InvalidInput("Duration cannot be negative")
        candidates = tuple(Candidate(name=name) for name in candidate_names)
        with self._mutating(None):
            with self._registry_lock:
                voting_id = self.repository.count_votings()
                end_time = self.clock.now() + duration
                record = VotingRecord(
                    id=voting_id,
                    creator=caller,
                    end_time=end_time,
                    state=VotingState.NOT_STARTED,
                    candidates=candidates,
                )
                self.repository.create_voting(record)
            _logger.info(
                "Voting created: id=%s creator=%s end_time=%s",
                voting_id,
                caller,
                end_time,
            )
            self.event_service.publish(
                VotingCreated(voting_id=voting_id, creator=caller, end_time=end_time)
            )
        return voting_id

    def start_voting(self, caller: str, voting_id: int) -> None:
        """Open a voting for ballots; only its creator may do this."""
        with self._mutating(voting_id), self._session_lock(voting_id):
            record = self._require(voting_id)
            if record.creator != caller:
                raise Unauthorized()
            if record.state != VotingState.NOT_STARTED:
                raise InvalidState()
            self.repository.update_voting(record.with_state(VotingState.ONGOING))
            _logger.info("Voting started: id=%s", voting_id)

    def vote(self, caller: str, voting_id: int, candidate_name: str) -> None:
        """Cast the caller's single ballot for ``candidate_name``."""
        with self._mutating(voting_id):
            with self._session_lock(voting_id):
                record = self._require(voting_id)
                if record.state != VotingState.ONGOING:
                    raise InvalidState()
                if self.clock.now() >= record.end_time:
                    raise VotingExpired(voting_id)
                if caller in record.voted_by:
                    raise AlreadyVoted(voting_id)
                if not candidate_name:
                    raise InvalidInput("Movie name cannot be empty")
                index = _find_candidate(record.candidates, candidate_name)
                if index is None:
                    raise CandidateNotFound(voting_id, candidate_name)
                self.repository.update_voting(record.with_vote(index, caller))
            _logger.info("Vote cast: id=%s voter=%s", voting_id, caller)
            self.event_service.publish(
                VoteCast(
                    voting_id=voting_id, voter=caller, candidate_name=candidate_name
                )
            )

    def finish_voting(self, caller: str, voting_id: int) -> str:
        """Close an expired voting and return the winning candidate name."""
        with self._mutating(voting_id):
            with self._session_lock(voting_id):
                record = self._require(voting_id)
                if record.creator != caller:
                    raise Unauthorized()
                if record.state != VotingState.ONGOING:
                    raise InvalidState()
                if self.clock.now() < record.end_time:
                    raise StillOngoing()
                winner = _pick_winner(record.candidates)
                self.repository.update_voting(
                    record.with_state(VotingState.FINISHED, winner=winner)
                )
            _logger.info("Voting finished: id=%s winner=%s", voting_id, winner)
            self.event_service.publish(
                VotingFinished(voting_id=voting_id, winner_name=winner)
            )
        return winner

    def get_voting(self, voting_id: int) -> VotingView:
        """Return the public fields of a voting."""
        record = self._require(voting_id)
        return VotingView(
            creator=record.creator,
            end_time=record.end_time,
            state=record.state,
            candidates=record.candidates,
        )

    def has_user_voted(self, voting_id: int, participant: str) -> bool:
        """Return whether ``participant`` has voted in the voting."""
        record = self.repository.get_voting(voting_id)
        return record is not None and participant in record.voted_by

    def voting_count(self) -> int:
        """Return the number of votings created so far."""
        return self.repository.count_votings()

    def list_votings(self, limit: int = 20) -> list[VotingRecord]:
        """Return recent votings, newest first."""
        return self.repository.list_votings(limit)

    def _require(self, voting_id: int) -> VotingRecord:
        record = self.repository.get_voting(voting_id)
        if record is None:
            raise VotingNotFound(voting_id)
        return record

    @contextmanager
    def _mutating(self, voting_id: int | None) -> Iterator[None]:
        """Mark ``voting_id`` as being mutated by the current thread.

        ``None`` stands for the registry itself during creation.
        """
        active: set[int | None] | None = getattr(self._local, "active", None)
        if active is None:
            active = set()
            self._local.active = active
        try:
            if voting_id in active:
                raise ReentrantCall(voting_id)
            active.add(voting_id)
            try:
                yield
            finally:
                active.discard(voting_id)
        except VotingError as exc:
            _logger.info(
                "Voting request rejected: id=%s code=%s detail=%s",
                voting_id,
                exc.code,
                exc,
            )
            raise

    @contextmanager
    def _session_lock(self, voting_id: int) -> Iterator[None]:
        with self._locks_lock:
            lock = self._locks.get(voting_id)
        if lock is None:
            # Votings are never deleted, so existence checked here holds.
            self._require(voting_id)
            with self._locks_lock:
                lock = self._locks.setdefault(voting_id, threading.Lock())
        with lock:
            yield


def _find_candidate(candidates: tuple[Candidate, ...], name: str) -> int | None:
    """Return the position of the first candidate named exactly ``name``."""
    for index, candidate in enumerate(candidates):
        if candidate.name == name:
            return index
    return None


def _pick_winner(candidates: tuple[Candidate, ...]) -> str:
    """Return the first candidate to reach the highest vote count."""
    winner = candidates[0]
    for candidate in candidates[1:]:
        if candidate.vote_count > winner.vote_count:
            winner = candidate
    return winner.name
