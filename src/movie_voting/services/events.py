"""Voting notification service."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from movie_voting.domain.votings import VotingEvent

_logger = logging.getLogger(__name__)

EventSubscriber = Callable[[VotingEvent], None]


class EventRepository(Protocol):
    """Persistence interface for emitted voting events."""

    def create_event(self, event: VotingEvent) -> None:
        """Store an emitted event."""

    def list_events(self, voting_id: int | None, limit: int) -> list[VotingEvent]:
        """Return recent events, optionally for a single voting."""


@dataclass
class EventService:
    """Records voting events and fans them out to subscribers."""

    repository: EventRepository
    subscribers: list[EventSubscriber] = field(default_factory=list)

    def subscribe(self, subscriber: EventSubscriber) -> None:
        """Register a callback invoked for every published event."""
        self.subscribers.append(subscriber)

    def publish(self, event: VotingEvent) -> None:
        """Persist an event and notify subscribers in registration order.

        Publishing follows a committed change, so storage and subscriber
        failures are logged and never reported as a failed operation.
        """
        _logger.info("Voting event %s: %s", type(event).__name__, event)
        try:
            self.repository.create_event(event)
        except Exception:
            _logger.exception("Failed to store voting event %s", type(event).__name__)
        for subscriber in list(self.subscribers):
            try:
                subscriber(event)
            except Exception:
                _logger.exception("Voting event subscriber failed")

    def list_events(
        self, voting_id: int | None = None, limit: int = 50
    ) -> list[VotingEvent]:
        """Return recent events, newest first."""
        return self.repository.list_events(voting_id, limit)
