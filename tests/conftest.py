"""Shared test fixtures."""

from dataclasses import dataclass

import pytest

from movie_voting.adapters.memory_repositories import (
    InMemoryEventRepository,
    InMemoryVotingRepository,
)
from movie_voting.config import Settings
from movie_voting.containers import AppContainer
from movie_voting.services.clock import Clock
from movie_voting.services.events import EventService
from movie_voting.services.votings import VotingService

START_TIME = 1_700_000_000


@dataclass
class ManualClock(Clock):
    """Clock that only moves when a test advances it."""

    current: int = START_TIME

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> None:
        self.current += seconds


@pytest.fixture
def settings() -> Settings:
    return Settings(admin_token="admin-token")


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def voting_repository() -> InMemoryVotingRepository:
    return InMemoryVotingRepository()


@pytest.fixture
def event_repository() -> InMemoryEventRepository:
    return InMemoryEventRepository()


@pytest.fixture
def event_service(event_repository: InMemoryEventRepository) -> EventService:
    return EventService(event_repository)


@pytest.fixture
def voting_service(
    voting_repository: InMemoryVotingRepository,
    event_service: EventService,
    clock: ManualClock,
) -> VotingService:
    return VotingService(
        repository=voting_repository,
        event_service=event_service,
        clock=clock,
    )


@pytest.fixture
def container(
    settings: Settings,
    voting_service: VotingService,
    event_service: EventService,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        voting_service=voting_service,
        event_service=event_service,
    )
