"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from movie_voting.adapters.memory_repositories import (
    InMemoryEventRepository,
    InMemoryVotingRepository,
)
from movie_voting.adapters.supabase_event_repository import SupabaseEventRepository
from movie_voting.adapters.supabase_voting_repository import (
    SupabaseVotingRepository,
)
from movie_voting.config import Settings, parse_storage_backend
from movie_voting.services.clock import Clock, SystemClock
from movie_voting.services.events import EventRepository, EventService
from movie_voting.services.votings import VotingRepository, VotingService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    voting_service: VotingService
    event_service: EventService


def build_container(
    settings: Settings | None = None, clock: Clock | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    voting_repository: VotingRepository
    event_repository: EventRepository
    if parse_storage_backend(resolved_settings.storage_backend) == "supabase":
        if not (
            resolved_settings.supabase_url and resolved_settings.supabase_service_key
        ):
            raise ValueError("Supabase backend requires SUPABASE_URL and key")
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        voting_repository = SupabaseVotingRepository(supabase_client)
        event_repository = SupabaseEventRepository(supabase_client)
    else:
        voting_repository = InMemoryVotingRepository()
        event_repository = InMemoryEventRepository()
    event_service = EventService(event_repository)
    voting_service = VotingService(
        repository=voting_repository,
        event_service=event_service,
        clock=clock or SystemClock(),
    )
    return AppContainer(
        settings=resolved_settings,
        voting_service=voting_service,
        event_service=event_service,
    )
