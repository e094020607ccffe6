"""Supabase repository for voting events."""

from dataclasses import dataclass

from supabase import Client

from movie_voting.domain.votings import (
    VotingEvent,
    event_from_payload,
    event_to_payload,
)
from movie_voting.services.events import EventRepository


@dataclass
class SupabaseEventRepository(EventRepository):
    """Supabase-backed event log."""

    client: Client

    def create_event(self, event: VotingEvent) -> None:
        """Insert an event row."""
        payload = event_to_payload(event)
        self.client.table("voting_events").insert(
            {
                "voting_id": event.voting_id,
                "event_type": payload["event"],
                "payload_json": payload,
            }
        ).execute()

    def list_events(self, voting_id: int | None, limit: int) -> list[VotingEvent]:
        """Return recent events, newest first."""
        query = self.client.table("voting_events").select("payload_json")
        if voting_id is not None:
            query = query.eq("voting_id", voting_id)
        response = query.order("created_at", desc=True).limit(limit).execute()
        return [event_from_payload(row["payload_json"]) for row in response.data or []]
