"""Supabase-backed voting repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from movie_voting.domain.votings import Candidate, VotingRecord, VotingState
from movie_voting.services.votings import VotingRepository

_COLUMNS = "id, creator, end_time, state, candidates_json, voted_by_json, winner"


@dataclass
class SupabaseVotingRepository(VotingRepository):
    """Supabase implementation for voting sessions."""

    client: Client

    def count_votings(self) -> int:
        """Return the next free id, which equals the number of votings."""
        response = (
            self.client.table("votings")
            .select("id")
            .order("id", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return 0
        return int(response.data[0]["id"]) + 1

    def create_voting(self, record: VotingRecord) -> None:
        """Insert a voting row."""
        response = (
            self.client.table("votings")
            .insert({"id": record.id, **_to_row(record)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create voting")

    def get_voting(self, voting_id: int) -> VotingRecord | None:
        """Return a voting by id, if present."""
        response = (
            self.client.table("votings")
            .select(_COLUMNS)
            .eq("id", voting_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _from_row(response.data[0])

    def update_voting(self, record: VotingRecord) -> None:
        """Write the mutable fields of a voting."""
        payload = _to_row(record)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = (
            self.client.table("votings").update(payload).eq("id", record.id).execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update voting {record.id}")

    def list_votings(self, limit: int) -> list[VotingRecord]:
        """Return recent votings, newest first."""
        response = (
            self.client.table("votings")
            .select(_COLUMNS)
            .order("id", desc=True)
            .limit(limit)
            .execute()
        )
        return [_from_row(row) for row in response.data or []]


def _to_row(record: VotingRecord) -> dict[str, object]:
    return {
        "creator": record.creator,
        "end_time": record.end_time,
        "state": int(record.state),
        "candidates_json": [
            {"name": candidate.name, "vote_count": candidate.vote_count}
            for candidate in record.candidates
        ],
        "voted_by_json": sorted(record.voted_by),
        "winner": record.winner,
    }


def _from_row(row: dict[str, object]) -> VotingRecord:
    candidates = row.get("candidates_json") or []
    voted_by = row.get("voted_by_json") or []
    return VotingRecord(
        id=int(row["id"]),
        creator=str(row["creator"]),
        end_time=int(row["end_time"]),
        state=VotingState(int(row["state"])),
        candidates=tuple(
            Candidate(name=str(item["name"]), vote_count=int(item["vote_count"]))
            for item in candidates
        ),
        voted_by=frozenset(str(voter) for voter in voted_by),
        winner=row.get("winner"),
    )
