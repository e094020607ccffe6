"""Pydantic models for the voting HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from movie_voting.domain.votings import VotingView


class CreateVotingRequest(BaseModel):
    """Body of a create voting request."""

    model_config = ConfigDict(extra="forbid")

    candidates: list[str]
    duration: int = Field(ge=0)


class VoteRequest(BaseModel):
    """Body of a vote request."""

    model_config = ConfigDict(extra="forbid")

    candidate: str


class CandidatePayload(BaseModel):
    name: str
    vote_count: int


class VotingPayload(BaseModel):
    """Public view of a voting."""

    creator: str
    end_time: int
    state: int
    candidates: list[CandidatePayload]

    @classmethod
    def from_view(cls, view: VotingView) -> "VotingPayload":
        return cls(
            creator=view.creator,
            end_time=view.end_time,
            state=int(view.state),
            candidates=[
                CandidatePayload(name=c.name, vote_count=c.vote_count)
                for c in view.candidates
            ],
        )
