"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from movie_voting.domain.votings import event_to_payload

if TYPE_CHECKING:
    from movie_voting.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/votings", dependencies=[Depends(require_admin)])
def list_votings(
    request: Request, limit: int = Query(20, ge=1, le=100)
) -> dict[str, object]:
    """Return recent votings with their tallies and voters."""
    container: AppContainer = request.app.state.container
    votings = container.voting_service.list_votings(limit)
    return {
        "votings": [
            {
                "id": record.id,
                "creator": record.creator,
                "end_time": record.end_time,
                "state": record.state.name,
                "candidates": [
                    {"name": c.name, "vote_count": c.vote_count}
                    for c in record.candidates
                ],
                "voter_count": len(record.voted_by),
                "winner": record.winner,
            }
            for record in votings
        ]
    }


@router.get("/events", dependencies=[Depends(require_admin)])
def list_events(
    request: Request,
    voting_id: int | None = None,
    limit: int = Query(50, ge=1, le=100),
) -> dict[str, object]:
    """Return recently emitted voting events."""
    container: AppContainer = request.app.state.container
    events = container.event_service.list_events(voting_id, limit)
    return {"events": [event_to_payload(event) for event in events]}
