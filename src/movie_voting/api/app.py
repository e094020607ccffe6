"""FastAPI application factory."""

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from movie_voting.api.admin import router as admin_router
from movie_voting.api.models import CreateVotingRequest, VoteRequest, VotingPayload
from movie_voting.app_logging import configure_logging
from movie_voting.containers import AppContainer
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

_ERROR_STATUS: dict[type[VotingError], int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    InvalidState: status.HTTP_409_CONFLICT,
    AlreadyVoted: status.HTTP_409_CONFLICT,
    CandidateNotFound: status.HTTP_404_NOT_FOUND,
    VotingExpired: status.HTTP_409_CONFLICT,
    StillOngoing: status.HTTP_409_CONFLICT,
    VotingNotFound: status.HTTP_404_NOT_FOUND,
    ReentrantCall: status.HTTP_409_CONFLICT,
}

_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


async def require_caller(x_caller_id: str | None = Header(default=None)) -> str:
    """Return the opaque identity of the caller."""
    if not x_caller_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Caller-Id"
        )
    return x_caller_id


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(VotingError)
    async def voting_error_handler(
        request: Request, exc: VotingError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=_ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST),
            content={"error": exc.code, "detail": str(exc)},
        )

    @app.exception_handler(RuntimeError)
    async def storage_error_handler(
        request: Request, exc: RuntimeError
    ) -> JSONResponse:
        logger.exception("Voting request failed", extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "storage_unavailable", "detail": str(exc)},
        )

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/votings", status_code=status.HTTP_201_CREATED)
    def create_voting(
        body: CreateVotingRequest,
        request: Request,
        caller: str = Depends(require_caller),
    ) -> dict[str, int]:
        """Create a voting owned by the caller."""
        service = request.app.state.container.voting_service
        voting_id = service.create_voting(caller, body.candidates, body.duration)
        return {"voting_id": voting_id}

    @app.get("/votings/count")
    def voting_count(request: Request) -> dict[str, int]:
        """Return how many votings exist."""
        return {"count": request.app.state.container.voting_service.voting_count()}

    @app.get("/votings/{voting_id}")
    def get_voting(voting_id: int, request: Request) -> VotingPayload:
        """Return the public fields of a voting."""
        view = request.app.state.container.voting_service.get_voting(voting_id)
        return VotingPayload.from_view(view)

    @app.get("/votings/{voting_id}/voters/{participant}")
    def has_user_voted(
        voting_id: int, participant: str, request: Request
    ) -> dict[str, bool]:
        """Return whether the participant has voted."""
        service = request.app.state.container.voting_service
        return {"has_voted": service.has_user_voted(voting_id, participant)}

    @app.post("/votings/{voting_id}/start")
    def start_voting(
        voting_id: int, request: Request, caller: str = Depends(require_caller)
    ) -> dict[str, str]:
        """Open the voting for ballots."""
        request.app.state.container.voting_service.start_voting(caller, voting_id)
        return {"status": "ok"}

    @app.post("/votings/{voting_id}/votes")
    def vote(
        voting_id: int,
        body: VoteRequest,
        request: Request,
        caller: str = Depends(require_caller),
    ) -> dict[str, str]:
        """Cast the caller's vote."""
        service = request.app.state.container.voting_service
        service.vote(caller, voting_id, body.candidate)
        return {"status": "ok"}

    @app.post("/votings/{voting_id}/finish")
    def finish_voting(
        voting_id: int, request: Request, caller: str = Depends(require_caller)
    ) -> dict[str, str]:
        """Close the voting and return the winner."""
        service = request.app.state.container.voting_service
        return {"winner": service.finish_voting(caller, voting_id)}

    @app.api_route("/", methods=["POST", "PUT", "PATCH"])
    async def reject_transfer() -> None:
        """The registry accepts no bare value transfers."""
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Direct value transfers are not allowed",
        )

    @app.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def reject_fallback(path: str) -> None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Fallback function not supported",
        )

    return app
