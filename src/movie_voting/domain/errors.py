"""Errors raised when a voting request is rejected."""


class VotingError(Exception):
    """Base class for rejected voting operations."""

    code = "voting_error"


class InvalidInput(VotingError):
    code = "invalid_input"


class Unauthorized(VotingError):
    code = "unauthorized"

    def __init__(self, message: str = "Not the creator") -> None:
        super().__init__(message)


class InvalidState(VotingError):
    code = "invalid_state"

    def __init__(self, message: str = "Invalid state") -> None:
        super().__init__(message)


class VotingNotFound(VotingError):
    code = "voting_not_found"

    def __init__(self, voting_id: int) -> None:
        super().__init__(f"Voting {voting_id} does not exist")
        self.voting_id = voting_id


class AlreadyVoted(VotingError):
    """The caller has already voted in this session."""

    code = "already_voted"

    def __init__(self, voting_id: int) -> None:
        super().__init__(f"Not eligible to vote in voting {voting_id}")
        self.voting_id = voting_id


class CandidateNotFound(VotingError):
    code = "candidate_not_found"

    def __init__(self, voting_id: int, candidate_name: str) -> None:
        super().__init__(f"Movie {candidate_name!r} not found in voting {voting_id}")
        self.voting_id = voting_id
        self.candidate_name = candidate_name


class VotingExpired(VotingError):
    """The voting window closed but the session was not finished yet."""

    code = "voting_expired"

    def __init__(self, voting_id: int) -> None:
        super().__init__(f"Voting {voting_id} has expired")
        self.voting_id = voting_id


class StillOngoing(VotingError):
    code = "still_ongoing"

    def __init__(self, message: str = "Voting still ongoing") -> None:
        super().__init__(message)


class ReentrantCall(VotingError):
    """A mutating call re-entered a session that is already being mutated."""

    code = "reentrant_call"

    def __init__(self, voting_id: int | None) -> None:
        target = "registry" if voting_id is None else f"voting {voting_id}"
        super().__init__(f"Reentrant call on {target}")
        self.voting_id = voting_id
