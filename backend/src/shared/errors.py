"""
Error types raised by the team balancer core.

Handlers turn these into API responses with error_response(); every error
carries the HTTP status it maps to and enough context to render a message.
"""
from typing import Any, Dict, List, Optional


class TeamBalancerError(Exception):
    """Base exception for all team balancer errors."""

    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        body = {'error': self.message}
        body.update(self.context)
        return body


class ValidationError(TeamBalancerError):
    """Raised when request input has the wrong shape or is out of range."""

    status_code = 400


class PreconditionError(TeamBalancerError):
    """Raised when the lifecycle is in the wrong state for an operation."""

    status_code = 400


class InsufficientLeadersError(PreconditionError):
    """Raised when preview or commit runs without exactly one leader per team."""

    def __init__(self, leaders_count: int, teams_without_leader: Optional[List[str]] = None):
        super().__init__(
            'Exactly four team leaders, one per team, must be configured',
            leadersCount=leaders_count,
            teamsWithoutLeader=teams_without_leader or [],
        )
        self.leaders_count = leaders_count
        self.teams_without_leader = teams_without_leader or []


class InvalidLeaderAssignment(PreconditionError):
    """Raised when a leader's team_id references none of the teams."""

    def __init__(self, participant_id: str, team_id: Any):
        super().__init__(
            f"Leader {participant_id} references unknown team {team_id}",
            participantId=participant_id,
            teamId=team_id,
        )


class ConflictError(TeamBalancerError):
    """Raised when a conditional write loses against a concurrent request."""

    status_code = 409


class NotFoundError(TeamBalancerError):
    """Raised for an unknown token, team or participant id."""

    status_code = 404


class InternalStorageError(TeamBalancerError):
    """Raised when DynamoDB rejects or fails a read or write."""

    status_code = 500
