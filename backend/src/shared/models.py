"""
Data models and status constants for the team balancer.
Based on the assignment lifecycle: Unassigned → Assigned → Published (and back via unpublish/reset)
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .logging import logger

# The balancing engine and the lifecycle only ever deal with four teams.
TEAM_COUNT = 4

APP_STATE_ID = 1

LEVELS = {
    1: 'Never played',
    2: 'Tried it',
    3: 'Play sometimes',
    4: 'Play often',
    5: 'Expert',
}
MIN_LEVEL = min(LEVELS)
MAX_LEVEL = max(LEVELS)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LifecycleStatus:
    """Assignment lifecycle statuses."""
    UNASSIGNED = 'Unassigned'
    ASSIGNED = 'Assigned'
    PUBLISHED = 'Published'


@dataclass
class Participant:
    """A registered tournament participant."""

    id: str
    name: str
    level: int
    token: str
    team_id: Optional[str] = None
    is_leader: bool = False
    created_at: str = ''

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Participant':
        return cls(
            id=item['id'],
            name=item.get('name', ''),
            level=int(item.get('level', MIN_LEVEL)),  # Decimal from DynamoDB
            token=item.get('token', ''),
            team_id=item.get('team_id'),
            is_leader=bool(item.get('is_leader', False)),
            created_at=item.get('created_at', ''),
        )

    def to_item(self) -> Dict[str, Any]:
        item = {
            'id': self.id,
            'name': self.name,
            'level': self.level,
            'token': self.token,
            'is_leader': self.is_leader,
            'created_at': self.created_at,
        }
        # Sparse attribute: DynamoDB keeps no entry for an unassigned participant
        if self.team_id is not None:
            item['team_id'] = self.team_id
        return item

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'level': self.level,
            'token': self.token,
            'team_id': self.team_id,
            'is_leader': self.is_leader,
            'created_at': self.created_at,
        }

    def public_dict(self) -> Dict[str, Any]:
        """Participant fields safe to show to other participants."""
        data = self.to_dict()
        del data['token']
        return data


@dataclass
class Team:
    """One of the four fixed teams."""

    id: str
    name: str
    leader_id: Optional[str] = None
    created_at: str = ''

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Team':
        return cls(
            id=item['id'],
            name=item.get('name', ''),
            leader_id=item.get('leader_id'),
            created_at=item.get('created_at', ''),
        )

    def to_item(self) -> Dict[str, Any]:
        item = {
            'id': self.id,
            'name': self.name,
            'created_at': self.created_at,
        }
        if self.leader_id is not None:
            item['leader_id'] = self.leader_id
        return item

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'leader_id': self.leader_id,
            'created_at': self.created_at,
        }


@dataclass(frozen=True)
class LifecycleState:
    """
    Singleton assignment state.

    Stored as the is_assigned / is_published / assigned_at row, but held in
    memory as a single status so that a published-but-unassigned state cannot
    be built.
    """

    status: str = LifecycleStatus.UNASSIGNED
    assigned_at: Optional[str] = None

    @classmethod
    def unassigned(cls) -> 'LifecycleState':
        return cls()

    @classmethod
    def assigned(cls, assigned_at: str) -> 'LifecycleState':
        return cls(LifecycleStatus.ASSIGNED, assigned_at)

    @property
    def is_assigned(self) -> bool:
        return self.status != LifecycleStatus.UNASSIGNED

    @property
    def is_published(self) -> bool:
        return self.status == LifecycleStatus.PUBLISHED

    def published(self) -> 'LifecycleState':
        return replace(self, status=LifecycleStatus.PUBLISHED)

    def unpublished(self) -> 'LifecycleState':
        if self.status == LifecycleStatus.PUBLISHED:
            return replace(self, status=LifecycleStatus.ASSIGNED)
        return self

    @classmethod
    def from_item(cls, item: Optional[Dict[str, Any]]) -> 'LifecycleState':
        if not item or not item.get('is_assigned'):
            if item and item.get('is_published'):
                logger.warning("App state row is published but not assigned, reading as Unassigned")
            return cls.unassigned()
        status = LifecycleStatus.PUBLISHED if item.get('is_published') else LifecycleStatus.ASSIGNED
        return cls(status, item.get('assigned_at'))

    def to_item(self) -> Dict[str, Any]:
        return {
            'id': APP_STATE_ID,
            'is_assigned': self.is_assigned,
            'is_published': self.is_published,
            'assigned_at': self.assigned_at,
        }
