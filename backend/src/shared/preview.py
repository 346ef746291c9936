"""
Roster projection and spread statistics for an assignment.

The same projection renders a fresh engine run (preview) and the committed
state read back from stored team_id values.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from .models import Participant, Team


def member_sort_key(participant: Participant):
    """Leaders first, then highest level first."""
    return (not participant.is_leader, -participant.level)


@dataclass
class TeamPreview:
    id: str
    name: str
    members: List[Participant] = field(default_factory=list)

    @property
    def score(self) -> int:
        return sum(m.level for m in self.members)

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def leader(self):
        return next((m for m in self.members if m.is_leader), None)

    def to_dict(self, public: bool = False) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'members': [m.public_dict() if public else m.to_dict() for m in self.members],
            'score': self.score,
            'memberCount': self.member_count,
        }


@dataclass
class AssignmentStats:
    total_participants: int = 0
    max_score: int = 0
    min_score: int = 0
    max_members: int = 0
    min_members: int = 0

    @property
    def score_diff(self) -> int:
        return self.max_score - self.min_score

    @property
    def member_diff(self) -> int:
        return self.max_members - self.min_members

    @classmethod
    def from_teams(cls, teams: Sequence[TeamPreview]) -> 'AssignmentStats':
        if not teams:
            return cls()
        scores = [t.score for t in teams]
        counts = [t.member_count for t in teams]
        return cls(
            total_participants=sum(counts),
            max_score=max(scores),
            min_score=min(scores),
            max_members=max(counts),
            min_members=min(counts),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalParticipants': self.total_participants,
            'maxScore': self.max_score,
            'minScore': self.min_score,
            'scoreDiff': self.score_diff,
            'maxMembers': self.max_members,
            'minMembers': self.min_members,
            'memberDiff': self.member_diff,
        }


@dataclass
class AssignmentPreview:
    teams: List[TeamPreview]
    stats: AssignmentStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            'teams': [t.to_dict() for t in self.teams],
            'stats': self.stats.to_dict(),
        }


def build_preview(
    teams: Sequence[Team],
    participants: Sequence[Participant],
    assignment: Mapping[str, Sequence[str]]
) -> AssignmentPreview:
    """
    Build the display roster for an assignment.

    Args:
        teams: Teams in display order
        participants: All participants the assignment may reference
        assignment: Team id to member ids; ids with no participant are skipped

    Returns:
        AssignmentPreview with sorted members per team and spread stats
    """
    by_id = {p.id: p for p in participants}

    previews = []
    for team in teams:
        members = [by_id[pid] for pid in assignment.get(team.id, []) if pid in by_id]
        members.sort(key=member_sort_key)
        previews.append(TeamPreview(team.id, team.name, members))

    return AssignmentPreview(previews, AssignmentStats.from_teams(previews))


def assignment_from_team_ids(
    teams: Sequence[Team],
    participants: Sequence[Participant]
) -> Dict[str, List[str]]:
    """Rebuild the committed assignment from stored team_id values."""
    assignment = {team.id: [] for team in teams}
    for participant in participants:
        if participant.team_id in assignment:
            assignment[participant.team_id].append(participant.id)
    return assignment
