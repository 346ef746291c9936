"""
Team assignment engine.

Greedy balancing of participants into the fixed teams:
1. Leaders are seeded into their own team.
2. Everyone else is placed from the highest level down.
3. Each placement goes to the team with the fewest members, then the lowest
   score, then a random pick among the remaining ties.
"""
import random
from typing import Dict, List, Optional, Sequence

from .errors import InvalidLeaderAssignment, PreconditionError
from .models import Participant, Team


class TeamSlot:
    """Running member list and score for one team while assigning."""

    __slots__ = ('team_id', 'member_ids', 'score')

    def __init__(self, team_id: str):
        self.team_id = team_id
        self.member_ids: List[str] = []
        self.score = 0

    def add(self, participant: Participant) -> None:
        self.member_ids.append(participant.id)
        self.score += participant.level


def select_best_slot(slots: Sequence[TeamSlot], rng=None) -> TeamSlot:
    """
    Pick the team the next participant should join.

    Args:
        slots: Current team slots (at least one)
        rng: Random source with a choice() method, used only for full ties

    Returns:
        The chosen slot
    """
    min_count = min(len(s.member_ids) for s in slots)
    candidates = [s for s in slots if len(s.member_ids) == min_count]
    if len(candidates) == 1:
        return candidates[0]

    min_score = min(s.score for s in candidates)
    candidates = [s for s in candidates if s.score == min_score]
    if len(candidates) == 1:
        return candidates[0]

    return (rng or random).choice(candidates)


def assign_teams(
    teams: Sequence[Team],
    participants: Sequence[Participant],
    rng: Optional[random.Random] = None
) -> Dict[str, List[str]]:
    """
    Split participants across teams.

    Leader count is not checked here; the lifecycle refuses to run the
    engine unless exactly four leaders are configured.

    Args:
        teams: The teams to fill
        participants: Everyone to place, leaders included
        rng: Optional random source for tie-breaks (defaults to the random module)

    Returns:
        Mapping of team id to member ids, leader first then placement order

    Raises:
        InvalidLeaderAssignment: a leader's team_id matches none of the teams
    """
    slots = [TeamSlot(team.id) for team in teams]
    by_team_id = {slot.team_id: slot for slot in slots}

    for leader in (p for p in participants if p.is_leader):
        slot = by_team_id.get(leader.team_id)
        if slot is None:
            raise InvalidLeaderAssignment(leader.id, leader.team_id)
        slot.add(leader)

    # sorted() is stable, equal levels keep their registration order
    others = sorted(
        (p for p in participants if not p.is_leader),
        key=lambda p: p.level,
        reverse=True
    )

    if others and not slots:
        raise PreconditionError('No teams to assign participants into')

    for participant in others:
        select_best_slot(slots, rng).add(participant)

    return {slot.team_id: slot.member_ids for slot in slots}


def assignment_updates(assignment: Dict[str, List[str]]) -> List[Dict[str, str]]:
    """Flatten an assignment into bulk team_id updates."""
    return [
        {'id': member_id, 'team_id': team_id}
        for team_id, member_ids in assignment.items()
        for member_id in member_ids
    ]
