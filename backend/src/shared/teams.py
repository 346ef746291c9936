"""
Team bootstrap and leader configuration.
"""
from typing import Any, Dict, List, Optional, Sequence

from .config import config
from .errors import NotFoundError, PreconditionError, TeamBalancerError, ValidationError
from .logging import logger
from .models import TEAM_COUNT, Team, utc_now


def bootstrap_teams(store, names: Optional[Sequence[str]] = None) -> List[Team]:
    """
    Create the four fixed teams if none exist yet.

    Returns:
        The teams now stored
    """
    existing = store.list_teams()
    if existing:
        return existing

    names = list(names or config.DEFAULT_TEAM_NAMES)
    if len(names) != TEAM_COUNT:
        raise ValidationError(f'Exactly {TEAM_COUNT} team names are required', count=len(names))

    now = utc_now()
    teams = [Team(id=f'team-{i}', name=name, created_at=now) for i, name in enumerate(names, start=1)]
    for team in teams:
        store.put_team(team)
    logger.info(f"Bootstrapped {len(teams)} teams")
    return teams


def list_teams_with_leaders(store) -> Dict[str, Any]:
    """Teams sorted by name with their leader, plus everyone sorted by name."""
    participants = sorted(store.list_participants(), key=lambda p: p.name)
    by_id = {p.id: p for p in participants}

    teams = []
    for team in sorted(store.list_teams(), key=lambda t: t.name):
        team_dict = team.to_dict()
        leader = by_id.get(team.leader_id)
        team_dict['leader'] = leader.to_dict() if leader else None
        teams.append(team_dict)

    return {
        'teams': teams,
        'participants': [p.to_dict() for p in participants],
    }


def update_team(store, team_id: Any, name: Optional[str] = None, leader_id: Optional[str] = None) -> Team:
    """
    Rename a team and set (or clear) its leader.

    The previous leader is demoted and loses their team. Changing leaders
    is refused while an assignment is committed; renaming is always allowed.
    The writes are not transactional, see _change_leader for the failure window.

    Raises:
        ValidationError: missing team id
        NotFoundError: unknown team or participant
        PreconditionError: leader change while assigned, or the participant
            already leads another team
    """
    if not team_id or not isinstance(team_id, str):
        raise ValidationError('Team id is required')

    team = store.get_team(team_id)
    if team is None:
        raise NotFoundError('Team not found', teamId=team_id)

    leader_id = leader_id or None
    new_name = name.strip() if isinstance(name, str) and name.strip() else team.name

    if leader_id != team.leader_id:
        if store.get_app_state().is_assigned:
            raise PreconditionError('Leaders cannot change while teams are assigned, reset first')

        leader = None
        if leader_id is not None:
            leader = store.get_participant(leader_id)
            if leader is None:
                raise NotFoundError('Participant not found', participantId=leader_id)
            if leader.is_leader and leader.team_id != team_id:
                raise PreconditionError(
                    'Participant already leads another team',
                    participantId=leader_id,
                    teamId=leader.team_id,
                )

        _change_leader(store, team, new_name, leader, leader_id)
    else:
        store.set_team(team_id, new_name, leader_id)
    team.name = new_name
    team.leader_id = leader_id
    return team


def _change_leader(store, team: Team, name: str, leader, leader_id: Optional[str]) -> None:
    """
    Promote the new leader, demote the old one and point the team at the new one.

    The new leader is promoted first: if that participant vanished since it
    was read, NotFoundError is raised before anything else is written. A
    failure in a later write reverts the promotion only: a demoted previous
    leader stays demoted. If the revert itself fails, the flags are left for
    the admin to fix by setting the leader again.
    """
    if leader is not None:
        store.set_participant_flags(leader_id, is_leader=True, team_id=team.id)

    try:
        if team.leader_id:
            store.set_participant_flags(team.leader_id, is_leader=False, team_id=None)
        store.set_team(team.id, name, leader_id)
    except TeamBalancerError:
        if leader is not None:
            logger.error(f"Leader change on team {team.id} failed, reverting {leader_id}")
            store.set_participant_flags(leader_id, is_leader=leader.is_leader, team_id=leader.team_id)
        raise

    logger.info(f"Team {team.id} leader changed from {team.leader_id} to {leader_id}")
