"""
Assignment lifecycle: preview, commit, publish, unpublish and reset.

States: Unassigned → Assigned → Published, Published → Assigned (unpublish),
and any state → Unassigned (reset).

Every operation takes the persistence collaborator as `store` and reads the
state it needs from there; nothing is kept between calls.
"""
from typing import Any, Dict, List, Optional, Sequence

from .assignment import assign_teams, assignment_updates
from .errors import (
    InsufficientLeadersError,
    InternalStorageError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from .logging import logger
from .models import TEAM_COUNT, LifecycleState, LifecycleStatus, Participant, Team, utc_now
from .preview import AssignmentPreview, assignment_from_team_ids, build_preview


def _sorted_teams(teams: Sequence[Team]) -> List[Team]:
    return sorted(teams, key=lambda t: t.name)


def require_leaders(teams: Sequence[Team], participants: Sequence[Participant]) -> None:
    """
    Refuse to balance unless exactly one leader per team is configured.

    Raises:
        InsufficientLeadersError: leader count is not four, or some team has
            no leader (two leaders share a team)
    """
    leader_team_ids = [p.team_id for p in participants if p.is_leader]
    leaders_count = len(leader_team_ids)
    without_leader = sorted(t.id for t in teams if t.id not in leader_team_ids)

    if leaders_count != TEAM_COUNT or without_leader or len(set(leader_team_ids)) != leaders_count:
        logger.warning(
            f"Assignment refused: {leaders_count} leaders configured, "
            f"teams without leader: {without_leader}"
        )
        raise InsufficientLeadersError(leaders_count, without_leader)


def committed_preview(teams: Sequence[Team], participants: Sequence[Participant]) -> AssignmentPreview:
    """Project the roster stored in participants' team_id fields."""
    return build_preview(teams, participants, assignment_from_team_ids(teams, participants))


def get_preview_or_current(store, rng=None) -> Dict[str, Any]:
    """
    Return the committed roster, or a fresh preview when nothing is committed.

    The preview is never written back; calling this twice before a commit
    may give different rosters when the random tie-break is reached.

    Raises:
        InsufficientLeadersError: not exactly one leader per team
    """
    teams = _sorted_teams(store.list_teams())
    participants = store.list_participants()
    require_leaders(teams, participants)

    state = store.get_app_state()
    if state.is_assigned:
        preview = committed_preview(teams, participants)
    else:
        preview = build_preview(teams, participants, assign_teams(teams, participants, rng))

    body = preview.to_dict()
    body['isAssigned'] = state.is_assigned
    body['isPublished'] = state.is_published
    return body


def commit_assignment(store, rng=None, now: Optional[str] = None) -> LifecycleState:
    """
    Run the engine and persist its result (Unassigned → Assigned).

    The state row is claimed first with a conditional write so that two
    concurrent commits cannot both write team ids. If the team id writes
    fail the state goes back to Unassigned and the error is re-raised;
    team ids already written stay until the next commit or reset.

    Raises:
        InsufficientLeadersError: not exactly one leader per team
        PreconditionError: an assignment is already committed
        ConflictError: another request changed the state first
        InternalStorageError: writing team ids failed
    """
    if store.get_app_state().is_assigned:
        raise PreconditionError('Teams are already assigned, reset first')

    teams = store.list_teams()
    participants = store.list_participants()
    require_leaders(teams, participants)

    assignment = assign_teams(teams, participants, rng)

    state = LifecycleState.assigned(now or utc_now())
    store.set_app_state(state, expected_status=LifecycleStatus.UNASSIGNED)

    try:
        store.bulk_set_team_id(assignment_updates(assignment))
    except InternalStorageError:
        logger.error("Writing team ids failed, reverting assignment state")
        store.set_app_state(LifecycleState.unassigned())
        raise

    logger.info(f"Committed assignment of {len(participants)} participants at {state.assigned_at}")
    return state


def set_published(store, publish: bool) -> LifecycleState:
    """
    Publish (Assigned → Published) or unpublish (Published → Assigned).

    Raises:
        PreconditionError: publishing before an assignment is committed
    """
    state = store.get_app_state()

    if publish:
        if not state.is_assigned:
            logger.warning("Publish refused: teams are not assigned")
            raise PreconditionError('Teams are not assigned yet')
        new_state = state.published()
    else:
        new_state = state.unpublished()

    if new_state != state:
        store.set_app_state(new_state, expected_status=state.status)
        logger.info(f"Assignment {'published' if publish else 'unpublished'}")
    return new_state


def reset_assignment(store) -> LifecycleState:
    """
    Clear every non-leader's team and return to Unassigned.

    Allowed from any state. Leaders keep their team_id.
    """
    updates = [
        {'id': p.id, 'team_id': None}
        for p in store.list_participants()
        if not p.is_leader
    ]
    store.bulk_set_team_id(updates)

    state = LifecycleState.unassigned()
    store.set_app_state(state)
    logger.info(f"Assignment reset, cleared {len(updates)} participants")
    return state


def get_publish_state(store) -> Dict[str, bool]:
    state = store.get_app_state()
    return {'isAssigned': state.is_assigned, 'isPublished': state.is_published}


def get_result_for_token(store, token: Optional[str]) -> Dict[str, Any]:
    """
    Look up a participant's own result by their private token.

    Teams are only revealed once published. Other participants' tokens are
    never included.

    Raises:
        ValidationError: no token given
        NotFoundError: token matches no participant
    """
    if not token:
        raise ValidationError('Token is required')

    participant = store.find_participant_by_token(token)
    if participant is None:
        raise NotFoundError('Participant not found')

    state = store.get_app_state()
    if not state.is_published:
        return {
            'participant': participant.to_dict(),
            'myTeam': None,
            'allTeams': [],
            'isPublished': False,
        }

    teams = store.list_teams()
    preview = committed_preview(teams, store.list_participants())

    all_teams = []
    my_team = None
    for team, team_preview in zip(teams, preview.teams):
        leader = team_preview.leader
        team_dict = team.to_dict()
        team_dict.update(team_preview.to_dict(public=True))
        team_dict['leader'] = leader.public_dict() if leader else None
        all_teams.append(team_dict)
        if any(m.id == participant.id for m in team_preview.members):
            my_team = team_dict

    return {
        'participant': participant.to_dict(),
        'myTeam': my_team,
        'allTeams': all_teams,
        'isPublished': True,
    }
