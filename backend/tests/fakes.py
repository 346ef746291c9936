"""
In-memory stand-in for the DynamoDB store, used by lifecycle and handler tests.
"""
from dataclasses import replace

from shared.errors import ConflictError, InternalStorageError, NotFoundError, PreconditionError
from shared.models import LifecycleState, Participant, Team


def make_team(team_id, name=None, leader_id=None):
    return Team(id=team_id, name=name or team_id, leader_id=leader_id, created_at='2026-01-01T00:00:00+00:00')


def make_participant(participant_id, level=3, is_leader=False, team_id=None, created_at=None, name=None):
    return Participant(
        id=participant_id,
        name=name or participant_id,
        level=level,
        token=f'token-{participant_id}',
        team_id=team_id,
        is_leader=is_leader,
        created_at=created_at or '2026-01-01T00:00:00+00:00',
    )


class FakeStore:
    """Same interface as DynamoStore, backed by dicts. Returns copies."""

    def __init__(self, teams=(), participants=(), state=None):
        self.teams = {t.id: replace(t) for t in teams}
        self.participants = {p.id: replace(p) for p in participants}
        self.state = state or LifecycleState.unassigned()
        self.bulk_calls = []
        self.fail_bulk = False

    def list_participants(self):
        return [replace(p) for p in self.participants.values()]

    def list_teams(self):
        return [replace(t) for t in self.teams.values()]

    def get_participant(self, participant_id):
        p = self.participants.get(participant_id)
        return replace(p) if p else None

    def get_team(self, team_id):
        t = self.teams.get(team_id)
        return replace(t) if t else None

    def find_participant_by_token(self, token):
        for p in self.participants.values():
            if p.token == token:
                return replace(p)
        return None

    def add_participant(self, participant):
        self.participants[participant.id] = replace(participant)

    def put_team(self, team):
        self.teams[team.id] = replace(team)

    def delete_participant(self, participant_id):
        p = self.participants.get(participant_id)
        if p is None:
            raise NotFoundError('Participant not found', participantId=participant_id)
        if p.is_leader:
            raise PreconditionError('Team leaders cannot be deleted', participantId=participant_id)
        del self.participants[participant_id]

    def set_participant_flags(self, participant_id, is_leader, team_id):
        p = self.participants.get(participant_id)
        if p is None:
            raise NotFoundError('Participant not found', participantId=participant_id)
        p.is_leader = is_leader
        p.team_id = team_id

    def set_team(self, team_id, name, leader_id):
        t = self.teams.get(team_id)
        if t is None:
            raise NotFoundError('Team not found', teamId=team_id)
        t.name = name
        t.leader_id = leader_id

    def bulk_set_team_id(self, updates):
        self.bulk_calls.append(list(updates))
        if self.fail_bulk:
            # Simulate a failure part way through the loop
            first = updates[:1]
            for update in first:
                self.participants[update['id']].team_id = update['team_id']
            raise InternalStorageError('Failed to update participants')
        for update in updates:
            if update['id'] in self.participants:
                self.participants[update['id']].team_id = update['team_id']

    def get_app_state(self):
        return self.state

    def set_app_state(self, state, expected_status=None):
        if expected_status is not None and self.state.status != expected_status:
            raise ConflictError('Assignment state changed concurrently', expected=expected_status)
        self.state = state
