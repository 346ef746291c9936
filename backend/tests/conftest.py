"""
Shared fixtures for the team balancer tests.
"""
import os
import sys

import pytest

# Add src to path so handlers and shared import as in the Lambda runtime
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')

from fakes import FakeStore, make_participant, make_team  # noqa: E402


TEAM_NAMES = ['Team A', 'Team B', 'Team C', 'Team D']


@pytest.fixture
def teams():
    return [make_team(f'team-{i}', name) for i, name in enumerate(TEAM_NAMES, start=1)]


@pytest.fixture
def leaders(teams):
    return [
        make_participant(f'leader-{i}', level=5, is_leader=True, team_id=team.id)
        for i, team in enumerate(teams, start=1)
    ]


@pytest.fixture
def players():
    return [
        make_participant(f'player-{i}', level=level)
        for i, level in enumerate([5, 4, 4, 3, 3, 2, 2, 1], start=1)
    ]


@pytest.fixture
def store(teams):
    """Four teams, nobody registered."""
    return FakeStore(teams=teams)


@pytest.fixture
def seeded_store(teams, leaders, players):
    """Four teams with one level-5 leader each, plus eight players."""
    for team, leader in zip(teams, leaders):
        team.leader_id = leader.id
    return FakeStore(teams=teams, participants=leaders + players)


@pytest.fixture
def admin_event():
    def build(body=None, query=None):
        import json
        return {
            'httpMethod': 'GET',
            'requestContext': {
                'authorizer': {
                    'claims': {'sub': 'admin-1', 'cognito:groups': 'admin'}
                }
            },
            'body': json.dumps(body) if body is not None else None,
            'queryStringParameters': query,
        }
    return build
