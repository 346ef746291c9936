"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the team balancer.
"""
import os


def _team_names(raw: str) -> list:
    return [name.strip() for name in raw.split(',') if name.strip()]


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    PARTICIPANTS_TABLE = os.environ.get('PARTICIPANTS_TABLE', 'participants')
    TEAMS_TABLE = os.environ.get('TEAMS_TABLE', 'teams')
    APP_STATE_TABLE = os.environ.get('APP_STATE_TABLE', 'app_state')

    # GSI on participants.token used for the self-lookup page
    PARTICIPANT_TOKEN_INDEX = os.environ.get('PARTICIPANT_TOKEN_INDEX', 'TokenIndex')

    # Registration
    TOKEN_LENGTH = int(os.environ.get('TOKEN_LENGTH', '16'))
    MAX_NAME_LENGTH = int(os.environ.get('MAX_NAME_LENGTH', '50'))

    # Names given to the four fixed teams at bootstrap
    DEFAULT_TEAM_NAMES = _team_names(
        os.environ.get('DEFAULT_TEAM_NAMES', 'Team A,Team B,Team C,Team D')
    )

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


config = Config()
