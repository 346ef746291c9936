"""
Participant registration and admin listing/deletion.
"""
import uuid
from typing import Any, List

from .config import config
from .errors import ValidationError
from .logging import logger
from .models import LEVELS, MAX_LEVEL, MIN_LEVEL, Participant, utc_now


def generate_token(length: int = None) -> str:
    """Random hex token used for the participant's private result link."""
    length = length or config.TOKEN_LENGTH
    token = uuid.uuid4().hex
    while len(token) < length:
        token += uuid.uuid4().hex
    return token[:length]


def validate_registration(name: Any, level: Any) -> tuple:
    """
    Check registration input.

    Returns:
        (trimmed name, level)

    Raises:
        ValidationError: blank or too long name, level not an int in 1..5
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Name is required')
    name = name.strip()
    if len(name) > config.MAX_NAME_LENGTH:
        raise ValidationError(f'Name must be at most {config.MAX_NAME_LENGTH} characters')

    # bool is an int subclass, True must not pass as level 1
    if isinstance(level, bool) or not isinstance(level, int) or level not in LEVELS:
        raise ValidationError(f'Level must be between {MIN_LEVEL} and {MAX_LEVEL}')

    return name, level


def register_participant(store, name: Any, level: Any) -> Participant:
    """Create a participant with a fresh id and private token."""
    name, level = validate_registration(name, level)
    participant = Participant(
        id=str(uuid.uuid4()),
        name=name,
        level=level,
        token=generate_token(),
        team_id=None,
        is_leader=False,
        created_at=utc_now(),
    )
    store.add_participant(participant)
    return participant


def list_participants(store) -> List[Participant]:
    """All participants, newest registration first."""
    return sorted(store.list_participants(), key=lambda p: p.created_at, reverse=True)


def delete_participant(store, participant_id: Any) -> None:
    if not participant_id or not isinstance(participant_id, str):
        raise ValidationError('Participant id is required')
    store.delete_participant(participant_id)
    logger.info(f"Participant {participant_id} removed by admin")
