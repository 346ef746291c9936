"""
DynamoDB persistence for participants, teams and the assignment state.
"""
import boto3
from typing import List, Dict, Any, Optional
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError
from .config import config
from .errors import ConflictError, InternalStorageError, NotFoundError, PreconditionError
from .logging import logger
from .models import APP_STATE_ID, LifecycleState, LifecycleStatus, Participant, Team

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def scan_all(table_name: str) -> List[Dict[str, Any]]:
    """
    Read every item of a table, following LastEvaluatedKey pagination.

    Args:
        table_name: Name of the DynamoDB table

    Returns:
        List of all items
    """
    try:
        table = dynamodb.Table(table_name)
        items = []
        params = {}
        while True:
            response = table.scan(**params)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                return items
            params['ExclusiveStartKey'] = last_key
    except ClientError as e:
        logger.error(f"Error scanning {table_name}: {e}")
        raise InternalStorageError(f"Failed to read {table_name}") from e


def query(
    table_name: str,
    index_name: Optional[str] = None,
    key_condition: Optional[Any] = None,
    limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """
    Query DynamoDB table or index.

    Args:
        table_name: Name of the DynamoDB table
        index_name: Optional GSI name
        key_condition: Key condition expression
        limit: Max items to return

    Returns:
        List of items matching the query
    """
    try:
        table = dynamodb.Table(table_name)

        query_params = {}
        if index_name:
            query_params['IndexName'] = index_name
        if key_condition is not None:
            query_params['KeyConditionExpression'] = key_condition
        if limit:
            query_params['Limit'] = limit

        response = table.query(**query_params)
        return response.get('Items', [])

    except ClientError as e:
        logger.error(f"Error querying {table_name}: {e}")
        raise InternalStorageError(f"Failed to query {table_name}") from e


def get_item(table_name: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Get a single item from DynamoDB."""
    try:
        table = dynamodb.Table(table_name)
        response = table.get_item(Key=key)
        return response.get('Item')
    except ClientError as e:
        logger.error(f"Error getting item from {table_name}: {e}")
        raise InternalStorageError(f"Failed to read {table_name}") from e


def put_item(table_name: str, item: Dict[str, Any], **condition: Any) -> None:
    """Put an item, optionally guarded by ConditionExpression parameters."""
    table = dynamodb.Table(table_name)
    try:
        table.put_item(Item=item, **condition)
    except ClientError as e:
        if _error_code(e) == 'ConditionalCheckFailedException':
            raise
        logger.error(f"Error putting item into {table_name}: {e}")
        raise InternalStorageError(f"Failed to write {table_name}") from e


def update_item(
    table_name: str,
    key: Dict[str, Any],
    update_expression: str,
    expression_values: Optional[Dict[str, Any]] = None,
    expression_names: Optional[Dict[str, str]] = None,
    condition_expression: Optional[str] = None
) -> None:
    """Update an item in DynamoDB."""
    table = dynamodb.Table(table_name)

    params = {
        'Key': key,
        'UpdateExpression': update_expression,
    }
    if expression_values:
        params['ExpressionAttributeValues'] = expression_values
    if expression_names:
        params['ExpressionAttributeNames'] = expression_names
    if condition_expression:
        params['ConditionExpression'] = condition_expression

    try:
        table.update_item(**params)
    except ClientError as e:
        if _error_code(e) == 'ConditionalCheckFailedException':
            raise
        logger.error(f"Error updating item in {table_name}: {e}")
        raise InternalStorageError(f"Failed to update {table_name}") from e


def _set_team_id(participant_id: str, team_id: Optional[str]) -> None:
    # team_id is sparse: clearing removes the attribute
    if team_id is None:
        update_item(
            config.PARTICIPANTS_TABLE,
            {'id': participant_id},
            'REMOVE team_id',
            expression_names={'#id': 'id'},
            condition_expression='attribute_exists(#id)'
        )
    else:
        update_item(
            config.PARTICIPANTS_TABLE,
            {'id': participant_id},
            'SET team_id = :team_id',
            {':team_id': team_id},
            expression_names={'#id': 'id'},
            condition_expression='attribute_exists(#id)'
        )


class DynamoStore:
    """
    Persistence collaborator backed by three DynamoDB tables.

    Nothing is cached, every call reads or writes DynamoDB directly.
    """

    def list_participants(self) -> List[Participant]:
        return [Participant.from_item(i) for i in scan_all(config.PARTICIPANTS_TABLE)]

    def list_teams(self) -> List[Team]:
        return [Team.from_item(i) for i in scan_all(config.TEAMS_TABLE)]

    def get_participant(self, participant_id: str) -> Optional[Participant]:
        item = get_item(config.PARTICIPANTS_TABLE, {'id': participant_id})
        return Participant.from_item(item) if item else None

    def get_team(self, team_id: str) -> Optional[Team]:
        item = get_item(config.TEAMS_TABLE, {'id': team_id})
        return Team.from_item(item) if item else None

    def find_participant_by_token(self, token: str) -> Optional[Participant]:
        items = query(
            config.PARTICIPANTS_TABLE,
            index_name=config.PARTICIPANT_TOKEN_INDEX,
            key_condition=Key('token').eq(token),
            limit=1
        )
        return Participant.from_item(items[0]) if items else None

    def add_participant(self, participant: Participant) -> None:
        put_item(config.PARTICIPANTS_TABLE, participant.to_item())
        logger.info(f"Registered participant {participant.id}")

    def put_team(self, team: Team) -> None:
        put_item(config.TEAMS_TABLE, team.to_item())

    def delete_participant(self, participant_id: str) -> None:
        """
        Delete a non-leader participant.

        Raises:
            NotFoundError: no participant with that id
            PreconditionError: the participant is a team leader
        """
        participant = self.get_participant(participant_id)
        if participant is None:
            raise NotFoundError('Participant not found', participantId=participant_id)
        if participant.is_leader:
            raise PreconditionError('Team leaders cannot be deleted', participantId=participant_id)

        table = dynamodb.Table(config.PARTICIPANTS_TABLE)
        try:
            # Re-checked at write time, the participant may have been promoted meanwhile
            table.delete_item(
                Key={'id': participant_id},
                ConditionExpression='attribute_exists(#id) AND is_leader = :false',
                ExpressionAttributeNames={'#id': 'id'},
                ExpressionAttributeValues={':false': False}
            )
        except ClientError as e:
            if _error_code(e) == 'ConditionalCheckFailedException':
                raise PreconditionError(
                    'Team leaders cannot be deleted', participantId=participant_id
                ) from e
            logger.error(f"Error deleting participant {participant_id}: {e}")
            raise InternalStorageError('Failed to delete participant') from e
        logger.info(f"Deleted participant {participant_id}")

    def set_participant_flags(self, participant_id: str, is_leader: bool, team_id: Optional[str]) -> None:
        try:
            update_item(
                config.PARTICIPANTS_TABLE,
                {'id': participant_id},
                'SET is_leader = :is_leader',
                {':is_leader': is_leader},
                expression_names={'#id': 'id'},
                condition_expression='attribute_exists(#id)'
            )
            _set_team_id(participant_id, team_id)
        except ClientError as e:
            raise NotFoundError('Participant not found', participantId=participant_id) from e

    def set_team(self, team_id: str, name: str, leader_id: Optional[str]) -> None:
        if leader_id is None:
            expression = 'SET #name = :name REMOVE leader_id'
            values = {':name': name}
        else:
            expression = 'SET #name = :name, leader_id = :leader_id'
            values = {':name': name, ':leader_id': leader_id}
        try:
            update_item(
                config.TEAMS_TABLE,
                {'id': team_id},
                expression,
                values,
                expression_names={'#id': 'id', '#name': 'name'},
                condition_expression='attribute_exists(#id)'
            )
        except ClientError as e:
            raise NotFoundError('Team not found', teamId=team_id) from e

    def bulk_set_team_id(self, updates: List[Dict[str, Any]]) -> None:
        """
        Write team_id for many participants.

        One update_item per participant, not a transaction: a failure part
        way through leaves the earlier writes in place. Participants deleted
        in the meantime are skipped.
        """
        skipped = 0
        for update in updates:
            try:
                _set_team_id(update['id'], update.get('team_id'))
            except ClientError:
                skipped += 1
        if skipped:
            logger.warning(f"Skipped {skipped} team_id updates for missing participants")
        logger.info(f"Updated team_id for {len(updates) - skipped} participants")

    def get_app_state(self) -> LifecycleState:
        return LifecycleState.from_item(get_item(config.APP_STATE_TABLE, {'id': APP_STATE_ID}))

    def set_app_state(self, state: LifecycleState, expected_status: Optional[str] = None) -> None:
        """
        Persist the assignment state.

        Args:
            state: New state
            expected_status: When given, the write only succeeds if the stored
                state still has this status

        Raises:
            ConflictError: the stored status no longer matches expected_status
        """
        condition = {}
        if expected_status == LifecycleStatus.UNASSIGNED:
            # A missing row reads as Unassigned
            condition = {
                'ConditionExpression': 'attribute_not_exists(#id) OR is_assigned = :false',
                'ExpressionAttributeNames': {'#id': 'id'},
                'ExpressionAttributeValues': {':false': False},
            }
        elif expected_status is not None:
            condition = {
                'ConditionExpression': 'is_assigned = :true AND is_published = :published',
                'ExpressionAttributeValues': {
                    ':true': True,
                    ':published': expected_status == LifecycleStatus.PUBLISHED,
                },
            }
        try:
            put_item(config.APP_STATE_TABLE, state.to_item(), **condition)
        except ClientError as e:
            logger.warning(f"App state changed concurrently, expected {expected_status}")
            raise ConflictError('Assignment state changed concurrently', expected=expected_status) from e
        logger.info(f"App state set to {state.status}")
