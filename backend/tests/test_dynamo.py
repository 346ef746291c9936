"""
Tests for the DynamoDB store against a mocked boto3 resource.
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from shared.dynamo import DynamoStore
from shared.errors import ConflictError, InternalStorageError, NotFoundError, PreconditionError
from shared.models import LifecycleState, LifecycleStatus


def client_error(code, operation='UpdateItem'):
    return ClientError({'Error': {'Code': code, 'Message': code}}, operation)


@pytest.fixture
def table():
    table = MagicMock()
    resource = MagicMock()
    resource.Table.return_value = table
    with patch('shared.dynamo.dynamodb', resource):
        yield table


class TestReads:

    def test_list_participants_follows_pagination(self, table):
        table.scan.side_effect = [
            {'Items': [{'id': 'a', 'name': 'A', 'level': Decimal('3'), 'token': 't1'}],
             'LastEvaluatedKey': {'id': 'a'}},
            {'Items': [{'id': 'b', 'name': 'B', 'level': Decimal('5'), 'token': 't2',
                        'team_id': 'team-1', 'is_leader': True}]},
        ]

        participants = DynamoStore().list_participants()

        assert [p.id for p in participants] == ['a', 'b']
        assert participants[1].level == 5
        assert participants[1].is_leader is True
        assert table.scan.call_args_list[1].kwargs == {'ExclusiveStartKey': {'id': 'a'}}

    def test_find_by_token_uses_index(self, table):
        table.query.return_value = {'Items': [{'id': 'a', 'name': 'A', 'level': Decimal('2'), 'token': 'tok'}]}

        participant = DynamoStore().find_participant_by_token('tok')

        assert participant.id == 'a'
        assert table.query.call_args.kwargs['IndexName'] == 'TokenIndex'
        assert table.query.call_args.kwargs['Limit'] == 1

    def test_find_by_token_miss(self, table):
        table.query.return_value = {'Items': []}

        assert DynamoStore().find_participant_by_token('nope') is None

    def test_missing_app_state_row_is_unassigned(self, table):
        table.get_item.return_value = {}

        assert DynamoStore().get_app_state() == LifecycleState.unassigned()

    def test_read_failure_is_surfaced(self, table):
        table.get_item.side_effect = client_error('ProvisionedThroughputExceededException', 'GetItem')

        with pytest.raises(InternalStorageError):
            DynamoStore().get_team('team-1')


class TestWrites:

    def test_bulk_set_team_id_writes_each_participant(self, table):
        DynamoStore().bulk_set_team_id([
            {'id': 'a', 'team_id': 'team-1'},
            {'id': 'b', 'team_id': None},
        ])

        first, second = table.update_item.call_args_list
        assert first.kwargs['Key'] == {'id': 'a'}
        assert first.kwargs['UpdateExpression'] == 'SET team_id = :team_id'
        assert first.kwargs['ExpressionAttributeValues'] == {':team_id': 'team-1'}
        assert second.kwargs['UpdateExpression'] == 'REMOVE team_id'

    def test_bulk_set_skips_deleted_participants(self, table):
        table.update_item.side_effect = [client_error('ConditionalCheckFailedException'), None]

        DynamoStore().bulk_set_team_id([{'id': 'gone', 'team_id': 't'}, {'id': 'b', 'team_id': 't'}])

        assert table.update_item.call_count == 2

    def test_bulk_set_stops_on_storage_failure(self, table):
        table.update_item.side_effect = [None, client_error('InternalServerError'), None]

        with pytest.raises(InternalStorageError):
            DynamoStore().bulk_set_team_id([
                {'id': 'a', 'team_id': 't'},
                {'id': 'b', 'team_id': 't'},
                {'id': 'c', 'team_id': 't'},
            ])

        assert table.update_item.call_count == 2

    def test_claim_conflict(self, table):
        table.put_item.side_effect = client_error('ConditionalCheckFailedException', 'PutItem')

        with pytest.raises(ConflictError):
            DynamoStore().set_app_state(LifecycleState.assigned('now'), expected_status=LifecycleStatus.UNASSIGNED)

        kwargs = table.put_item.call_args.kwargs
        assert 'is_assigned = :false' in kwargs['ConditionExpression']
        assert kwargs['Item']['is_assigned'] is True

    def test_unconditional_state_write(self, table):
        DynamoStore().set_app_state(LifecycleState.unassigned())

        kwargs = table.put_item.call_args.kwargs
        assert 'ConditionExpression' not in kwargs
        assert kwargs['Item'] == {'id': 1, 'is_assigned': False, 'is_published': False, 'assigned_at': None}

    def test_publish_condition_expects_assigned(self, table):
        DynamoStore().set_app_state(
            LifecycleState.assigned('now').published(),
            expected_status=LifecycleStatus.ASSIGNED
        )

        values = table.put_item.call_args.kwargs['ExpressionAttributeValues']
        assert values == {':true': True, ':published': False}

    def test_delete_leader_refused(self, table):
        table.get_item.return_value = {'Item': {'id': 'l1', 'level': Decimal('5'), 'is_leader': True}}

        with pytest.raises(PreconditionError):
            DynamoStore().delete_participant('l1')

        table.delete_item.assert_not_called()

    def test_delete_missing(self, table):
        table.get_item.return_value = {}

        with pytest.raises(NotFoundError):
            DynamoStore().delete_participant('ghost')

    def test_delete_promoted_meanwhile(self, table):
        table.get_item.return_value = {'Item': {'id': 'p1', 'level': Decimal('2'), 'is_leader': False}}
        table.delete_item.side_effect = client_error('ConditionalCheckFailedException', 'DeleteItem')

        with pytest.raises(PreconditionError):
            DynamoStore().delete_participant('p1')

    def test_set_team_clears_leader(self, table):
        DynamoStore().set_team('team-1', 'Reds', None)

        kwargs = table.update_item.call_args.kwargs
        assert kwargs['UpdateExpression'] == 'SET #name = :name REMOVE leader_id'
        assert kwargs['ExpressionAttributeNames']['#name'] == 'name'

    def test_set_team_unknown(self, table):
        table.update_item.side_effect = client_error('ConditionalCheckFailedException')

        with pytest.raises(NotFoundError):
            DynamoStore().set_team('team-9', 'X', None)
