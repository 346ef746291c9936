from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import log_event
from shared.teams import update_team
from shared.utils import error_response, format_response, internal_error_response, parse_body

store = DynamoStore()


def handler(event, context):
    """
    Rename a team and choose its leader.
    PUT /admin/teams
    Body: { "teamId": "...", "teamName": "...", "leaderId": "..." | null }
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    body = parse_body(event)

    try:
        team = update_team(store, body.get('teamId'), body.get('teamName'), body.get('leaderId'))
        return format_response(200, {'success': True, 'team': team.to_dict()})

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'update_team')
