from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import log_event
from shared.teams import list_teams_with_leaders
from shared.utils import error_response, format_response, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    GET /admin/teams
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        return format_response(200, list_teams_with_leaders(store))
    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'list_teams')
