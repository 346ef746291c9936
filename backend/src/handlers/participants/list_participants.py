from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import log_event
from shared.participants import list_participants
from shared.utils import error_response, format_response, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    GET /admin/players
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        participants = list_participants(store)
        return format_response(200, {'participants': [p.to_dict() for p in participants]})
    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'list_participants')
