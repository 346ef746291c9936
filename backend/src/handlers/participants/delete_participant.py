from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import log_event
from shared.participants import delete_participant
from shared.utils import error_response, format_response, internal_error_response, parse_body

store = DynamoStore()


def handler(event, context):
    """
    Remove a participant. Team leaders cannot be removed.
    DELETE /admin/players
    Body: { "id": "..." }
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        delete_participant(store, parse_body(event).get('id'))
        return format_response(200, {'success': True})

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'delete_participant')
