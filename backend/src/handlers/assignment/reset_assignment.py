from shared.auth import get_user_sub, is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.lifecycle import reset_assignment
from shared.logging import log_event, logger
from shared.utils import error_response, format_response, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    Undo the committed assignment. Leaders stay on their teams.
    DELETE /admin/assign
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        reset_assignment(store)
        logger.info(f"Assignment reset by {get_user_sub(event)}")
        return format_response(200, {'success': True})

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'reset_assignment')
