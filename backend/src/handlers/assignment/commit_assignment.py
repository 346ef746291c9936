from shared.auth import get_user_sub, is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.lifecycle import commit_assignment
from shared.logging import log_event, logger
from shared.utils import error_response, format_response, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    Run the balancer and commit its result.
    POST /admin/assign
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        state = commit_assignment(store)
        logger.info(f"Assignment committed by {get_user_sub(event)}")
        return format_response(200, {
            'success': True,
            'assignedAt': state.assigned_at
        })

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'commit_assignment')
