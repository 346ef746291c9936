from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import InsufficientLeadersError, TeamBalancerError
from shared.lifecycle import get_preview_or_current
from shared.logging import log_event
from shared.utils import error_response, format_response, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    Preview a fresh assignment, or return the committed one.
    GET /admin/assign
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    try:
        return format_response(200, get_preview_or_current(store))

    except InsufficientLeadersError as e:
        # The admin page renders this as a hint, not a failure
        body = e.to_dict()
        body.update({
            'teams': [],
            'stats': None,
            'isAssigned': False,
            'isPublished': False,
        })
        return format_response(200, body)
    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'get_assignment')
