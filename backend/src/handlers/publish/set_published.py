from shared.auth import is_admin
from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.lifecycle import set_published
from shared.logging import log_event
from shared.utils import error_response, format_response, internal_error_response, parse_body

store = DynamoStore()


def handler(event, context):
    """
    Show or hide the committed teams on participants' result pages.
    POST /admin/publish
    Body: { "publish": true|false }
    """
    log_event(event)

    if not is_admin(event):
        return format_response(403, {'error': 'Forbidden'})

    body = parse_body(event)
    publish = body.get('publish')
    if not isinstance(publish, bool):
        return format_response(400, {'error': 'publish must be true or false'})

    try:
        state = set_published(store, publish)
        return format_response(200, {
            'success': True,
            'isPublished': state.is_published
        })

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'set_published')
