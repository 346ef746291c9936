from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import log_event
from shared.participants import register_participant
from shared.utils import error_response, format_response, internal_error_response, parse_body

store = DynamoStore()


def handler(event, context):
    """
    Self-registration.
    POST /register
    Body: { "name": "...", "level": 1-5 }
    """
    log_event(event)

    body = parse_body(event)

    try:
        participant = register_participant(store, body.get('name'), body.get('level'))
        return format_response(201, {
            'success': True,
            'token': participant.token
        })

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'register_participant')
