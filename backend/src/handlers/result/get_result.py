from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.lifecycle import get_result_for_token
from shared.logging import log_event
from shared.utils import error_response, format_response, get_query_param, internal_error_response

store = DynamoStore()


def handler(event, context):
    """
    Participant's own result page, authenticated only by their token.
    GET /result?t={token}
    """
    log_event(event)

    try:
        token = get_query_param(event, 't')
        return format_response(200, get_result_for_token(store, token))

    except TeamBalancerError as e:
        return error_response(e)
    except Exception as e:
        return internal_error_response(e, 'get_result')
