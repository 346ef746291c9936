from shared.dynamo import DynamoStore
from shared.errors import TeamBalancerError
from shared.logging import logger
from shared.teams import bootstrap_teams

store = DynamoStore()


def handler(event, context):
    """
    Deployment hook: create the four fixed teams on an empty table.
    Event (optional): { "teamNames": ["...", "...", "...", "..."] }
    """
    names = (event or {}).get('teamNames')

    try:
        teams = bootstrap_teams(store, names)
    except TeamBalancerError as e:
        logger.error(f"Team bootstrap failed: {e.message}")
        raise

    return {
        'teams': [team.to_dict() for team in teams]
    }
