from flask import request
from boardgame.services.games.errors import InvalidInput


def payload() -> dict:
    return request.get_json(silent=True) or {}


def int_field(data: dict, key: str, required: bool = False):
    """Read an integer from the JSON body, falling back to the query string."""
    value = data.get(key)
    if value is None:
        value = request.args.get(key)
    if value is None or value == '':
        if required:
            raise InvalidInput(f'{key} is required')
        return None
    if isinstance(value, bool):
        raise InvalidInput(f'{key} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f'{key} must be an integer')
