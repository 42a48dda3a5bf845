# intrafiles/utils/params.py
from flask import abort

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def parse_bool(value, default=None):
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def parse_int(value, name, default=None):
    """Integer query/form value; a malformed one is a 400."""
    if value is None or value == '':
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        abort(400, description=f"Invalid {name}")


def parse_nullable_id(value, name):
    """
    Parses a parent/folder id filter.
    Returns (present, id): 'null' or '' mean "top level", i.e. (True, None).
    """
    if value is None:
        return False, None
    if str(value).strip().lower() in ('', 'null', 'none'):
        return True, None
    return True, parse_int(value, name)
