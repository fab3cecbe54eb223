# core/utils.py

from datetime import date, datetime, time
from enum import Enum


def sanitize(data: dict, *, drop_none: bool = False) -> dict:
    """
    Prepare a payload for PostgREST:
    - Strip string whitespace, empty strings → None
    - Dates / times → ISO strings
    - Enums → their value
    - Optionally drop None values (PATCH semantics)
    """
    clean = {}

    for k, v in data.items():
        if isinstance(v, str):
            v = v.strip() or None
        elif isinstance(v, Enum):
            v = v.value
        elif isinstance(v, (datetime, date, time)):
            v = v.isoformat()

        if v is None and drop_none:
            continue

        clean[k] = v

    return clean


def parse_timestamp(value):
    """Accept Supabase timestamps with a trailing Z."""
    if isinstance(value, str) and value.endswith("Z"):
        return value.replace("Z", "+00:00")
    return value
