"""Field-name casing helpers.

Locally stored entities use camelCase keys; the remote backend uses
snake_case columns. Conversion is applied recursively to nested mappings
and lists, leaving values untouched.
"""

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """``contactEmail`` → ``contact_email``."""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def to_camel_case(name: str) -> str:
    """``contact_email`` → ``contactEmail``. Leading underscores are kept."""
    stripped = name.lstrip("_")
    prefix = name[: len(name) - len(stripped)]
    head, *rest = stripped.split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in rest)


def _remote_key(key: str) -> str:
    """snake_case form of a key, or the key itself when that would not map back."""
    snake = to_snake_case(key)
    return snake if to_camel_case(snake) == key else key


def keys_to_snake(value: Any) -> Any:
    """Recursively convert mapping keys to snake_case.

    Keys that would not survive the trip back (``logoURL``) are kept as is.
    """
    if isinstance(value, dict):
        return {_remote_key(k): keys_to_snake(v) for k, v in value.items()}
    if isinstance(value, list):
        return [keys_to_snake(v) for v in value]
    return value


def keys_to_camel(value: Any) -> Any:
    """Recursively convert mapping keys to camelCase."""
    if isinstance(value, dict):
        return {to_camel_case(k): keys_to_camel(v) for k, v in value.items()}
    if isinstance(value, list):
        return [keys_to_camel(v) for v in value]
    return value
