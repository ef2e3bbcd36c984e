"""snake_case / camelCase aliasing of argument keys.

Models mix ``gameobject_name`` and ``gameObjectName`` freely; keys are mapped
onto whichever spelling the tool declares.
"""

import re
from typing import Dict, Iterable, Mapping, TypeVar

V = TypeVar("V")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def to_camel_case(key: str) -> str:
    head, *rest = key.split("_")
    return head.lower() + "".join(part[:1].upper() + part[1:].lower() for part in rest if part)


def normalize_argument_keys(arguments: Mapping[str, V], declared: Iterable[str]) -> Dict[str, V]:
    """Rename undeclared keys to a declared alias where one exists.

    Matching is exact first, then ignoring case and underscores, so
    ``gameObjectName``, ``game_object_name`` and ``gameobject_name`` all reach a
    declared ``gameobject_name``. Unmatched keys are kept as-is. An explicitly
    supplied declared key wins over an alias.

    Args:
        arguments: Arguments as parsed.
        declared: Keys declared by the tool.

    Returns:
        A new dict with keys renamed, in the original order.
    """
    declared_keys = list(declared)
    by_snake = {to_snake_case(k).replace("_", ""): k for k in declared_keys}

    normalized: Dict[str, V] = {}
    for key, value in arguments.items():
        if key in declared_keys:
            normalized[key] = value
            continue

        target = by_snake.get(to_snake_case(key).replace("_", ""))
        if target is None:
            normalized[key] = value
        elif target not in arguments:
            normalized.setdefault(target, value)
    return normalized
