import re

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[-_\s]+")


def snake(name: str) -> str:
    """
    Convert camelCase or CamelCase to snake_case.

    >>> snake("userId")
    'user_id'
    >>> snake("HTTPServer")
    'http_server'
    """
    s1 = _FIRST_CAP.sub(r"\1_\2", name)
    s2 = _ALL_CAP.sub(r"\1_\2", s1)
    return _SEPARATORS.sub("_", s2).lower()


def camel(name: str) -> str:
    """
    Convert snake_case (or kebab-case) to camelCase.

    >>> camel("user_id")
    'userId'
    """
    components = [part for part in _SEPARATORS.split(name) if part]
    if not components:
        return name
    head, *rest = components
    tail = "".join(part[:1].upper() + part[1:] for part in rest)
    return head[:1].lower() + head[1:] + tail
