from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from lazymap.type_spec import Nullable, TypeSpec, UnionOf, Unit

CANONICAL_TYPES = frozenset(
    {"int", "float", "bool", "string", "list", "dict", "object", "any", "null"}
)

_SYNONYMS = {
    "integer": "int",
    "long": "int",
    "double": "float",
    "real": "float",
    "boolean": "bool",
    "str": "string",
    "array": "list",
    "tuple": "list",
    "set": "list",
    "frozenset": "list",
    "sequence": "list",
    "mapping": "dict",
    "mixed": "any",
    "none": "null",
    "nonetype": "null",
}


def normalize_type_name(name: str) -> str:
    """Map a type name or one of its synonyms to its canonical spelling.

    Names that are neither canonical nor known synonyms (class names) are
    returned untouched, case included.
    """
    stripped = name.strip()
    lowered = stripped.lower()
    if lowered in CANONICAL_TYPES:
        return lowered
    return _SYNONYMS.get(lowered, stripped)


def parse_type_name(name: str) -> TypeSpec:
    """Build a TypeSpec from a textual declaration like ``?int`` or ``int|string``."""
    name = name.strip()
    if "|" in name:
        return UnionOf(tuple(parse_type_name(part) for part in name.split("|")))
    if name.startswith("?"):
        return Nullable(parse_type_name(name[1:]))
    return Unit(normalize_type_name(name))


def runtime_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, Mapping):
        return "dict"
    if isinstance(value, (list, tuple, set, frozenset)):
        return "list"
    return "object"


def is_compatible(
    source_type: str, target_type: Union[str, TypeSpec], source_value: Any = None
) -> bool:
    """Tell whether a value of ``source_type`` can be cast to ``target_type``.

    ``source_value`` is only consulted for checks that depend on the value
    itself: integral floats and class membership of objects.
    """
    if isinstance(target_type, str):
        target_type = parse_type_name(target_type)
    source = normalize_type_name(source_type)
    if isinstance(target_type, Nullable):
        return source == "null" or is_compatible(
            source, target_type.inner, source_value
        )
    if isinstance(target_type, UnionOf):
        return any(
            is_compatible(source, member, source_value)
            for member in target_type.members
        )
    return _is_unit_compatible(source, target_type, source_value)


def _is_unit_compatible(source: str, unit: Unit, value: Any) -> bool:
    if unit.is_class_type():
        return value is not None and isinstance(value, unit.cls)

    target = normalize_type_name(unit.name)

    if source == target:
        return True
    if source == "int" and target == "float":
        return True
    if source == "float" and target == "int":
        return isinstance(value, float) and value.is_integer()
    if source == "null":
        return target in ("null", "any")
    if target == "object":
        # every non-null Python value is an object
        return True
    if source == "object" and any(
        klass.__name__ == unit.name for klass in type(value).__mro__
    ):
        return True
    return target == "any"
