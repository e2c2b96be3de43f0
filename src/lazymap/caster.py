from __future__ import annotations

import logging
from collections import abc
from types import SimpleNamespace
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from lazymap.compat import is_compatible, normalize_type_name, runtime_type
from lazymap.errors import CastError
from lazymap.type_spec import Nullable, TypeSpec, UnionOf, Unit

logger = logging.getLogger(__name__)

_CONTAINER_CLASSES = (list, tuple, set, frozenset)
_EMPTY_VALUES: Dict[str, Callable[[], Any]] = {
    "int": int,
    "float": float,
    "bool": bool,
    "string": str,
    "list": list,
    "dict": dict,
}


def cast(target_type: Optional[TypeSpec], value: Any) -> Any:
    """Coerce ``value`` to ``target_type``.

    Untyped targets, user classes and unknown type names pass the value
    through. A primitive coercion that fails gives the empty value of the
    type (``0`` for ``int``, ``""`` for ``string``...). The only
    failure is a union none of whose members accepts the value, which raises
    CastError.
    """
    if target_type is None:
        return value

    if isinstance(target_type, UnionOf):
        source_type = runtime_type(value)
        for member in target_type.members:
            if is_compatible(source_type, member, value):
                return cast(member, value)
        raise CastError(source_type, target_type.member_names())

    if isinstance(target_type, Nullable):
        if value is None:
            return None
        return cast(target_type.inner, value)

    return _cast_unit(target_type, value)


def _cast_unit(unit: Unit, value: Any) -> Any:
    if unit.is_class_type():
        return value
    name = normalize_type_name(unit.name)
    coerce = _COERCIONS.get(name)
    if coerce is None:
        return value
    if value is None and name in _EMPTY_VALUES:
        return _empty_value(name, unit)
    try:
        return coerce(value, unit)
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(
            "Cannot coerce %s to %s, using its empty value: %s",
            runtime_type(value),
            unit.describe(),
            e,
        )
        return _empty_value(name, unit)


def _empty_value(name: str, unit: Unit) -> Any:
    if name == "list":
        return _container(unit)()
    return _EMPTY_VALUES[name]()


def _container(unit: Unit) -> type:
    return unit.cls if unit.cls in _CONTAINER_CLASSES else list


def _to_int(value: Any, unit: Unit) -> int:
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return int(float(value))
    return int(value)


def _to_float(value: Any, unit: Unit) -> float:
    return float(value)


def _to_bool(value: Any, unit: Unit) -> bool:
    return bool(value)


def _to_string(value: Any, unit: Unit) -> str:
    return str(value)


def _to_list(value: Any, unit: Unit) -> Any:
    container = _container(unit)
    if isinstance(value, abc.Mapping):
        return container(value.values())
    if isinstance(value, (*_CONTAINER_CLASSES, abc.Iterator)):
        return container(value)
    return container([value])


def _to_dict(value: Any, unit: Unit) -> Dict[Any, Any]:
    if isinstance(value, abc.Mapping):
        return dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, _CONTAINER_CLASSES):
        return dict(enumerate(value))
    if hasattr(value, "__dict__"):
        return {
            name: attr
            for name, attr in vars(value).items()
            if not name.startswith("_")
        }
    raise TypeError(f"{type(value).__name__} has no fields to build a dict from")


def _to_object(value: Any, unit: Unit) -> Any:
    if isinstance(value, abc.Mapping):
        return SimpleNamespace(**{str(key): item for key, item in value.items()})
    return value


def _passthrough(value: Any, unit: Unit) -> Any:
    return value


_COERCIONS: Dict[str, Callable[[Any, Unit], Any]] = {
    "int": _to_int,
    "float": _to_float,
    "bool": _to_bool,
    "string": _to_string,
    "list": _to_list,
    "dict": _to_dict,
    "object": _to_object,
    "any": _passthrough,
    "null": _passthrough,
}
