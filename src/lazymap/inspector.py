from __future__ import annotations

import logging
import types
from collections import abc
from dataclasses import InitVar
from functools import lru_cache
from inspect import get_annotations, getmembers, isclass, isroutine
from typing import (
    Annotated,
    Any,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel

from lazymap.type_spec import FieldDescriptor, Nullable, TypeSpec, UnionOf, Unit

logger = logging.getLogger(__name__)

SourceRecord = Dict[str, Any]

_PRIMITIVES = {
    int: "int",
    float: "float",
    bool: "bool",
    str: "string",
    object: "object",
}
_CONTAINERS = (list, tuple, set, frozenset)
_SEQUENCE_ABCS = (
    abc.Sequence,
    abc.MutableSequence,
    abc.Set,
    abc.MutableSet,
    abc.Collection,
    abc.Iterable,
)
_MAPPING_ABCS = (abc.Mapping, abc.MutableMapping)


def to_type_spec(annotation: Any) -> Optional[TypeSpec]:
    """Translate a Python annotation into a TypeSpec.

    Returns None for annotations that carry no usable type information
    (TypeVar, Literal, unresolved forward references...).
    """
    if annotation is Any:
        return Unit("any")
    if annotation is None or annotation is type(None):
        return Unit("null")

    origin = get_origin(annotation)
    if origin is Annotated:
        return to_type_spec(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        return _union_to_type_spec(get_args(annotation))
    if origin is not None:
        annotation = origin

    if not isclass(annotation):
        return None
    if annotation in _PRIMITIVES:
        return Unit(_PRIMITIVES[annotation], cls=annotation)
    if annotation in _CONTAINERS:
        return Unit("list", cls=annotation)
    if annotation in _SEQUENCE_ABCS:
        return Unit("list", cls=list)
    if annotation is dict or annotation in _MAPPING_ABCS:
        return Unit("dict", cls=dict)
    return Unit(annotation.__name__, cls=annotation)


def _union_to_type_spec(args: Tuple[Any, ...]) -> Optional[TypeSpec]:
    not_none = [arg for arg in args if arg is not type(None)]
    if len(args) == 2 and len(not_none) == 1:
        inner = to_type_spec(not_none[0])
        return Nullable(inner) if inner is not None else None
    members = tuple(to_type_spec(arg) for arg in args)
    if any(member is None for member in members):
        return None
    return UnionOf(members)


def _is_field_annotation(annotation: Any) -> bool:
    return not (
        annotation is ClassVar
        or get_origin(annotation) is ClassVar
        or isinstance(annotation, InitVar)
        or (
            isinstance(annotation, str)
            and annotation.startswith(("ClassVar", "InitVar"))
        )
    )


class PopoInspector:
    """Reads declared attribute types and public values of plain objects."""

    def __init__(self, cache_descriptors: bool = True) -> None:
        self.cache_descriptors = cache_descriptors

    def get_public_attrs(self, obj: Any) -> List[Tuple[str, Any]]:
        """Public non-method members of ``obj``, properties included.

        A property raising AttributeError is left out; any other exception
        raised while reading a property propagates to the caller.
        """
        return [
            (name, value)
            for name, value in getmembers(obj)
            if not name.startswith("_") and not isroutine(value)
        ]

    def get_source_attrs(self, source: Any) -> SourceRecord:
        if isinstance(source, Mapping):
            return dict(source)
        return dict(self.get_public_attrs(source))

    def get_annotations(self, cls: Type) -> Dict[str, Any]:
        try:
            return get_type_hints(cls)
        except Exception as e:  # unresolvable forward reference somewhere in the MRO
            logger.debug("Falling back to raw annotations of %s: %s", cls.__name__, e)
        annotations: Dict[str, Any] = {}
        for klass in reversed(cls.__mro__[:-1]):
            annotations.update(self._class_annotations(klass))
        return annotations

    def build_descriptors(self, cls: Type) -> Dict[str, FieldDescriptor]:
        descriptors = {}
        for name, annotation in self.get_annotations(cls).items():
            if name.startswith("_") or not _is_field_annotation(annotation):
                continue
            descriptors[name] = FieldDescriptor(
                name, self._to_type_spec(name, annotation)
            )
        return descriptors

    def get_descriptors(self, cls: Type) -> Dict[str, FieldDescriptor]:
        if self.cache_descriptors:
            return _cached_descriptors(cls)
        return self.build_descriptors(cls)

    def resolve_type(self, target: Any, field: str) -> Optional[TypeSpec]:
        cls = target if isclass(target) else type(target)
        try:
            descriptor = self.get_descriptors(cls).get(field)
        except Exception as e:
            logger.debug("Cannot inspect %s.%s: %s", cls.__name__, field, e)
            return None
        return descriptor.declared_type if descriptor else None

    def get_columns(self, obj: Any) -> Optional[List[str]]:
        provider = getattr(obj, "get_columns", None)
        if not callable(provider):
            return None
        columns = provider()
        if columns is None:
            return None
        if isinstance(columns, Mapping):
            return list(columns.keys())
        return list(columns)

    def field_names(self, obj: Any) -> List[str]:
        columns = self.get_columns(obj)
        if columns is not None:
            return columns
        return self.declared_field_names(obj)

    def declared_field_names(self, obj: Any) -> List[str]:
        names = list(self.get_descriptors(type(obj)))
        names.extend(
            name
            for name in getattr(obj, "__dict__", {})
            if not name.startswith("_") and name not in names
        )
        return names

    def has_field(self, obj: Any, name: str) -> bool:
        if name in self.get_descriptors(type(obj)):
            return True
        if name in getattr(obj, "__dict__", {}):
            return True
        return name in (self.get_columns(obj) or ())

    def _to_type_spec(self, name: str, annotation: Any) -> Optional[TypeSpec]:
        try:
            return to_type_spec(annotation)
        except Exception as e:
            logger.debug("Ignoring unparseable annotation of %s: %s", name, e)
            return None

    @staticmethod
    def _class_annotations(klass: Type) -> Dict[str, Any]:
        # annotations left as strings translate to no type
        try:
            return get_annotations(klass, eval_str=True)
        except Exception as e:
            logger.debug("Cannot evaluate annotations of %s: %s", klass.__name__, e)
        try:
            return get_annotations(klass)
        except Exception as e:
            logger.debug("Skipping annotations of %s: %s", klass.__name__, e)
            return {}


class PydanticModelInspector(PopoInspector):
    """Reads field declarations and values of pydantic models."""

    def get_public_attrs(self, obj: Any) -> List[Tuple[str, Any]]:
        if isinstance(obj, BaseModel):
            return [(name, getattr(obj, name)) for name in type(obj).model_fields]
        raise TypeError(f"Expected a BaseModel instance, got {type(obj).__name__}")

    def get_annotations(self, cls: Type) -> Dict[str, Any]:
        return {name: field.annotation for name, field in cls.model_fields.items()}

    def declared_field_names(self, obj: Any) -> List[str]:
        return list(type(obj).model_fields)

    def has_field(self, obj: Any, name: str) -> bool:
        return name in type(obj).model_fields or name in (self.get_columns(obj) or ())


def is_pydantic(obj: Any) -> bool:
    return isinstance(obj, BaseModel) or (isclass(obj) and issubclass(obj, BaseModel))


def get_inspector(obj: Any, cache_descriptors: bool = True) -> PopoInspector:
    if is_pydantic(obj):
        return PydanticModelInspector(cache_descriptors)
    return PopoInspector(cache_descriptors)


@lru_cache(maxsize=None)
def _cached_descriptors(cls: Type) -> Dict[str, FieldDescriptor]:
    return get_inspector(cls, cache_descriptors=False).build_descriptors(cls)


def resolve_type(target: Any, field: str) -> Optional[TypeSpec]:
    """Return the declared type of ``field`` on ``target`` (instance or class)."""
    return get_inspector(target).resolve_type(target, field)
