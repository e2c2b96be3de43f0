from lazymap.caster import cast
from lazymap.compat import is_compatible, normalize_type_name, runtime_type
from lazymap.errors import CastError, LazyMapError, ParseError, ValidationError
from lazymap.inspector import resolve_type
from lazymap.mapper import (
    Mapper,
    copy_from_array,
    copy_from_json,
    default_mapper,
    transform,
    validate,
)
from lazymap.settings import MapperSettings, get_settings
from lazymap.type_spec import FieldDescriptor, Nullable, TypeSpec, UnionOf, Unit

__all__ = [
    "CastError",
    "FieldDescriptor",
    "LazyMapError",
    "Mapper",
    "MapperSettings",
    "Nullable",
    "ParseError",
    "TypeSpec",
    "UnionOf",
    "Unit",
    "ValidationError",
    "cast",
    "copy_from_array",
    "copy_from_json",
    "default_mapper",
    "get_settings",
    "is_compatible",
    "normalize_type_name",
    "resolve_type",
    "runtime_type",
    "transform",
    "validate",
]
