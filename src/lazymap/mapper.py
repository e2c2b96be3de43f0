from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from lazymap.caster import cast
from lazymap.compat import is_compatible, runtime_type
from lazymap.errors import ParseError, ValidationError
from lazymap.inspector import PopoInspector, SourceRecord, get_inspector
from lazymap.naming import camel, snake
from lazymap.settings import MapperSettings, get_settings

logger = logging.getLogger(__name__)

TT = TypeVar("TT")

MapFunction = Callable[[Any], Any]
MappingSpec = Dict[str, Union[str, Tuple[str, MapFunction]]]
Override = Tuple[str, str, Optional[MapFunction]]

_MISSING = object()


class Mapper:
    """Copies values into typed objects, casting them to the declared types.

    Assignments happen field by field: when a cast fails, fields processed
    before the failing one keep their new values.
    """

    def __init__(self, settings: Optional[MapperSettings] = None) -> None:
        self.settings = settings or get_settings()

    def transform(
        self,
        source: Any,
        destination: TT,
        mappings: Optional[MappingSpec] = None,
    ) -> TT:
        """Copy matching values from ``source`` into ``destination``.

        Args:
            source: Mapping, pydantic model or any object to read values from
            destination: Object whose fields are populated and cast
            mappings: Explicit ``{destination_field: source_field}`` pairs,
                applied after automatic matching. A value may also be a
                ``(source_field, function)`` tuple.
        """
        if isinstance(source, (str, bytes, bytearray)):
            raise TypeError(
                f"Expected a mapping or an object as source, got {type(source).__name__}; "
                "use copy_from_json for JSON text"
            )
        overrides = self._get_overrides(mappings or {})
        record = self.get_inspector(source).get_source_attrs(source)
        inspector = self.get_inspector(destination)

        for name in inspector.field_names(destination):
            key = self._find_source_key(record, name)
            if key is None:
                continue
            self._assign(inspector, destination, name, record[key])

        for destination_field, source_field, function in overrides:
            if source_field not in record or not inspector.has_field(
                destination, destination_field
            ):
                logger.debug(
                    "Skipping mapping %s <- %s: field not found",
                    destination_field,
                    source_field,
                )
                continue
            value = record[source_field]
            if function is not None:
                value = function(value)
            self._assign(inspector, destination, destination_field, value)

        return destination

    def copy_from_array(
        self,
        source_map: Mapping[str, Any],
        destination: TT,
        mappings: Optional[MappingSpec] = None,
    ) -> TT:
        if not isinstance(source_map, Mapping):
            raise TypeError(f"Expected a mapping, got {type(source_map).__name__}")
        return self.transform(source_map, destination, mappings)

    def copy_from_json(
        self,
        json_text: Union[str, bytes],
        destination: TT,
        mappings: Optional[MappingSpec] = None,
    ) -> TT:
        try:
            data = json.loads(json_text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"JSON decoding failed: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(
                f"JSON decoding failed: expected an object, got {runtime_type(data)}"
            )
        return self.copy_from_array(data, destination, mappings)

    def validate(self, obj: Any) -> bool:
        """Check the current value of every typed field of ``obj``.

        Fields are checked in declaration order and the first mismatch raises
        ValidationError. Declared fields without a value are skipped.
        """
        inspector = self.get_inspector(obj)
        for name in inspector.declared_field_names(obj):
            value = getattr(obj, name, _MISSING)
            if value is _MISSING:
                continue
            declared = inspector.resolve_type(obj, name)
            if declared is None:
                continue
            actual = runtime_type(value)
            if not is_compatible(actual, declared, value):
                raise ValidationError(name, declared.describe(), actual)
        return True

    @staticmethod
    def null_to_empty(data: Mapping[str, Any]) -> Dict[str, Any]:
        return {key: "" if value is None else value for key, value in data.items()}

    def get_inspector(self, obj: Any) -> PopoInspector:
        return get_inspector(obj, self.settings.cache_descriptors)

    # region Private methods
    # These methods are not intended to be used outside of this class.

    def _find_source_key(self, record: SourceRecord, name: str) -> Optional[str]:
        candidates = [name]
        if self.settings.match_camel_case:
            candidates.append(camel(name))
        if self.settings.match_snake_case:
            candidates.append(snake(name))
        for candidate in candidates:
            if candidate in record:
                return candidate
        return None

    def _assign(
        self, inspector: PopoInspector, destination: Any, name: str, value: Any
    ) -> None:
        declared = inspector.resolve_type(destination, name)
        logger.debug(
            "Setting %s.%s from %s",
            type(destination).__name__,
            name,
            runtime_type(value),
        )
        setattr(destination, name, cast(declared, value))

    def _get_overrides(self, mappings: MappingSpec) -> List[Override]:
        overrides = []
        for destination_field, spec in mappings.items():
            if isinstance(spec, str):
                overrides.append((destination_field, spec, None))
            elif (
                isinstance(spec, tuple)
                and len(spec) == 2
                and isinstance(spec[0], str)
                and callable(spec[1])
            ):
                overrides.append((destination_field, spec[0], spec[1]))
            else:
                raise ValueError(
                    f"Unsupported mapping for property '{destination_field}'."
                )
        return overrides

    # endregion


@lru_cache()
def default_mapper() -> Mapper:
    return Mapper()


def transform(
    source: Any, destination: TT, mappings: Optional[MappingSpec] = None
) -> TT:
    return default_mapper().transform(source, destination, mappings)


def copy_from_array(
    source_map: Mapping[str, Any],
    destination: TT,
    mappings: Optional[MappingSpec] = None,
) -> TT:
    return default_mapper().copy_from_array(source_map, destination, mappings)


def copy_from_json(
    json_text: Union[str, bytes],
    destination: TT,
    mappings: Optional[MappingSpec] = None,
) -> TT:
    return default_mapper().copy_from_json(json_text, destination, mappings)


def validate(obj: Any) -> bool:
    return default_mapper().validate(obj)
