from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Dict,
    List,
    Literal,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
)

import pytest
from pydantic import BaseModel

from lazymap import Nullable, UnionOf, Unit, resolve_type
from lazymap.inspector import (
    PopoInspector,
    PydanticModelInspector,
    get_inspector,
    to_type_spec,
)

T = TypeVar("T")


class Address:
    pass


class TestToTypeSpec:
    @pytest.mark.parametrize(
        "annotation,expected",
        [
            (int, Unit("int")),
            (float, Unit("float")),
            (bool, Unit("bool")),
            (str, Unit("string")),
            (list, Unit("list")),
            (List[int], Unit("list")),
            (Tuple[int, ...], Unit("list")),
            (Sequence[str], Unit("list")),
            (dict, Unit("dict")),
            (Dict[str, int], Unit("dict")),
            (Mapping[str, int], Unit("dict")),
            (Any, Unit("any")),
            (object, Unit("object")),
            (type(None), Unit("null")),
            (Address, Unit("Address")),
        ],
    )
    def test_single_types(self, annotation, expected):
        assert to_type_spec(annotation) == expected

    def test_container_class_is_kept(self):
        assert to_type_spec(Tuple[int, ...]).cls is tuple
        assert to_type_spec(Sequence[int]).cls is list

    def test_class_unit_carries_the_class(self):
        assert to_type_spec(Address).cls is Address

    @pytest.mark.parametrize("annotation", [Optional[int], Union[int, None], int | None])
    def test_optional_is_nullable(self, annotation):
        assert to_type_spec(annotation) == Nullable(Unit("int"))

    def test_union_preserves_declaration_order(self):
        assert to_type_spec(Union[str, int]) == UnionOf((Unit("string"), Unit("int")))
        assert to_type_spec(int | str) == UnionOf((Unit("int"), Unit("string")))

    def test_union_with_none_and_several_members(self):
        assert to_type_spec(Union[int, str, None]) == UnionOf(
            (Unit("int"), Unit("string"), Unit("null"))
        )

    @pytest.mark.parametrize("annotation", [T, Literal["a", "b"], Union[int, T]])
    def test_untranslatable_annotations(self, annotation):
        assert to_type_spec(annotation) is None

    def test_union_needs_two_members(self):
        with pytest.raises(ValueError):
            UnionOf((Unit("int"),))


class TestResolveType:
    """Tests for declared type lookup on classes and instances."""

    @pytest.fixture
    def profile_class(self):
        class Profile:
            registry: ClassVar[dict] = {}
            name: str
            age: int
            nickname: Optional[str]

            def __init__(self):
                self.extra = None

        return Profile

    def test_resolves_from_instance_and_class(self, profile_class):
        assert resolve_type(profile_class(), "age") == Unit("int")
        assert resolve_type(profile_class, "nickname") == Nullable(Unit("string"))

    def test_untyped_and_missing_fields_resolve_to_none(self, profile_class):
        assert resolve_type(profile_class(), "extra") is None
        assert resolve_type(profile_class(), "missing") is None

    def test_class_variables_are_not_fields(self, profile_class):
        assert resolve_type(profile_class, "registry") is None

    def test_inherited_annotations(self, profile_class):
        class Employee(profile_class):
            salary: float

        assert resolve_type(Employee, "name") == Unit("string")
        assert resolve_type(Employee, "salary") == Unit("float")

    def test_dataclass(self):
        @dataclass
        class Item:
            sku: str
            quantity: int = 0

        assert resolve_type(Item("a"), "quantity") == Unit("int")

    def test_pydantic_model(self):
        class User(BaseModel):
            name: str
            age: Optional[int] = None

        assert resolve_type(User(name="x"), "age") == Nullable(Unit("int"))
        assert resolve_type(User, "name") == Unit("string")

    def test_unresolvable_annotation_degrades_to_none(self):
        class Broken:
            ref: "DoesNotExist"
            count: int

        assert resolve_type(Broken, "ref") is None
        assert resolve_type(Broken, "count") == Unit("int")

    def test_string_annotations_are_evaluated_per_class(self):
        class Base:
            ref: "DoesNotExist"

        class Child(Base):
            total: "int"

        assert resolve_type(Child, "ref") is None
        assert resolve_type(Child, "total") == Unit("int")

    def test_uncached_inspector_gives_same_result(self, profile_class):
        inspector = PopoInspector(cache_descriptors=False)
        assert inspector.resolve_type(profile_class, "age") == Unit("int")


class TestFieldNames:
    def test_annotated_fields_come_before_instance_attributes(self):
        class Target:
            a: int

            def __init__(self):
                self.b = 1
                self._c = 2
                self.a = 3

        target = Target()
        assert get_inspector(target).field_names(target) == ["a", "b"]

    def test_column_provider_list(self):
        class Row:
            id: int
            name: str
            secret: str

            def get_columns(self):
                return ["name", "id"]

        row = Row()
        assert get_inspector(row).field_names(row) == ["name", "id"]

    def test_column_provider_mapping(self):
        class Row:
            id: int

            def get_columns(self):
                return {"id": "rows.id", "name": "rows.name"}

        row = Row()
        assert get_inspector(row).field_names(row) == ["id", "name"]

    def test_pydantic_fields_in_declaration_order(self):
        class User(BaseModel):
            name: str = ""
            age: int = 0

        user = User()
        inspector = get_inspector(user)
        assert isinstance(inspector, PydanticModelInspector)
        assert inspector.field_names(user) == ["name", "age"]


class TestSourceAttrs:
    def test_public_values_properties_included(self):
        class Source:
            def __init__(self):
                self.name = "Johnny"
                self._secret = "x"

            @property
            def email(self):
                return "johnny@mail.com"

            def greet(self):
                return "hi"

        assert get_inspector(Source()).get_source_attrs(Source()) == {
            "name": "Johnny",
            "email": "johnny@mail.com",
        }

    def test_mapping_is_copied(self):
        source = {"a": 1}
        record = get_inspector(source).get_source_attrs(source)
        assert record == source
        assert record is not source

    def test_pydantic_model_values(self):
        class User(BaseModel):
            name: str
            age: int

        user = User(name="Johnny", age=3)
        assert get_inspector(user).get_source_attrs(user) == {"name": "Johnny", "age": 3}

    def test_pydantic_model_class_is_not_a_source(self):
        class User(BaseModel):
            name: str = "Johnny"

        with pytest.raises(TypeError, match="Expected a BaseModel instance"):
            PydanticModelInspector().get_public_attrs(User)
