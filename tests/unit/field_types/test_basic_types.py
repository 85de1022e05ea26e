from datetime import datetime

import pytest

from entity_engine.field_types import (
    ArrayFieldTyper,
    BinaryFieldTyper,
    BooleanFieldTyper,
    DateFieldTyper,
    EnumFieldTyper,
    JsonFieldTyper,
    ManyToManyFieldTyper,
    ManyToOneFieldTyper,
    NumberFieldTyper,
    OneToManyFieldTyper,
    OneToOneFieldTyper,
    StringFieldTyper,
)
from entity_engine.schemas.meta import EntityField
from entity_engine.schemas.query import QueryOperator


def _field(field_type: str, **kwargs) -> EntityField:
    return EntityField(name="value", title="Value", type=field_type, **kwargs)


@pytest.mark.unit
class TestDefaultValues:

    @pytest.mark.parametrize("typer, expected", [
        (StringFieldTyper(), ""),
        (NumberFieldTyper(), 0),
        (BooleanFieldTyper(), False),
        (ArrayFieldTyper(), []),
        (ManyToOneFieldTyper(), ""),
        (OneToOneFieldTyper(), ""),
        (OneToManyFieldTyper(), None),
        (ManyToManyFieldTyper(), None),
        (BinaryFieldTyper(), None),
        (JsonFieldTyper(), {}),
    ])
    def test_default_value(self, typer, expected):
        """Test each builtin typer's default value."""
        assert typer.get_default_value(_field(typer.type)) == expected

    def test_mutable_defaults_are_fresh(self):
        """Test list and dict defaults are not shared between calls."""
        typer = ArrayFieldTyper()
        first = typer.get_default_value(_field("array"))
        first.append("x")

        assert typer.get_default_value(_field("array")) == []
        assert JsonFieldTyper().get_default_value(_field("json")) is not JsonFieldTyper().get_default_value(_field("json"))

    def test_date_default_is_now_utc(self):
        """Test the date default is a timezone-aware current timestamp."""
        value = DateFieldTyper().get_default_value(_field("date"))

        assert isinstance(value, datetime)
        assert value.tzinfo is not None

    def test_enum_default_is_first_option_value(self):
        """Test the enum default unwraps {label, value} options."""
        field = _field("enum", type_options={"options": [{"label": "Draft", "value": "draft"}, "published"]})

        assert EnumFieldTyper().get_default_value(field) == "draft"

    def test_enum_default_plain_option(self):
        """Test plain option values are used directly."""
        field = _field("enum", type_options={"options": ["small", "large"]})

        assert EnumFieldTyper().get_default_value(field) == "small"

    @pytest.mark.parametrize("type_options", [None, {}, {"options": []}])
    def test_enum_default_without_options(self, type_options):
        """Test an enum without options defaults to None."""
        assert EnumFieldTyper().get_default_value(_field("enum", type_options=type_options)) is None


@pytest.mark.unit
class TestDefaultWidgets:

    @pytest.mark.parametrize("typer, widget", [
        (StringFieldTyper(), "textfield"),
        (NumberFieldTyper(), "number"),
        (BooleanFieldTyper(), "switch"),
        (DateFieldTyper(), "date"),
        (EnumFieldTyper(), "select"),
        (ArrayFieldTyper(), "select"),
        (ManyToOneFieldTyper(), "select"),
        (OneToOneFieldTyper(), "select"),
        (OneToManyFieldTyper(), "reference"),
        (ManyToManyFieldTyper(), "reference"),
        (BinaryFieldTyper(), "file"),
        (JsonFieldTyper(), "json"),
    ])
    def test_default_widget(self, typer, widget):
        """Test each builtin typer's widget."""
        assert typer.get_default_widget_type("form") == widget


@pytest.mark.unit
class TestDefaultSchemas:

    def test_string_required_rejects_empty(self):
        """Test a required string must be non-empty."""
        schema = StringFieldTyper().get_default_schema(_field("string", is_required=True))

        assert schema.is_valid("Widget")
        assert not schema.is_valid("")
        assert not schema.is_valid(None)
        assert not schema.is_valid(5)

    def test_string_optional(self):
        """Test an optional string accepts empty and None."""
        schema = StringFieldTyper().get_default_schema(_field("string"))

        assert schema.is_valid("")
        assert schema.is_valid(None)
        assert not schema.required

    def test_number_is_strict(self):
        """Test numbers reject strings and booleans."""
        schema = NumberFieldTyper().get_default_schema(_field("number", is_required=True))

        assert schema.is_valid(9.5)
        assert not schema.is_valid("9.5")
        assert not schema.is_valid(True)

    def test_boolean_is_strict(self):
        """Test booleans reject truthy non-bool values."""
        schema = BooleanFieldTyper().get_default_schema(_field("boolean", is_required=True))

        assert schema.is_valid(False)
        assert not schema.is_valid(1)
        assert not schema.is_valid("true")

    def test_date_coerces_iso_strings(self):
        """Test dates accept ISO strings and datetimes."""
        schema = DateFieldTyper().get_default_schema(_field("date", is_required=True))

        assert schema.validate("2024-05-01T10:00:00Z") == datetime.fromisoformat("2024-05-01T10:00:00+00:00")
        assert schema.is_valid(datetime(2024, 1, 1))
        assert not schema.is_valid("not a date")

    def test_enum_restricts_to_option_values(self):
        """Test enum values must be one of the options."""
        field = _field("enum", is_required=True, type_options={"options": [{"label": "Draft", "value": "draft"}, "published"]})
        schema = EnumFieldTyper().get_default_schema(field)

        assert schema.is_valid("draft")
        assert schema.is_valid("published")
        assert not schema.is_valid("archived")

    @pytest.mark.parametrize("type_options", [None, {"options": []}, {"options": "draft"}])
    def test_enum_without_options_accepts_any_string(self, type_options):
        """Test an enum without options falls back to strings."""
        schema = EnumFieldTyper().get_default_schema(_field("enum", type_options=type_options))

        assert schema.is_valid("anything")
        assert schema.is_valid(None)

    @pytest.mark.parametrize("options, other", [
        ([0.5, 1.5], 1.5),
        ([{"label": "Half", "value": 0.5}, {"label": "One and a half", "value": 1.5}], 1.5),
        ([{"size": "s"}, {"size": "m"}], {"size": "m"}),
    ])
    def test_enum_default_satisfies_schema(self, options, other):
        """Test options that cannot be literals still validate by membership."""
        field = _field("enum", is_required=True, type_options={"options": options})
        typer = EnumFieldTyper()
        schema = typer.get_default_schema(field)

        assert schema.is_valid(typer.get_default_value(field))
        assert schema.is_valid(other)
        assert not schema.is_valid(2.5)
        assert not schema.is_valid("0.5")

    def test_array_of_options(self):
        """Test array items are restricted to the options."""
        field = _field("array", is_required=True, type_options={"options": ["red", "green"]})
        schema = ArrayFieldTyper().get_default_schema(field)

        assert schema.is_valid(["red", "green"])
        assert schema.is_valid([])
        assert not schema.is_valid(["blue"])

    def test_array_of_float_options(self):
        """Test array items holding non-literal options are checked by membership."""
        field = _field("array", is_required=True, type_options={"options": [0.5, 1.5]})
        schema = ArrayFieldTyper().get_default_schema(field)

        assert schema.is_valid([0.5, 1.5])
        assert schema.is_valid([])
        assert not schema.is_valid([0.5, 2.5])

    def test_array_without_options(self):
        """Test arrays without options accept lists of strings."""
        schema = ArrayFieldTyper().get_default_schema(_field("array", is_required=True))

        assert schema.is_valid(["a", "b"])
        assert not schema.is_valid([1])

    def test_relation_schemas(self):
        """Test to-one relations hold an id and to-many relations a list of ids."""
        field = _field("many_to_one", is_required=True)

        assert ManyToOneFieldTyper().get_default_schema(field).is_valid("user-1")
        assert OneToOneFieldTyper().get_default_schema(field).is_valid("user-1")
        assert OneToManyFieldTyper().get_default_schema(field).is_valid(["a", "b"])
        assert not ManyToManyFieldTyper().get_default_schema(field).is_valid("a")

    def test_binary_required(self):
        """Test a required file value needs every attribute."""
        schema = BinaryFieldTyper().get_default_schema(_field("binary", is_required=True))
        value = {"fileName": "a.txt", "fileType": "text/plain", "fileSize": 12.0, "filePath": "/files/a.txt"}

        assert schema.is_valid(value)
        assert not schema.is_valid({"fileName": "a.txt"})
        assert not schema.is_valid({**value, "fileSize": -1.0})

    def test_binary_optional_is_partial(self):
        """Test an optional file value accepts partial objects and None."""
        schema = BinaryFieldTyper().get_default_schema(_field("binary"))

        assert schema.is_valid({"fileName": "a.txt"})
        assert schema.is_valid(None)

    def test_json_object(self):
        """Test json values are string-keyed objects."""
        schema = JsonFieldTyper().get_default_schema(_field("json", is_required=True))

        assert schema.is_valid({"nested": {"a": [1, 2]}})
        assert not schema.is_valid([1, 2])


@pytest.mark.unit
class TestTyperQueryMeta:

    def test_boolean_query_meta(self):
        """Test booleans offer eq and null checks with a yes/no pair."""
        meta = BooleanFieldTyper().get_query_item_meta(_field("boolean", searchable=True))

        assert meta.operators == [QueryOperator.EQ, QueryOperator.IS_NOT_NULL, QueryOperator.IS_NULL]
        assert [(option.label, option.value) for option in meta.options] == [("是", True), ("否", False)]

    def test_json_query_meta(self):
        """Test json fields only support null checks."""
        meta = JsonFieldTyper().get_query_item_meta(_field("json"))

        assert meta.operators == [QueryOperator.IS_NOT_NULL, QueryOperator.IS_NULL]
        assert meta.options == []
