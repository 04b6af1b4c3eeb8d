"""Tests for sequelorm.orm.data_types: validation, options, marshalling, registry."""

import math
from datetime import datetime, timedelta, timezone

import pytest

from sequelorm.core.errors import SchemaError
from sequelorm.orm.data_types import (
    BOOLEAN,
    BUILTIN_TYPES,
    DATETIME,
    ENUM,
    FLOAT,
    INT,
    TEXT,
    VARCHAR,
    ColumnType,
    DataType,
    check_data_type,
    get_data_type,
    list_data_types,
    register_data_type,
    reset_data_types,
)


class TestDescriptors:
    def test_tags_and_templates(self):
        assert (INT.type, INT.sql) == ("integer", "INT({length})")
        assert (VARCHAR.type, VARCHAR.sql) == ("varchar", "VARCHAR({length})")
        assert (TEXT.type, TEXT.sql) == ("text", "TEXT")
        assert (BOOLEAN.type, BOOLEAN.sql) == ("boolean", "INT(1)")
        assert (FLOAT.type, FLOAT.sql) == ("float", "FLOAT")
        assert (DATETIME.type, DATETIME.sql) == ("datetime", "DATETIME")
        assert (ENUM.type, ENUM.sql) == ("enum", "ENUM({values})")

    def test_default_options(self):
        assert dict(INT.default_options) == {"length": 11}
        assert dict(VARCHAR.default_options) == {"length": 255}
        assert TEXT.default_options is None
        assert ENUM.default_options is None

    def test_descriptors_are_immutable(self):
        with pytest.raises(AttributeError):
            INT.sql = "BIGINT"

    def test_calling_binds_options(self):
        column = VARCHAR(length=40, required=True)
        assert isinstance(column, ColumnType)
        assert column.options["length"] == 40
        assert column.required is True
        assert column.type == "varchar"

    def test_options_merge_over_defaults(self):
        column = INT({"unsigned": True})
        assert dict(column.options) == {"length": 11, "unsigned": True}

    def test_binding_does_not_touch_shared_defaults(self):
        INT(length=4)
        assert dict(INT.default_options) == {"length": 11}


class TestValidation:
    def test_int(self):
        assert INT.validate(42)
        assert INT.validate(-3)
        assert not INT.validate(4.5)
        assert not INT.validate("42")
        assert not INT.validate(True)
        assert not INT.validate(float("nan"))

    def test_varchar_and_text(self):
        assert VARCHAR.validate("")
        assert VARCHAR.validate("x" * 1000)
        assert not VARCHAR.validate(12)
        assert TEXT.validate("long text")
        assert not TEXT.validate(None)

    def test_boolean_is_strict(self):
        assert BOOLEAN.validate(True)
        assert BOOLEAN.validate(False)
        assert not BOOLEAN.validate(1)
        assert not BOOLEAN.validate(0)
        assert not BOOLEAN.validate("true")

    def test_float(self):
        assert FLOAT.validate(1.5)
        assert FLOAT.validate(2)
        assert not FLOAT.validate(math.nan)
        assert not FLOAT.validate(math.inf)
        assert not FLOAT.validate("1.5")
        assert not FLOAT.validate(False)

    def test_datetime(self):
        assert DATETIME.validate(datetime.now())
        assert not DATETIME.validate(1_700_000_000)
        assert not DATETIME.validate("2024-01-01 00:00:00")

    def test_enum_with_values(self):
        column = ENUM(values=["test", "lala"])
        assert column.validation("lala") is True
        assert column.validation("") is False
        assert column.validation("lalala") is False

    def test_enum_without_values_rejects_everything(self):
        column = ENUM()
        assert column.validation(1) is False
        assert column.validation("test") is False
        assert column.validation("") is False

    def test_enum_membership_is_type_strict(self):
        column = ENUM(values=[1, 2])
        assert column.validation(1)
        assert not column.validation("1")
        assert not column.validation(True)

    def test_custom_validation_replaces_type_validator(self):
        column = INT(validation=lambda v: v == "special")
        assert column.validation("special") is True
        assert column.validation(5) is False


class TestIsValid:
    def test_none_is_valid_when_optional(self):
        assert INT().is_valid(None)

    def test_required_rejects_none_and_empty(self):
        column = VARCHAR(required=True)
        assert not column.is_valid(None)
        assert not column.is_valid("")
        assert column.is_valid("John")

    def test_present_value_is_type_checked(self):
        assert not INT().is_valid("abc")


class TestMarshalling:
    @pytest.mark.parametrize(
        "data_type,value",
        [(INT, 42), (VARCHAR, "John"), (BOOLEAN, True), (BOOLEAN, False), (FLOAT, 2.25)],
    )
    def test_round_trip(self, data_type, value):
        assert data_type.load(data_type.save(value)) == value

    def test_boolean_loads_driver_integers(self):
        assert BOOLEAN.load(1) is True
        assert BOOLEAN.load(0) is False

    def test_none_passes_through(self):
        assert DATETIME.save(None) is None
        assert DATETIME.load(None) is None

    def test_datetime_saves_utc_wire_string(self):
        eastern = timezone(timedelta(hours=-5))
        value = datetime(2024, 3, 1, 7, 30, 15, 123456, tzinfo=eastern)
        assert DATETIME.save(value) == "2024-03-01 12:30:15"

    def test_naive_datetime_is_treated_as_utc(self):
        assert DATETIME.save(datetime(2024, 3, 1, 12, 0, 0)) == "2024-03-01 12:00:00"

    def test_datetime_round_trip_to_whole_seconds(self):
        value = datetime(2024, 3, 1, 12, 30, 15, 900000, tzinfo=timezone.utc)
        loaded = DATETIME.load(DATETIME.save(value))
        assert loaded.tzinfo is not None
        assert abs(loaded - value) < timedelta(seconds=1)

    def test_datetime_loads_driver_datetime(self):
        loaded = DATETIME.load(datetime(2024, 3, 1, 12, 0, 0))
        assert loaded == datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestRender:
    def test_length_template(self):
        assert INT().render() == "INT(11)"
        assert VARCHAR(length=32).render() == "VARCHAR(32)"

    def test_enum_values_are_quoted(self):
        assert ENUM(values=["a", "it's"]).render() == "ENUM('a', 'it''s')"

    def test_enum_without_values_cannot_render(self):
        with pytest.raises(SchemaError):
            ENUM().render()

    def test_missing_template_option(self):
        custom = DataType("fixed", "CHAR({size})", None, lambda v, o: True)
        with pytest.raises(SchemaError):
            custom().render()


class TestCheckDataType:
    def test_accepts_types_and_columns(self):
        assert check_data_type(INT)
        assert check_data_type(INT())

    def test_rejects_non_types(self):
        assert not check_data_type("INT")
        assert not check_data_type(None)
        assert not check_data_type(DataType("", "TEXT"))


class TestRegistry:
    def test_builtins_registered(self):
        assert set(list_data_types()) == {t.type for t in BUILTIN_TYPES}

    def test_get_unknown_raises(self):
        with pytest.raises(KeyError, match="not found"):
            get_data_type("money")

    def test_register_and_reset(self):
        money = register_data_type(DataType("money", "DECIMAL(12, 2)", None, lambda v, o: True))
        assert get_data_type("money") is money
        reset_data_types()
        assert "money" not in list_data_types()

    def test_register_rejects_incomplete_descriptor(self):
        with pytest.raises(SchemaError):
            register_data_type(DataType("blob", ""))

    def test_custom_validation_sees_absent_value(self):
        column = VARCHAR(validation=lambda v: v is not None)
        assert not column.is_valid(None)
        assert column.is_valid("x")
