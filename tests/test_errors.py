# tests/test_errors.py
"""
Tests for valija.errors and valija.config.
"""

import pytest

from valija.config import DEFAULT_CONFIG, RuntimeConfig
from valija.errors import (
    ConfigurationError,
    ErrorCategory,
    ErrorPhase,
    FrozenObjectError,
    InternalError,
    NotCallableError,
    ValijaError,
    ValijaErrorCodes,
    ValijaReferenceError,
    ValijaTypeError,
)


class TestErrorCodes:

    def test_code_format(self):
        assert ValijaErrorCodes.TYPE_VIOLATION.code == "VLJ-2001"
        assert str(ValijaErrorCodes.DUPLICATE_SHADOW) == "VLJ-9002"

    def test_code_equality(self):
        assert ValijaErrorCodes.NOT_CALLABLE == "VLJ-2002"
        assert ValijaErrorCodes.NOT_CALLABLE != ValijaErrorCodes.FROZEN_OBJECT
        assert ValijaErrorCodes.NOT_CALLABLE != 2002

    def test_code_classification(self):
        code = ValijaErrorCodes.UNDEFINED_NAME
        assert code.category is ErrorCategory.UNDEFINED_NAME
        assert code.phase is ErrorPhase.OUTERS


class TestExceptions:

    def test_type_error_is_builtin_type_error(self):
        err = ValijaTypeError("bad", expected_type="object", actual_type="number")
        assert isinstance(err, TypeError)
        assert isinstance(err, ValijaError)
        assert str(err) == (
            "VLJ-2001: bad\n"
            "  note: Expected type: object\n"
            "  note: Actual type: number"
        )

    def test_not_callable(self):
        err = NotCallableError("'dist'", actual_type="undefined")
        assert err.code == "VLJ-2002"
        assert err.message == "'dist' is not a function"
        assert isinstance(err, ValijaTypeError)

    def test_frozen_object_carries_hint(self):
        err = FrozenObjectError("x", action="delete")
        assert err.name == "x"
        assert "cannot delete property 'x'" in str(err)
        assert "  hint: " in str(err)

    def test_reference_error_is_name_error(self):
        err = ValijaReferenceError("foo")
        assert isinstance(err, NameError)
        assert err.message == "not found: foo"
        assert err.code == ValijaErrorCodes.UNDEFINED_NAME

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise ConfigurationError("nope")

    def test_internal_error_default_code(self):
        assert InternalError("broken").code == ValijaErrorCodes.INTERNAL_ERROR

    def test_to_dict(self):
        err = ValijaError("boom", code=ValijaErrorCodes.NULL_BASE).with_hint("check the base")
        err.add_note("while reading 'x'")
        data = err.error_message.to_dict()
        assert data["code"] == "VLJ-2004"
        assert data["category"] == "NULL_BASE"
        assert data["phase"] == "access"
        assert data["notes"] == [{"label": "note", "message": "while reading 'x'"}]
        assert data["hint"] == "check the base"


class TestRuntimeConfig:

    def test_default_is_valid(self):
        assert DEFAULT_CONFIG.validate() == []
        assert DEFAULT_CONFIG.is_coercion_member("valueOf")
        assert not DEFAULT_CONFIG.is_coercion_member("toString")

    def test_bad_receiver_warns(self):
        warnings = RuntimeConfig(receiver_param="not valid").validate()
        assert len(warnings) == 1
        assert "receiver_param" in warnings[0]

    def test_constructor_as_coercion_member_warns(self):
        warnings = RuntimeConfig(coercion_members=("valueOf", "constructor")).validate()
        assert any("constructor" in w for w in warnings)

    def test_blank_body_warns(self):
        assert RuntimeConfig(redacted_body="  ").validate() == ["redacted_body is blank"]

    def test_non_string_names_warn(self):
        warnings = RuntimeConfig(coercion_members=(1,)).validate()
        assert warnings == ["member name 1 is not a string"]

    def test_frozen(self):
        import dataclasses
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.receiver_param = "self"
