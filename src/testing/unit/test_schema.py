import logging

import pytest

from restinfront import FieldTypes, SchemaError, UnknownFieldType
from restinfront.models import compile_schema


def test_compile_designates_primary_key_and_auto_checked_fields():
    schema = compile_schema(
        {
            "id": {"type": FieldTypes.UUID, "primary_key": True},
            "name": {"type": FieldTypes.STRING},
            "created_at": {"type": FieldTypes.DATE},
            "updatedAt": {"type": FieldTypes.DATE},
        }
    )

    assert schema.primary_key == "id"
    assert list(schema) == ["id", "name", "created_at", "updatedAt"]
    assert schema["id"].primary_key
    assert schema["id"].auto_checked
    assert not schema["name"].auto_checked
    assert schema["created_at"].auto_checked
    assert schema["updatedAt"].auto_checked


def test_explicit_auto_checked_wins():
    schema = compile_schema(
        {
            "id": {"type": FieldTypes.UUID, "primary_key": True, "auto_checked": False},
            "name": {"type": FieldTypes.STRING, "auto_checked": True},
        }
    )
    assert not schema["id"].auto_checked
    assert schema["name"].auto_checked


def test_missing_type_raises():
    with pytest.raises(SchemaError, match="type"):
        compile_schema({"name": {"primary_key": True}})


def test_unknown_option_raises():
    with pytest.raises(SchemaError, match="Unknown options"):
        compile_schema({"name": {"type": FieldTypes.STRING, "required": True}})


def test_more_than_one_primary_key_raises():
    with pytest.raises(SchemaError):
        compile_schema(
            {
                "id": {"type": FieldTypes.UUID, "primary_key": True},
                "code": {"type": FieldTypes.STRING, "primary_key": True},
            }
        )


def test_required_primary_key_raises():
    with pytest.raises(SchemaError, match="primary_key"):
        compile_schema(
            {"name": {"type": FieldTypes.STRING}},
            model_name="Note",
            primary_key_required=True,
        )


def test_missing_primary_key_warns(caplog):
    with caplog.at_level(logging.WARNING):
        schema = compile_schema({"name": {"type": FieldTypes.STRING}}, model_name="Note")

    assert schema.primary_key is None
    assert "primary_key" in caplog.text
    assert "Note" in caplog.text


def test_type_given_by_name():
    schema = compile_schema({"name": {"type": "STRING"}})
    assert schema["name"].type is FieldTypes.STRING


def test_unknown_type_name_raises():
    with pytest.raises(UnknownFieldType):
        compile_schema({"name": {"type": "NOT_A_TYPE"}})


def test_uncalled_association_factory_raises():
    with pytest.raises(SchemaError, match="factory"):
        compile_schema({"books": {"type": FieldTypes.HASMANY}})


def test_non_field_type_raises():
    with pytest.raises(SchemaError):
        compile_schema({"name": {"type": str}})


def test_defaults_and_policies_are_callables():
    schema = compile_schema(
        {
            "status": {
                "type": FieldTypes.STRING,
                "default_value": "draft",
                "allow_blank": True,
            },
            "title": {"type": FieldTypes.STRING},
            "code": {
                "type": FieldTypes.STRING,
                "default_value": lambda: "generated",
                "allow_blank": lambda value, entity: entity is None,
            },
        }
    )

    assert schema["status"].default_value(None) == "draft"
    assert schema["status"].allow_blank("", None) is True
    # default blank is restricted and default validity is permissive
    assert schema["title"].allow_blank("", None) is False
    assert schema["title"].default_value(None) == ""
    assert schema["title"].is_valid("anything", None) is True
    assert schema["code"].default_value("pk") == "generated"
    assert schema["code"].allow_blank("", None) is True


def test_custom_validity_may_ignore_entity():
    schema = compile_schema(
        {"age": {"type": FieldTypes.INTEGER, "is_valid": lambda value: value < 150}}
    )
    assert schema["age"].is_valid(20, None)
    assert not schema["age"].is_valid(200, None)


def test_schema_is_read_only():
    schema = compile_schema({"name": {"type": FieldTypes.STRING}})
    with pytest.raises(TypeError):
        schema["other"] = schema["name"]  # type: ignore[index]
