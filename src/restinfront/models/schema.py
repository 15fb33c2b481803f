"""
Schema Compiler Module.

Turns a raw field map, as written by the user, into an immutable `Schema`:
every field gets a resolved `FieldType`, callable `default_value` /
`allow_blank` / `is_valid` hooks, and an `auto_checked` flag. The schema also
designates the primary-key field. A schema is compiled once per model type and
shared read-only by all its instances.
"""

import logging as log
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from ..errors import SchemaError
from ..helpers import as_callable, normalize_callable
from .field_types import FieldType, FieldTypeFactory, FieldTypes

# Timestamp fields checked without an explicit validation pass
_AUTO_CHECKED_FIELDNAMES = frozenset(
    {"created_at", "updated_at", "createdAt", "updatedAt"}
)

_FIELD_OPTIONS = frozenset(
    {"type", "primary_key", "default_value", "allow_blank", "is_valid", "auto_checked"}
)


def _always_valid(value: Any, entity: Any) -> bool:
    return True


@dataclass(frozen=True, eq=False)
class FieldConfig:
    """
    The compiled configuration of one schema field.

    Attributes:
        name (str): The field name.
        type (FieldType): The resolved field type.
        primary_key (bool): Whether this field is the schema's primary key.
        default_value (Callable): `(primary_key) -> value`.
        allow_blank (Callable): `(value, entity) -> bool`.
        is_valid (Callable): `(value, entity) -> bool`, schema-level custom validity.
        auto_checked (bool): Whether the field starts as already checked.
    """

    name: str
    type: FieldType
    default_value: Callable[[Any], Any] = field(repr=False)
    allow_blank: Callable[[Any, Any], bool] = field(repr=False)
    primary_key: bool = False
    is_valid: Callable[[Any, Any], bool] = field(default=_always_valid, repr=False)
    auto_checked: bool = False

    @property
    def is_association(self) -> bool:
        return self.type.is_association


class Schema(Mapping[str, FieldConfig]):
    """
    Ordered, read-only mapping `fieldname -> FieldConfig`.

    Attributes:
        primary_key (Optional[str]): The designated primary-key field name, if any.
    """

    def __init__(self, fields: Mapping[str, FieldConfig], primary_key: Optional[str]):
        self._fields = MappingProxyType(dict(fields))
        self.primary_key = primary_key

    def __getitem__(self, name: str) -> FieldConfig:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema(fields={list(self._fields)}, primary_key={self.primary_key!r})"


EMPTY_SCHEMA = Schema({}, primary_key=None)


def _resolve_type(fieldname: str, type_ref: Any, model_name: str) -> FieldType:
    """Resolves a `type` option given as a FieldType or as a registered name."""
    if isinstance(type_ref, str):
        type_ref = FieldTypes.get(type_ref)
    if isinstance(type_ref, FieldTypeFactory):
        raise SchemaError(
            f"`type` of field '{fieldname}' on {model_name} model is the factory "
            f"'{type_ref.name}': call it with the associated model, e.g. {type_ref.name}(Model)"
        )
    if not isinstance(type_ref, FieldType):
        raise SchemaError(
            f"`type` of field '{fieldname}' on {model_name} model is not a field type: {type_ref!r}"
        )
    return type_ref


def compile_schema(
    raw_fields: Mapping[str, Mapping[str, Any]],
    model_name: str = "anonymous",
    primary_key_required: bool = False,
) -> Schema:
    """
    Compiles a raw field map into a `Schema`.

    Args:
        raw_fields: `fieldname -> {type, primary_key?, default_value?, allow_blank?,
            is_valid?, auto_checked?}`.
        model_name: Name used in error messages.
        primary_key_required: Reject the schema when no primary key is designated.

    Returns:
        Schema: The compiled schema.

    Raises:
        SchemaError: If a field has no `type`, an unknown option, more than one
            field is marked `primary_key`, or a required primary key is missing.
    """
    fields: Dict[str, FieldConfig] = {}
    primary_key: Optional[str] = None

    for fieldname, fieldconf in raw_fields.items():
        if not isinstance(fieldconf, Mapping):
            raise SchemaError(
                f"Field '{fieldname}' of {model_name} model must be a mapping of options"
            )
        # Type is a required param
        if "type" not in fieldconf:
            raise SchemaError(
                f"`type` field attribute is required on '{fieldname}' field of {model_name} model"
            )
        unknown = set(fieldconf) - _FIELD_OPTIONS
        if unknown:
            raise SchemaError(
                f"Unknown options {sorted(unknown)} on '{fieldname}' field of {model_name} model"
            )

        fieldtype = _resolve_type(fieldname, fieldconf["type"], model_name)
        is_primary_key = bool(fieldconf.get("primary_key", False))

        if is_primary_key:
            if primary_key is not None:
                raise SchemaError(
                    f"{model_name} model declares more than one primary key "
                    f"('{primary_key}' and '{fieldname}')"
                )
            primary_key = fieldname

        default_value = (
            as_callable(fieldconf["default_value"], 1)
            if "default_value" in fieldconf
            else fieldtype.default_value
        )
        # Default blank is restricted
        allow_blank = as_callable(fieldconf.get("allow_blank", False), 2)
        # Default valid method is permissive
        is_valid = (
            normalize_callable(fieldconf["is_valid"], 2)
            if fieldconf.get("is_valid") is not None
            else _always_valid
        )
        auto_checked = fieldconf.get("auto_checked")
        if auto_checked is None:
            auto_checked = is_primary_key or fieldname in _AUTO_CHECKED_FIELDNAMES

        fields[fieldname] = FieldConfig(
            name=fieldname,
            type=fieldtype,
            primary_key=is_primary_key,
            default_value=default_value,
            allow_blank=allow_blank,
            is_valid=is_valid,
            auto_checked=bool(auto_checked),
        )

    if primary_key is None:
        if primary_key_required:
            raise SchemaError(f"`primary_key` is missing on {model_name} model")
        log.warning(
            f"`primary_key` field attribute is missing on {model_name} model. "
            "Association equality and collection lookups by key will not work."
        )

    return Schema(fields, primary_key)
