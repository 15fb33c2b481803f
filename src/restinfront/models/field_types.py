"""
Field Type Registry Module.

A field type describes how one schema field's raw (wire) value and its domain
value relate: how a default is produced, when the value counts as blank, when
it is valid, and how it is coerced on build and on serialize.

It implements a **Registry Pattern**:
1.  **Presets**: Scalar types (STRING, DATE, INTEGER, ...) are registered at import.
2.  **Factories**: Association types (HASMANY, HASONE, BELONGSTO) are factories
    taking the peer model (class, registered name, or zero-argument callable)
    and returning an `AssociationFieldType` bound to it through a lazy cell.
3.  **Access**: Registered types are reachable as `FieldTypes.STRING` or
    `FieldTypes.get("STRING")`.
"""

import dataclasses
import datetime
import math
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Union

from ..enum import AssociationKind
from ..errors import UnknownFieldType
from ..helpers import (
    as_callable,
    is_email,
    is_file,
    is_ip,
    is_url,
    normalize_callable,
    parse_date_only,
    parse_datetime,
    sanitize_phone,
    to_iso_string,
)
from .registry import LazyModelRef, ModelReference


def _identity(value: Any, *_args: Any) -> Any:
    return value


@dataclass(frozen=True, kw_only=True, eq=False)
class FieldType:
    """
    A scalar field type descriptor.

    Attributes:
        name (str): The registry name.
        default_value (Callable): `(primary_key) -> value`, the fresh value of the field.
        is_blank (Callable): `(value) -> bool`.
        is_valid (Callable): `(value) -> bool`, type-level validity of a non-blank value.
        before_build (Callable): `(raw, is_new) -> value`, raw payload -> domain value.
        before_serialize (Callable): `(value, remove_invalid) -> raw`, domain value -> payload.
    """

    name: str
    default_value: Callable[[Any], Any] = field(repr=False)
    is_blank: Callable[[Any], bool] = field(repr=False)
    is_valid: Callable[[Any], bool] = field(repr=False)
    before_build: Callable[[Any, bool], Any] = field(default=_identity, repr=False)
    before_serialize: Callable[[Any, bool], Any] = field(
        default=_identity, repr=False
    )

    @property
    def is_association(self) -> bool:
        return False


@dataclass(frozen=True, kw_only=True, eq=False)
class AssociationFieldType(FieldType):
    """
    A field type bound to a peer model.

    Attributes:
        kind (AssociationKind): HasMany, HasOne or BelongsTo.
        model_ref (LazyModelRef): Deferred reference to the associated model class.
    """

    kind: AssociationKind
    model_ref: LazyModelRef

    @property
    def is_association(self) -> bool:
        return True

    @property
    def model(self):
        """The associated model class (resolved on first access)."""
        return self.model_ref.resolve()


# --- Hook normalization ---

_HOOK_ARITY = {
    "default_value": 1,
    "is_blank": 1,
    "is_valid": 1,
    "before_build": 2,
    "before_serialize": 2,
}
_REQUIRED_HOOKS = ("default_value", "is_blank", "is_valid")


def _normalize_hooks(hooks: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validates hook names and coerces them to callables of the expected arity.

    `default_value` may be a constant; every other hook must be callable.
    """
    unknown = set(hooks) - set(_HOOK_ARITY)
    if unknown:
        raise TypeError(f"Unknown field type hooks: {sorted(unknown)}")

    normalized: Dict[str, Any] = {}
    for hook, value in hooks.items():
        if hook == "default_value":
            normalized[hook] = as_callable(value, _HOOK_ARITY[hook])
        elif not callable(value):
            raise TypeError(f"Field type hook '{hook}' must be callable")
        else:
            normalized[hook] = normalize_callable(value, _HOOK_ARITY[hook])
    return normalized


def make_field_type(name: str, hooks: Mapping[str, Any]) -> FieldType:
    """
    Creates a scalar `FieldType` from a hook mapping.

    Raises:
        TypeError: If a required hook is missing or a hook is not callable.
    """
    missing = [hook for hook in _REQUIRED_HOOKS if hook not in hooks]
    if missing:
        raise TypeError(f"Field type '{name}' is missing required hooks: {missing}")
    return FieldType(name=name, **_normalize_hooks(hooks))


class FieldTypeFactory:
    """
    A registered factory of field types (e.g. association types).

    Calling the factory builds a field type from the given arguments, then
    applies any hooks set through `FieldTypes.override()`.
    """

    def __init__(
        self,
        name: str,
        build: Callable[..., Union[FieldType, Mapping[str, Any]]],
        overrides: Optional[Mapping[str, Any]] = None,
    ):
        self.name = name
        self._build = build
        self._overrides: Dict[str, Any] = dict(overrides or {})

    def __call__(self, *args: Any, **kwargs: Any) -> FieldType:
        built = self._build(*args, **kwargs)
        if not isinstance(built, FieldType):
            built = make_field_type(self.name, built)
        if self._overrides:
            built = dataclasses.replace(built, **self._overrides)
        return built

    def with_overrides(self, hooks: Mapping[str, Any]) -> "FieldTypeFactory":
        return FieldTypeFactory(
            self.name, self._build, {**self._overrides, **_normalize_hooks(hooks)}
        )

    def __repr__(self) -> str:
        return f"FieldTypeFactory({self.name})"


FieldTypeDescriptor = Union[FieldType, FieldTypeFactory]


# --- Registry ---


class FieldTypes:
    """
    Registry of named field types.

    Registered names are also exposed as class attributes, so schemas can be
    written as `{"name": {"type": FieldTypes.STRING}}` or
    `{"books": {"type": FieldTypes.HASMANY("book")}}`.
    """

    _registry: ClassVar[Dict[str, FieldTypeDescriptor]] = {}

    @classmethod
    def register(
        cls,
        name: str,
        descriptor: Union[Mapping[str, Any], FieldType, Callable[..., Any]],
    ) -> FieldTypeDescriptor:
        """
        Registers (or replaces) a named field type.

        Args:
            name (str): The registry name (e.g., "SLUG").
            descriptor: A hook mapping (`default_value`, `is_blank`, `is_valid`,
                optional `before_build` / `before_serialize`), a ready `FieldType`,
                or a factory callable returning either of them.

        Returns:
            The registered `FieldType` or `FieldTypeFactory`.
        """
        if not isinstance(name, str) or not name:
            raise TypeError("Field type name must be a non-empty string")

        registered: FieldTypeDescriptor
        if isinstance(descriptor, (FieldType, FieldTypeFactory)):
            registered = descriptor
        elif isinstance(descriptor, Mapping):
            registered = make_field_type(name, descriptor)
        elif callable(descriptor):
            registered = FieldTypeFactory(name, descriptor)
        else:
            raise TypeError(
                f"Invalid descriptor for field type '{name}': {type(descriptor).__name__}"
            )

        cls._registry[name] = registered
        setattr(cls, name, registered)
        return registered

    @classmethod
    def override(cls, name: str, hooks: Mapping[str, Any]) -> FieldTypeDescriptor:
        """
        Shallow-merges `hooks` into an already registered field type.

        Schemas compiled before the override keep the previous descriptor.

        Raises:
            UnknownFieldType: If `name` was never registered.
        """
        if name not in cls._registry:
            raise UnknownFieldType(
                f"override: the field type '{name}' you are trying to override does not exist"
            )

        current = cls._registry[name]
        if isinstance(current, FieldTypeFactory):
            updated: FieldTypeDescriptor = current.with_overrides(hooks)
        else:
            updated = dataclasses.replace(current, **_normalize_hooks(hooks))

        cls._registry[name] = updated
        setattr(cls, name, updated)
        return updated

    @classmethod
    def get(cls, name: str) -> FieldTypeDescriptor:
        """
        Raises:
            UnknownFieldType: If `name` was never registered.
        """
        if name not in cls._registry:
            raise UnknownFieldType(
                f"No field type registered with name '{name}'. "
                f"Available types: {cls.list_registered()}"
            )
        return cls._registry[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._registry

    @classmethod
    def list_registered(cls) -> List[str]:
        return list(cls._registry.keys())


# --- Scalar coercions ---

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _parse_int(value: Any) -> Optional[int]:
    """Leading-integer parsing: '12px' -> 12, 7.9 -> 7, 'abc' -> None."""
    if _is_number(value):
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX_RE.match(value)
        if match:
            return int(match.group(1))
    return None


def _parse_float(value: Any) -> Optional[float]:
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        match = _FLOAT_PREFIX_RE.match(value)
        if match:
            return float(match.group(1))
    return None


def _is_text_blank(value: Any) -> bool:
    return value is None or value == ""


def _serialize_phone(value: Any) -> Any:
    return sanitize_phone(value) if isinstance(value, str) else value


def _serialize_date_only(value: Any) -> Optional[str]:
    # the local calendar day, never shifted to UTC
    date_value = parse_date_only(value)
    return date_value.isoformat() if date_value is not None else None


def _serialize_datetime(value: Any) -> Optional[str]:
    if isinstance(value, datetime.datetime):
        return to_iso_string(value)
    return None


_ADDRESS_KEYS = ("number", "route", "postcode", "city")


def _is_address_blank(value: Any) -> bool:
    return (
        not value
        or value.get("route") == ""
        or value.get("postcode") == ""
        or value.get("city") == ""
    )


_SCALAR_PRESETS: Dict[str, Dict[str, Any]] = {
    # String
    "STRING": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str),
    },
    "UUID": {
        "default_value": lambda: str(uuid.uuid4()),
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str),
    },
    "EMAIL": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str) and is_email(value),
    },
    "PHONE": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str),
        "before_serialize": _serialize_phone,
    },
    "URL": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str) and is_url(value),
    },
    "FILE": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str) and is_file(value),
    },
    "IP": {
        "default_value": "",
        "is_blank": _is_text_blank,
        "is_valid": lambda value: isinstance(value, str) and is_ip(value),
    },
    # Boolean
    "BOOLEAN": {
        "default_value": None,
        "is_blank": lambda value: value is None,
        "is_valid": lambda value: isinstance(value, bool),
    },
    # Number
    "INTEGER": {
        "default_value": None,
        "is_blank": lambda value: value is None,
        "is_valid": lambda value: _is_number(value)
        and isinstance(value, int)
        and value >= 0,
        "before_build": _parse_int,
    },
    "FLOAT": {
        "default_value": None,
        "is_blank": lambda value: value is None,
        "is_valid": lambda value: _is_number(value) and value >= 0,
        "before_build": _parse_float,
    },
    # Date
    "DATEONLY": {
        "default_value": None,
        "is_blank": lambda value: value is None,
        "is_valid": lambda value: isinstance(value, datetime.date),
        "before_build": parse_date_only,
        "before_serialize": _serialize_date_only,
    },
    "DATE": {
        "default_value": None,
        "is_blank": lambda value: value is None,
        "is_valid": lambda value: isinstance(value, datetime.datetime),
        "before_build": parse_datetime,
        "before_serialize": _serialize_datetime,
    },
    # Object
    "OBJECT": {
        "default_value": lambda: {},
        "is_blank": lambda value: not value,
        "is_valid": lambda value: isinstance(value, dict),
    },
    "ADDRESS": {
        "default_value": lambda: {
            "number": "",
            "route": "",
            "postcode": "",
            "city": "",
            "latitude": "",
            "longitude": "",
        },
        "is_blank": _is_address_blank,
        "is_valid": lambda value: isinstance(value, dict)
        and all(key in value for key in _ADDRESS_KEYS),
    },
    # Array
    "ARRAY": {
        "default_value": lambda: [],
        "is_blank": lambda value: value is None or len(value) == 0,
        "is_valid": lambda value: isinstance(value, list),
    },
}


# --- Association factories ---


def _is_resource(value: Any) -> bool:
    return hasattr(value, "is_collection")


def _build_association(ref: LazyModelRef):
    def _before_build(value: Any, is_new: bool) -> Any:
        if value is None:
            return None
        if _is_resource(value):
            return value
        return ref.resolve()(value, is_new=is_new)

    return _before_build


def _serialize_association(value: Any, remove_invalid: bool) -> Any:
    if _is_resource(value):
        return value.serialize(remove_invalid=remove_invalid)
    return None


def _is_entity_reference(ref: LazyModelRef):
    def _is_valid(value: Any) -> bool:
        return isinstance(value, ref.resolve()) and value.has_primary_key()

    return _is_valid


def _has_many(model: ModelReference) -> AssociationFieldType:
    ref = LazyModelRef(model)

    def _is_valid(value: Any) -> bool:
        return (
            _is_resource(value)
            and value.is_collection
            and issubclass(value.model, ref.resolve())
        )

    return AssociationFieldType(
        name="HASMANY",
        kind=AssociationKind.HasMany,
        model_ref=ref,
        default_value=lambda primary_key=None: [],
        is_blank=lambda value: value is None or len(value) == 0,
        is_valid=_is_valid,
        before_build=_build_association(ref),
        before_serialize=_serialize_association,
    )


def _has_one(model: ModelReference) -> AssociationFieldType:
    ref = LazyModelRef(model)
    return AssociationFieldType(
        name="HASONE",
        kind=AssociationKind.HasOne,
        model_ref=ref,
        # the owned record shares the owner's primary key
        default_value=lambda primary_key=None: ref.resolve()._build_raw_item(
            primary_key=primary_key
        ),
        is_blank=lambda value: value is None,
        is_valid=_is_entity_reference(ref),
        before_build=_build_association(ref),
        before_serialize=_serialize_association,
    )


def _belongs_to(model: ModelReference) -> AssociationFieldType:
    ref = LazyModelRef(model)
    return AssociationFieldType(
        name="BELONGSTO",
        kind=AssociationKind.BelongsTo,
        model_ref=ref,
        default_value=lambda primary_key=None: ref.resolve()._build_raw_item(),
        is_blank=lambda value: value is None,
        is_valid=_is_entity_reference(ref),
        before_build=_build_association(ref),
        before_serialize=_serialize_association,
    )


for _name, _hooks in _SCALAR_PRESETS.items():
    FieldTypes.register(_name, _hooks)

FieldTypes.register("HASMANY", _has_many)
FieldTypes.register("HASONE", _has_one)
FieldTypes.register("BELONGSTO", _belongs_to)
