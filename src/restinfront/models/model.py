"""
Model (Entity) Module.

`Model` is the base class of user models. A subclass is registered under its
`__model_name__` (snake_case of the class name by default) and receives its
schema through `define_schema()`:

    class Author(Model):
        pass

    Author.define_schema(
        {
            "id": {"type": FieldTypes.UUID, "primary_key": True},
            "name": {"type": FieldTypes.STRING},
            "books": {"type": FieldTypes.HASMANY("book")},
        },
        endpoint="authors",
    )

Instantiating a model with a mapping builds one entity; instantiating it with
a list or tuple builds a `Collection` of that model:

    author = Author({"name": "Ann"})     # Author entity, is_new=True
    authors = Author([{...}, {...}])     # Collection of Author
"""

import contextvars
import copy
import dataclasses
import json
from types import MappingProxyType
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Mapping,
    Optional,
    Sequence,
    Type,
    Union,
)

from ..enum import HttpMethod
from ..errors import SchemaError, WrongCardinality
from ..helpers import call_hook, camel_to_snake, join_paths
from .config import ClientConfig, ModelDefinition, get_config
from .fetch_state import FetchState, TrackState
from .registry import register_model
from .resource import _Resource
from .schema import EMPTY_SCHEMA, Schema, compile_schema
from .serializer import serialize_entity
from .validator import (
    ErrorTree,
    FieldValidator,
    Selector,
    build_validator,
    get_validation_errors,
)

# Model types whose raw item is being synthesized in the current context.
# A cyclic HasOne/BelongsTo default gets None instead of recursing forever.
_SYNTHESIZING: contextvars.ContextVar[FrozenSet[type]] = contextvars.ContextVar(
    "_SYNTHESIZING", default=frozenset()
)


class Model(_Resource):
    """
    A single entity of a REST resource.

    Field values are reachable as attributes (`entity.name`) and items
    (`entity["name"]`); item access is required for a field whose name is
    shadowed by a method or property of the class (e.g. `entity["save"]`).
    Fields absent from the schema pass through construction unmodified.
    """

    __model_name__: ClassVar[str] = "model"
    __definition__: ClassVar[Optional[ModelDefinition]] = None

    is_collection: ClassVar[bool] = False

    _data: Dict[str, Any]
    _validator: Dict[str, FieldValidator]
    _is_new: bool

    def __init_subclass__(cls, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        # The name must be declared on the class itself, not inherited
        cls.__model_name__ = cls.__dict__.get("__model_name__") or camel_to_snake(
            cls.__name__
        )
        register_model(cls.__model_name__, cls)

    def __new__(
        cls,
        data: Union[Mapping[str, Any], Sequence[Any], None] = None,
        *,
        is_new: bool = True,
        count: Optional[int] = None,
    ):
        if isinstance(data, (list, tuple)):
            # Delayed import to avoid circular dependency
            from .collection import Collection

            return Collection(cls, data, is_new=is_new, count=count)
        return super().__new__(cls)

    def __init__(
        self,
        data: Optional[Mapping[str, Any]] = None,
        *,
        is_new: bool = True,
        count: Optional[int] = None,
    ):
        """
        Builds an entity.

        Args:
            data: The record payload. Missing fields of a new entity get their defaults.
            is_new: False when `data` comes from the server.
            count: Collections only.

        Raises:
            TypeError: If `data` is not a mapping.
            WrongCardinality: If `count` is given for a single entity.
        """
        if count is not None:
            raise WrongCardinality(
                f"count: a total count only applies to a collection of {type(self).__name__}"
            )
        if data is not None and not isinstance(data, Mapping):
            raise TypeError(
                f"{type(self).__name__} expects a mapping (or a list for a collection), "
                f"got {type(data).__name__}"
            )

        schema = self.schema()
        self._is_new = is_new
        self._data = {}
        self._fetch = FetchState(save=TrackState())
        self._validator = build_validator(schema)

        raw_item: Dict[str, Any] = dict(data or {})
        # Build a raw item if it's a new instance
        if is_new and schema:
            raw_item = type(self)._synthesize_raw_item(raw_item)

        # Format existing fields recursively
        for fieldname, value in raw_item.items():
            fieldconf = schema.get(fieldname)
            self._data[fieldname] = (
                fieldconf.type.before_build(value, is_new)
                if fieldconf is not None
                else value
            )

    # --- Registration ---

    @classmethod
    def define_schema(
        cls,
        raw_fields: Mapping[str, Mapping[str, Any]],
        endpoint: Optional[str] = None,
        primary_key_required: bool = False,
        **config_overrides: Any,
    ) -> Type["Model"]:
        """
        Compiles `raw_fields` and attaches the resulting definition to the model.

        Args:
            raw_fields: `fieldname -> field options` (see `compile_schema`).
            endpoint: Path of the model's resource, joined to `base_url`.
            primary_key_required: Reject a schema without a primary key.
            **config_overrides: Per-model `ClientConfig` options (e.g. `base_url`).

        Returns:
            The model class.

        Raises:
            SchemaError: If the schema is malformed or was already defined.
            pydantic.ValidationError: If a config override is unknown or invalid.
        """
        if cls.__dict__.get("__definition__") is not None:
            raise SchemaError(f"The schema of {cls.__name__} model is already defined")

        schema = compile_schema(
            raw_fields,
            model_name=cls.__name__,
            primary_key_required=primary_key_required,
        )
        definition = ModelDefinition(
            schema=schema,
            endpoint=endpoint,
            config_overrides=MappingProxyType(dict(config_overrides)),
        )
        # Fail at registration rather than at the first request
        definition.config
        cls.__definition__ = definition
        return cls

    @classmethod
    def configure(cls, **overrides: Any) -> ClientConfig:
        """
        Merges per-model configuration overrides and returns the effective config.

        Raises:
            pydantic.ValidationError: If an override is unknown or invalid.
        """
        current = cls.__definition__ or ModelDefinition(schema=EMPTY_SCHEMA)
        definition = dataclasses.replace(
            current,
            config_overrides=MappingProxyType(
                {**current.config_overrides, **overrides}
            ),
        )
        effective = definition.config
        cls.__definition__ = definition
        return effective

    @classmethod
    def schema(cls) -> Schema:
        return cls.__definition__.schema if cls.__definition__ else EMPTY_SCHEMA

    @classmethod
    def endpoint(cls) -> Optional[str]:
        return cls.__definition__.endpoint if cls.__definition__ else None

    @classmethod
    def client_config(cls) -> ClientConfig:
        """The effective configuration of this model."""
        return cls.__definition__.config if cls.__definition__ else get_config()

    # --- Raw item synthesis ---

    @classmethod
    def _build_raw_item(
        cls, item: Optional[Mapping[str, Any]] = None, primary_key: Any = None
    ) -> Optional[Dict[str, Any]]:
        """
        Returns the raw item of a new entity: supplied values, defaults elsewhere.

        Used by association defaults. Returns None when this model is already
        being synthesized higher in the stack (cyclic defaults).
        """
        if cls in _SYNTHESIZING.get():
            return None
        return cls._synthesize_raw_item(item or {}, primary_key)

    @classmethod
    def _synthesize_raw_item(
        cls, item: Mapping[str, Any], primary_key: Any = None
    ) -> Dict[str, Any]:
        schema = cls.schema()
        pk_name = schema.primary_key

        token = _SYNTHESIZING.set(_SYNTHESIZING.get() | {cls})
        try:
            if pk_name is not None:
                if primary_key is None or primary_key == "":
                    primary_key = item.get(pk_name)
                if primary_key is None or primary_key == "":
                    primary_key = schema[pk_name].default_value(None)

            raw_item: Dict[str, Any] = {}
            for fieldname, fieldconf in schema.items():
                if fieldname == pk_name:
                    raw_item[fieldname] = primary_key
                elif fieldname in item:
                    raw_item[fieldname] = item[fieldname]
                else:
                    # primary key argument is needed by HASONE defaults
                    raw_item[fieldname] = fieldconf.default_value(primary_key)
        finally:
            _SYNTHESIZING.reset(token)

        # Virtual fields
        for fieldname, value in item.items():
            if fieldname not in raw_item:
                raw_item[fieldname] = value

        return raw_item

    # --- Field access ---

    def __getattr__(self, name: str) -> Any:
        if not name.startswith("_"):
            data = self.__dict__.get("_data")
            if data is not None and name in data:
                return data[name]
        raise AttributeError(
            f"'{type(self).__name__}' object has no attribute or field '{name}'"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        if isinstance(getattr(type(self), name, None), property):
            raise AttributeError(
                f"'{name}' is a read-only property of {type(self).__name__}; "
                f"use item access to set a field of that name"
            )
        self._data[name] = value

    def __getitem__(self, fieldname: str) -> Any:
        return self._data[fieldname]

    def __setitem__(self, fieldname: str, value: Any) -> None:
        self._data[fieldname] = value

    def __contains__(self, fieldname: object) -> bool:
        return fieldname in self._data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r}, is_new={self._is_new})"

    def _model_type(self) -> Type["Model"]:
        return type(self)

    def _participates(self, fieldname: str) -> bool:
        """True if the field is present on the entity and known to its validator."""
        return fieldname in self._data and fieldname in self._validator

    def _primary_key_value(self) -> Any:
        pk_name = self.schema().primary_key
        return self._data.get(pk_name) if pk_name is not None else None

    # --- Entity API ---

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def save_in_progress(self) -> bool:
        return self._fetch.save.in_progress  # type: ignore[union-attr]

    @property
    def save_succeeded(self) -> bool:
        return self._fetch.save.succeeded  # type: ignore[union-attr]

    @property
    def save_failed(self) -> bool:
        return self._fetch.save.failed  # type: ignore[union-attr]

    def has_primary_key(self) -> bool:
        return self._primary_key_value() is not None

    def validation_errors(self, selectors: Sequence[Selector]) -> Optional[ErrorTree]:
        """Validates `selectors` and returns the error tree, or None on success."""
        return get_validation_errors(self, selectors)

    def valid(self, selectors: Sequence[Selector]) -> bool:
        """
        Validates a list of fields, marking them checked.

        Resets the save track. On failure the error tree is passed to the
        `on_validation_error` hook.

        Args:
            selectors: Field names, or `(association_name, nested_selectors | None)`
                pairs to validate inside associations.

        Returns:
            bool: True when no error was found at any depth.

        Raises:
            TypeError: If `selectors` is not a list or contains a malformed selector.
        """
        self._fetch.save.reset()  # type: ignore[union-attr]

        errors = get_validation_errors(self, selectors)
        if errors is None:
            return True

        call_hook(self.client_config().on_validation_error, errors)
        return False

    def error(self, fieldname: str) -> bool:
        """True if the field was checked and its current value is invalid."""
        validator = self._validator.get(fieldname)
        if validator is None or not validator.checked:
            return False
        return not validator.is_valid(self._data.get(fieldname), self)

    def serialize(self, remove_invalid: bool = False) -> Dict[str, Any]:
        return serialize_entity(self, remove_invalid=remove_invalid)

    def to_json(self) -> str:
        return json.dumps(self.serialize())

    def clone(self) -> "Model":
        """
        Returns a deep copy rebuilt from the serialized data.

        Checked flags and virtual fields are carried over, down through
        associations. Fetch state is not.
        """
        schema = type(self).schema()
        copied = type(self)(self.serialize(), is_new=self._is_new)
        for fieldname, validator in self._validator.items():
            copied._validator[fieldname].checked = validator.checked

        for fieldname, value in self._data.items():
            if fieldname not in schema:
                copied._data[fieldname] = copy.deepcopy(value)
            elif schema[fieldname].is_association and isinstance(value, _Resource):
                copied._data[fieldname] = value.clone()
        return copied

    # --- HTTP ---

    async def get(self, path: str) -> None:
        """Retrieves the item at `path` (typically its primary key)."""
        if not isinstance(path, str) or not path:
            raise TypeError("get: a non-empty string path is required on a single item")
        await self.fetch(HttpMethod.GET, path)

    async def post(self, path: str = "") -> None:
        """Creates the item."""
        await self.fetch(HttpMethod.POST, path)

    async def put(self, path: str = "") -> None:
        """Updates the item, addressed by its primary key."""
        await self.fetch(HttpMethod.PUT, join_paths(self._primary_key_value(), path))

    async def patch(self, path: str = "") -> None:
        """Partially updates the item, addressed by its primary key."""
        await self.fetch(HttpMethod.PATCH, join_paths(self._primary_key_value(), path))

    async def save(self, path: str = "") -> None:
        """Creates the item if it is new, updates it otherwise."""
        if self._is_new:
            await self.post(path)
        else:
            await self.put(path)
