"""
Configuration Module.

This module defines the configuration structures controlling how models talk to
the REST API: where requests go, how they are authenticated, which hooks receive
failures, and the shape of paginated collection envelopes.

A process-wide `ClientConfig` is set with `configure()`. Each model type holds an
immutable `ModelDefinition` (its compiled schema, endpoint and per-model config
overrides); the effective configuration is the process-wide one updated with
those overrides, resolved each time it is needed.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

import pydantic
from pydantic import ConfigDict, Field

from .schema import Schema

DEFAULT_TIMEOUT_SEC = 20.0
DEFAULT_COLLECTION_DATA_KEY = "rows"
DEFAULT_COLLECTION_COUNT_KEY = "count"


class ClientConfig(pydantic.BaseModel):
    """
    Connection and hook settings shared by models.

    Attributes:
        base_url (str): Prefix of every request URL.
        authentication (Optional[Callable]): Token provider, sync or async. When set,
            requests carry `Authorization: Bearer <token>`.
        on_validation_error (Optional[Callable]): `(error_tree) -> None`, called when `valid()` fails.
        on_fetch_error (Optional[Callable]): `(error=..., response=...) -> None`, called on a failed request.
        transport (Optional[Callable]): `async (url, init) -> response`. Defaults to `HttpxTransport`.
        collection_data_key (str): Records key of a paginated envelope.
        collection_count_key (str): Total-count key of a paginated envelope.
        timeout (float): Seconds before an outstanding request is cancelled.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", arbitrary_types_allowed=True
    )

    base_url: str = ""
    authentication: Optional[Callable[[], Any]] = None
    on_validation_error: Optional[Callable[..., Any]] = None
    on_fetch_error: Optional[Callable[..., Any]] = None
    transport: Optional[Callable[..., Any]] = None
    collection_data_key: str = DEFAULT_COLLECTION_DATA_KEY
    collection_count_key: str = DEFAULT_COLLECTION_COUNT_KEY
    timeout: float = Field(default=DEFAULT_TIMEOUT_SEC, gt=0)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ClientConfig":
        """Returns a validated copy with `overrides` applied."""
        if not overrides:
            return self
        return ClientConfig.model_validate({**self.model_dump(), **overrides})


# --- Process-wide configuration ---
_GLOBAL_CONFIG = ClientConfig()


def configure(**options: Any) -> ClientConfig:
    """
    Replaces the process-wide configuration.

    Options not given take their default value (they are not merged with the
    previous configuration).

    Raises:
        pydantic.ValidationError: If an option is unknown or has a wrong type.
    """
    global _GLOBAL_CONFIG
    _GLOBAL_CONFIG = ClientConfig(**options)
    return _GLOBAL_CONFIG


def get_config() -> ClientConfig:
    """Returns the current process-wide configuration."""
    return _GLOBAL_CONFIG


@dataclass(frozen=True)
class ModelDefinition:
    """
    Registration data attached to a model type by `Model.define_schema()`.

    Attributes:
        schema (Schema): The compiled schema.
        endpoint (Optional[str]): Path of the model's resource, joined to `base_url`.
        config_overrides (Mapping): Per-model `ClientConfig` overrides.
    """

    schema: Schema
    endpoint: Optional[str] = None
    config_overrides: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def config(self) -> ClientConfig:
        """The effective configuration: process-wide settings plus overrides."""
        return get_config().with_overrides(self.config_overrides)
