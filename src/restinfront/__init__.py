from .enum import (
    AssociationKind as AssociationKind,
    ErrorCode as ErrorCode,
    HttpMethod as HttpMethod,
)

from .errors import (
    RestinfrontError as RestinfrontError,
    SchemaError as SchemaError,
    UnknownFieldType as UnknownFieldType,
    WrongCardinality as WrongCardinality,
    ConfigurationError as ConfigurationError,
    FetchError as FetchError,
    FetchTimeoutError as FetchTimeoutError,
)

from .helpers import (
    camel_to_snake as camel_to_snake,
)

from .models import (
    ClientConfig as ClientConfig,
    Collection as Collection,
    ErrorTree as ErrorTree,
    FieldError as FieldError,
    FieldTypes as FieldTypes,
    FetchState as FetchState,
    Model as Model,
    apply_patch as apply_patch,
    configure as configure,
    get_config as get_config,
)

from .comm import (
    HttpxTransport as HttpxTransport,
    RequestInit as RequestInit,
)

# useful to do like: `from restinfront import Model`
__all__ = [
    "AssociationKind",
    "ErrorCode",
    "HttpMethod",
    "RestinfrontError",
    "SchemaError",
    "UnknownFieldType",
    "WrongCardinality",
    "ConfigurationError",
    "FetchError",
    "FetchTimeoutError",
    "camel_to_snake",
    "ClientConfig",
    "Collection",
    "ErrorTree",
    "FieldError",
    "FieldTypes",
    "FetchState",
    "Model",
    "apply_patch",
    "configure",
    "get_config",
    "HttpxTransport",
    "RequestInit",
]
