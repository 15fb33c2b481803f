from .field_types import (
    FieldType as FieldType,
    AssociationFieldType as AssociationFieldType,
    FieldTypeFactory as FieldTypeFactory,
    FieldTypes as FieldTypes,
)
from .schema import (
    FieldConfig as FieldConfig,
    Schema as Schema,
    compile_schema as compile_schema,
)
from .registry import (
    LazyModelRef as LazyModelRef,
    get_model as get_model,
)
from .config import (
    ClientConfig as ClientConfig,
    ModelDefinition as ModelDefinition,
    configure as configure,
    get_config as get_config,
)
from .validator import (
    FieldError as FieldError,
    ErrorTree as ErrorTree,
)
from .fetch_state import (
    FetchOptions as FetchOptions,
    FetchState as FetchState,
    TrackState as TrackState,
)
from .model import Model as Model
from .collection import Collection as Collection
from .patch import apply_patch as apply_patch
