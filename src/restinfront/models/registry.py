"""
Model Registry Module.

Every `Model` subclass is registered here under a name (its
`__model_name__`, derived from the class name when not given). Association
field types refer to their peer model through a `LazyModelRef`, resolved on
first use, so two models may reference each other regardless of which one is
defined first.
"""

from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Type, Union

if TYPE_CHECKING:
    from .model import Model

# --- Private Registry ---
# Global dictionary mapping model names (e.g., "blog_post") to class types.
_MODEL_REGISTRY: Dict[str, Type["Model"]] = {}


def register_model(name: str, model_cls: Type["Model"]) -> None:
    """
    Registers a model class under `name`.

    Raises:
        ValueError: If another class is already registered under the same name.
    """
    registered = _MODEL_REGISTRY.get(name)
    if registered is not None and registered is not model_cls:
        raise ValueError(
            f"Duplicate model name '{name}' detected "
            f"(already registered for {registered.__qualname__})"
        )
    _MODEL_REGISTRY[name] = model_cls


def get_model(name: str) -> Optional[Type["Model"]]:
    """Retrieves the model class registered under `name`, or None."""
    return _MODEL_REGISTRY.get(name)


def list_registered() -> List[str]:
    """Returns the names of all registered models."""
    return list(_MODEL_REGISTRY.keys())


ModelReference = Union[str, Type["Model"], Callable[[], Type["Model"]]]


class LazyModelRef:
    """
    A deferred binding cell pointing to a model class.

    The reference may be the class itself, a registered model name, or a
    zero-argument callable returning the class. It is resolved the first time
    `resolve()` is called and cached afterwards.
    """

    def __init__(self, reference: ModelReference):
        self._reference = reference
        self._resolved: Optional[Type["Model"]] = (
            reference if isinstance(reference, type) else None
        )

    def resolve(self) -> Type["Model"]:
        """
        Returns the referenced model class.

        Raises:
            LookupError: If a name reference is not registered.
        """
        if self._resolved is None:
            if isinstance(self._reference, str):
                model_cls = get_model(self._reference)
                if model_cls is None:
                    raise LookupError(
                        f"No model registered with name '{self._reference}'. "
                        f"Available models: {list_registered()}"
                    )
            else:
                model_cls = self._reference()
            self._resolved = model_cls
        return self._resolved

    def __repr__(self) -> str:
        if self._resolved is not None:
            return f"LazyModelRef({self._resolved.__qualname__})"
        return f"LazyModelRef({self._reference!r}, unresolved)"
