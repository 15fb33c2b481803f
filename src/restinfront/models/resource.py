"""
Resource Base Module.

`_Resource` is the capability interface shared by the two concrete shapes of
model data, the entity (`Model`) and the `Collection`. It holds the fetch
state accessors and the generic `fetch()` entry point.

Operations that only make sense on one shape are declared here with a
default that raises `WrongCardinality`; the concrete class of the right shape
overrides them. Calling `entity.add(...)` or `collection.save()` is therefore a
programming error reported at the call site.
"""

from typing import TYPE_CHECKING, Any, ClassVar, Dict, Optional, Type

from ..enum import HttpMethod
from ..errors import WrongCardinality
from .fetch_state import FetchOptions, FetchState

if TYPE_CHECKING:
    from .model import Model


def _collection_only(name: str):
    def _deny(self, *args: Any, **kwargs: Any) -> Any:
        raise WrongCardinality(
            f"{name}: this operation is only available on a collection, "
            f"not on a single {type(self).__name__} item"
        )

    _deny.__name__ = name
    return _deny


def _entity_only(name: str):
    def _deny(self, *args: Any, **kwargs: Any) -> Any:
        raise WrongCardinality(
            f"{name}: this operation is only available on a single item, "
            f"not on a collection of {self.model.__name__}"
        )

    _deny.__name__ = name
    return _deny


class _Resource:
    """Shared base of `Model` (single entity) and `Collection`."""

    is_collection: ClassVar[bool] = False

    _fetch: FetchState

    # --- Fetch state accessors ---

    @property
    def state(self) -> FetchState:
        return self._fetch

    @property
    def fetch_in_progress(self) -> bool:
        return self._fetch.get.in_progress

    @property
    def fetch_succeeded_once(self) -> bool:
        return self._fetch.get.succeeded_once

    @property
    def fetch_succeeded(self) -> bool:
        return self._fetch.get.succeeded

    @property
    def fetch_failed(self) -> bool:
        return self._fetch.get.failed

    def _model_type(self) -> Type["Model"]:
        raise NotImplementedError

    # --- HTTP ---

    async def fetch(
        self,
        method: HttpMethod = HttpMethod.GET,
        path: str = "",
        search_params: Optional[Dict[str, Any]] = None,
        extend: bool = False,
    ) -> None:
        """
        Issues one request and merges the response into this instance in place.

        Failures do not propagate: they are routed to the `on_fetch_error` hook
        and recorded on the instance state (`fetch_failed` / `save_failed`).

        Raises:
            ConfigurationError: If `base_url` or the model endpoint is missing.
            WrongCardinality: If a mutating method is used on a collection.
        """
        # Delayed import to avoid circular dependency
        from ..comm.fetch import perform_fetch

        await perform_fetch(
            self,
            FetchOptions(
                method=HttpMethod(method),
                path=path,
                search_params=search_params,
                extend=extend,
            ),
        )

    # --- Collection-only operations ---
    items = _collection_only("items")
    add = _collection_only("add")
    remove = _collection_only("remove")
    find = _collection_only("find")
    exists = _collection_only("exists")
    toggle = _collection_only("toggle")
    is_last = _collection_only("is_last")
    clear = _collection_only("clear")
    sort = _collection_only("sort")
    filter = _collection_only("filter")
    map = _collection_only("map")
    get_more = _collection_only("get_more")
    last = property(_collection_only("last"))
    is_empty = property(_collection_only("is_empty"))
    has_more = property(_collection_only("has_more"))
    total_count = property(_collection_only("total_count"))

    # --- Entity-only operations ---
    valid = _entity_only("valid")
    error = _entity_only("error")
    validation_errors = _entity_only("validation_errors")
    has_primary_key = _entity_only("has_primary_key")
    post = _entity_only("post")
    put = _entity_only("put")
    patch = _entity_only("patch")
    save = _entity_only("save")
    is_new = property(_entity_only("is_new"))
    save_in_progress = property(_entity_only("save_in_progress"))
    save_succeeded = property(_entity_only("save_succeeded"))
    save_failed = property(_entity_only("save_failed"))
