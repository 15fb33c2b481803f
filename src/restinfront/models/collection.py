"""
Collection Module.

A `Collection` is an ordered list of entities of one model type plus a total
count. The total count is the server-reported grand total and may exceed the
number of materialized items when the collection is a page of a larger result:

    len(collection) <= collection.total_count

`has_more` tells whether further pages can be loaded with `get_more()`.
"""

import json
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    ClassVar,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Type,
    Union,
)

from ..enum import HttpMethod
from ..errors import SchemaError
from .fetch_state import FetchState
from .resource import _Resource
from .serializer import serialize_collection

if TYPE_CHECKING:
    from .model import Model

# A predicate, a primary-key value, or an object carrying the primary key
ItemRef = Union[Callable[[Any], bool], Mapping[str, Any], "Model", Any]

DEFAULT_PAGE_LIMIT = 20


class Collection(_Resource):
    """
    An ordered collection of entities of `model`.

    Args:
        model: The model type of the items.
        data: Initial items (mappings or `model` instances), added in order.
        is_new: Construction flag passed to items built from mappings.
        count: Server-reported total count, applied after the items are added.
    """

    is_collection: ClassVar[bool] = True

    def __init__(
        self,
        model: Type["Model"],
        data: Iterable[Any] = (),
        *,
        is_new: bool = True,
        count: Optional[int] = None,
    ):
        self.model = model
        self._items: List["Model"] = []
        self._count = 0
        self._is_new = is_new
        self._fetch = FetchState()

        for item in data:
            self.add(item)

        # Explicit total count overrides the running count
        self._explicit_count = count
        if count is not None:
            self._count = max(int(count), len(self._items))

    def __repr__(self) -> str:
        return (
            f"Collection({self.model.__name__}, items={len(self._items)}, "
            f"total_count={self._count})"
        )

    def _model_type(self) -> Type["Model"]:
        return self.model

    # --- Sequence protocol ---

    def items(self) -> List["Model"]:
        """A shallow copy of the items list."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator["Model"]:
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    @property
    def last(self) -> Optional["Model"]:
        return self._items[-1] if self._items else None

    @property
    def is_empty(self) -> bool:
        return len(self._items) == 0

    @property
    def total_count(self) -> int:
        return self._count

    @property
    def has_more(self) -> bool:
        """The collection can be extended with more items."""
        return len(self._items) < self._count

    # --- Lookup ---

    def _collection_callback(self, ref: ItemRef) -> Callable[[Any], bool]:
        """
        Resolves `ref` into a predicate over items.

        A callable is used unchanged; an entity or a mapping matches on equal
        primary keys; any other value is compared to the item primary key.
        """
        if callable(ref) and not isinstance(ref, _Resource):
            return ref

        pk_name = self.model.schema().primary_key
        if pk_name is None:
            raise SchemaError(
                f"{self.model.__name__} model has no primary key: "
                "items can only be looked up with a predicate"
            )

        if isinstance(ref, _Resource):
            expected = ref._primary_key_value()  # type: ignore[attr-defined]
        elif isinstance(ref, Mapping):
            expected = ref.get(pk_name)
        else:
            expected = ref

        return lambda item: item._primary_key_value() == expected

    def find(self, ref: ItemRef) -> Optional["Model"]:
        """Returns the first matching item, or None."""
        predicate = self._collection_callback(ref)
        return next((item for item in self._items if predicate(item)), None)

    def exists(self, ref: ItemRef) -> bool:
        predicate = self._collection_callback(ref)
        return any(predicate(item) for item in self._items)

    def is_last(self, ref: ItemRef) -> bool:
        """True if `ref` designates the last item."""
        if not self._items:
            return False
        return self._collection_callback(ref)(self._items[-1])

    # --- Mutation ---

    def add(self, item: Union[Mapping[str, Any], "Model", None] = None) -> "Model":
        """
        Appends an item and increments the total count.

        Args:
            item: A `model` instance, used as is, or a mapping a new instance is built from.

        Returns:
            The appended instance.
        """
        if not isinstance(item, self.model):
            if item is not None and not isinstance(item, Mapping):
                raise TypeError(
                    f"add: expected a mapping or a {self.model.__name__} instance, "
                    f"got {type(item).__name__}"
                )
            item = self.model(item, is_new=self._is_new)

        self._items.append(item)
        self._count += 1
        return item

    def remove(self, ref: ItemRef) -> Optional["Model"]:
        """
        Removes the first matching item and decrements the total count.

        Returns:
            The removed item, or None when nothing matched.
        """
        predicate = self._collection_callback(ref)
        for index, item in enumerate(self._items):
            if predicate(item):
                del self._items[index]
                self._count -= 1
                return item
        return None

    def toggle(
        self, item: Union[Mapping[str, Any], "Model"], ref: Optional[ItemRef] = None
    ) -> Optional["Model"]:
        """Removes the item (matched by `ref`, or by `item` itself) if present, adds it otherwise."""
        lookup = ref if ref is not None else item
        if self.exists(lookup):
            return self.remove(lookup)
        return self.add(item)

    def clear(self) -> None:
        """Removes every item. The total count is left untouched."""
        self._items.clear()

    def sort(self, key: Optional[Callable[["Model"], Any]] = None, reverse: bool = False) -> None:
        """Sorts the items in place."""
        self._items.sort(key=key, reverse=reverse)  # type: ignore[arg-type]

    def filter(self, predicate: Callable[["Model"], bool]) -> List["Model"]:
        return [item for item in self._items if predicate(item)]

    def map(self, fn: Callable[["Model"], Any]) -> List[Any]:
        return [fn(item) for item in self._items]

    # --- Serialization ---

    def serialize(self, remove_invalid: bool = False) -> List[Dict[str, Any]]:
        return serialize_collection(self, remove_invalid=remove_invalid)

    def to_json(self) -> str:
        return json.dumps(self.serialize())

    def clone(self) -> "Collection":
        """Returns a collection of cloned items with the same total count."""
        return Collection(
            self.model,
            [item.clone() for item in self._items],
            is_new=self._is_new,
            count=self._count,
        )

    # --- HTTP ---

    async def get(
        self,
        path: Union[str, Mapping[str, Any]] = "",
        search_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Retrieves a page of the collection, replacing the current items.

        `limit` and `offset` default to 20 and 0. A mapping given as `path`
        is taken as the search parameters.
        """
        if isinstance(path, Mapping):
            search_params, path = path, ""

        params: Dict[str, Any] = dict(search_params or {})
        params.setdefault("limit", DEFAULT_PAGE_LIMIT)
        params.setdefault("offset", 0)

        await self.fetch(HttpMethod.GET, path, params, extend=False)

    async def get_more(self) -> None:
        """
        Loads the next page and appends it to the current items.

        Raises:
            RuntimeError: If no page was requested with `get()` before.
        """
        options = self._fetch.options
        if options is None or options.method != HttpMethod.GET:
            raise RuntimeError("get_more: `get()` must be called on the collection first")

        params: Dict[str, Any] = dict(options.search_params or {})
        limit = params.get("limit", DEFAULT_PAGE_LIMIT)
        params["limit"] = limit
        params["offset"] = params.get("offset", 0) + limit

        await self.fetch(HttpMethod.GET, options.path, params, extend=True)
