"""
In-place Merge Module.

`apply_patch()` merges a freshly built resource into a live one without
replacing the live object, so code holding a reference to it (or to any
entity nested in its associations) observes the update.
"""

from typing import Any

from ..errors import WrongCardinality


def _is_resource(value: Any) -> bool:
    return hasattr(value, "is_collection")


def apply_patch(target: Any, source: Any, extend: bool = False) -> None:
    """
    Merges `source` into `target` in place.

    Collections: with `extend`, the items of `source` are appended to `target`
    and the server total of `source` is adopted when it carried one; without
    it, `target` adopts the items and the total count of `source`.

    Entities: every field of `source` is copied onto `target`, except that a
    field holding a resource on both sides is merged recursively. Of the
    bookkeeping state only the `is_new` flag is carried over; fetch state and
    validator of `target` are kept.

    Raises:
        WrongCardinality: If `target` and `source` do not have the same shape.
    """
    if target.is_collection != source.is_collection:
        raise WrongCardinality(
            "apply_patch: cannot merge a collection into a single item or vice versa"
        )

    if source.is_collection:
        if extend:
            for item in source:
                target.add(item)
            if source._explicit_count is not None:
                target._count = max(source.total_count, len(target))
        else:
            target._items = list(source)
            target._count = source.total_count
        return

    for fieldname, value in source._data.items():
        current = target._data.get(fieldname)
        # Recursive merge keeps nested references alive
        if (
            _is_resource(current)
            and _is_resource(value)
            and current.is_collection == value.is_collection
        ):
            apply_patch(current, value)
        else:
            target._data[fieldname] = value

    target._is_new = source._is_new
