"""
Serialization Module.

Converts a live entity or collection back into a plain, JSON-transmittable tree.

An entity is serialized by iterating its validator table rather than its raw
data, so the serialized field set is exactly the set of fields taking part in
validation. With `remove_invalid`, a field is kept only when it was checked and
is currently valid, which is the body sent by mutating requests.
"""

from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from .collection import Collection
    from .model import Model


def serialize_entity(entity: "Model", remove_invalid: bool = False) -> Dict[str, Any]:
    schema = entity.schema()
    serialized: Dict[str, Any] = {}

    for fieldname, validator in entity._validator.items():
        if not entity._participates(fieldname):
            continue
        value = entity[fieldname]
        if remove_invalid and not (
            validator.checked and validator.is_valid(value, entity)
        ):
            continue
        serialized[fieldname] = schema[fieldname].type.before_serialize(
            value, remove_invalid
        )

    return serialized


def serialize_collection(
    collection: "Collection", remove_invalid: bool = False
) -> List[Dict[str, Any]]:
    return [item.serialize(remove_invalid=remove_invalid) for item in collection]
