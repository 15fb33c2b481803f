"""
Validation Module.

Each entity owns a validator table (`fieldname -> FieldValidator`) built from
its model's schema at construction time. A field validator records whether the
field was *checked* (took part in at least one validation pass) and evaluates
the field's validity rule against the owning entity:

    (blank and blank allowed) or (not blank and type-level valid)
    AND schema-level custom validity

`get_validation_errors()` evaluates a list of field selectors and returns an
error tree, descending into associations when nested selectors are given.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Union

from ..enum import AssociationKind, ErrorCode
from .schema import FieldConfig, Schema

if TYPE_CHECKING:
    from .model import Model


@dataclass(frozen=True)
class FieldError:
    """
    Leaf of an error tree.

    Attributes:
        code (ErrorCode): NOT_FOUND or NOT_VALID.
        value (Any): The offending value (NOT_VALID only).
    """

    code: ErrorCode
    value: Any = None


# fieldname -> leaf error, nested entity tree, or {item index -> tree} for HasMany
ErrorTree = Dict[str, Union[FieldError, "ErrorTree", Dict[int, "ErrorTree"]]]

# A plain field name, or a pair (association name, nested selectors or None)
Selector = Union[str, Sequence[Any]]


@dataclass
class FieldValidator:
    checked: bool
    is_valid: Callable[[Any, Any], bool]


def _make_rule(fieldconf: FieldConfig) -> Callable[[Any, Any], bool]:
    fieldtype = fieldconf.type

    def _is_valid(value: Any, entity: Any) -> bool:
        is_blank = fieldtype.is_blank(value)
        return bool(
            (
                # Blank and allowed
                (is_blank and fieldconf.allow_blank(value, entity))
                # Not blank and valid
                or (not is_blank and fieldtype.is_valid(value))
            )
            # Custom valid method
            and fieldconf.is_valid(value, entity)
        )

    return _is_valid


def build_validator(schema: Schema) -> Dict[str, FieldValidator]:
    """Creates a fresh validator table, one evaluator per schema field."""
    return {
        fieldname: FieldValidator(
            checked=fieldconf.auto_checked, is_valid=_make_rule(fieldconf)
        )
        for fieldname, fieldconf in schema.items()
    }


def _validate_field(entity: "Model", fieldname: str) -> Optional[FieldError]:
    if not entity._participates(fieldname):
        return FieldError(ErrorCode.NOT_FOUND)

    validator = entity._validator[fieldname]
    validator.checked = True
    value = entity[fieldname]
    if not validator.is_valid(value, entity):
        return FieldError(ErrorCode.NOT_VALID, value)
    return None


def _validate_association(
    entity: "Model", fieldname: str, nested: Optional[Sequence[Selector]]
) -> Union[FieldError, ErrorTree, Dict[int, ErrorTree], None]:
    if not entity._participates(fieldname):
        return FieldError(ErrorCode.NOT_FOUND)

    entity._validator[fieldname].checked = True

    # No nested selectors: the association is validated as a plain field
    if nested is None:
        return _validate_field(entity, fieldname)

    fieldconf = entity.schema()[fieldname]
    if not fieldconf.is_association:
        raise TypeError(
            f"valid: '{fieldname}' is not an association and cannot take nested selectors"
        )

    value = entity[fieldname]
    kind = fieldconf.type.kind  # type: ignore[attr-defined]

    if kind in (AssociationKind.HasOne, AssociationKind.BelongsTo):
        if value is None:
            return None
        return get_validation_errors(value, nested)

    # HasMany: keep the error trees of the items that have errors only
    item_errors: Dict[int, ErrorTree] = {}
    for index, item in enumerate(value if value is not None else ()):
        subtree = get_validation_errors(item, nested)
        if subtree:
            item_errors[index] = subtree
    return item_errors or None


def get_validation_errors(
    entity: "Model", selectors: Sequence[Selector]
) -> Optional[ErrorTree]:
    """
    Validates the selected fields of `entity` and marks them checked.

    Args:
        entity: The entity to validate.
        selectors: Field names, or `(association_name, nested_selectors | None)` pairs.

    Returns:
        Optional[ErrorTree]: None when no error was produced at any depth.

    Raises:
        TypeError: If `selectors` is not a list/tuple or a selector is malformed.
    """
    if isinstance(selectors, str) or not isinstance(selectors, (list, tuple)):
        raise TypeError("valid: selectors MUST be a list")

    errors: ErrorTree = {}

    for selector in selectors:
        # Validation for direct fields
        if isinstance(selector, str):
            error = _validate_field(entity, selector)
            if error is not None:
                errors[selector] = error

        # Recursive validation for associations
        elif (
            isinstance(selector, (list, tuple))
            and len(selector) == 2
            and isinstance(selector[0], str)
        ):
            fieldname, nested = selector
            association_errors = _validate_association(entity, fieldname, nested)
            if association_errors:
                errors[fieldname] = association_errors

        else:
            raise TypeError(f"valid: selector syntax error: {selector!r}")

    return errors or None
