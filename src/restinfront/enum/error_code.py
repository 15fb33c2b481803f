from enum import StrEnum


class ErrorCode(StrEnum):
    """Leaf codes of a validation error tree."""

    NOT_FOUND = "NOT_FOUND"  # The selected field is not present on the entity.
    NOT_VALID = "NOT_VALID"  # The field value fails its validity rule.
