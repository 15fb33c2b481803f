from enum import StrEnum


class AssociationKind(StrEnum):
    """
    The relation an association field type describes between two models.
    """

    HasMany = "HasMany"
    """An ordered collection conceptually owned by the parent."""

    HasOne = "HasOne"
    """An optional single record owned by the parent (shares the owner's key by default)."""

    BelongsTo = "BelongsTo"
    """A reference to a record owned elsewhere."""
