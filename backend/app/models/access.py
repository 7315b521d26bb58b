"""Access levels and their symbolic names."""

from enum import IntEnum


class InvalidAccessLevel(ValueError):
    """Raised when a symbolic access name is not one of the known levels."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Unrecognized access level: {value!r}")
        self.value = value


class Access(IntEnum):
    """Closed set of access levels a document or note can carry."""

    PRIVATE = 1
    ORGANIZATION = 2
    PUBLIC = 4
    PENDING = 5
    EXPORTED = 6

    @property
    def symbol(self) -> str:
        """Symbolic name used on the wire (e.g. "organization")."""
        return self.name.lower()

    @property
    def is_public(self) -> bool:
        return self in PUBLIC_LEVELS


PUBLIC_LEVELS = frozenset({Access.PUBLIC, Access.EXPORTED})

ACCESS_MAP: dict[str, Access] = {level.symbol: level for level in Access}


def access_from_name(name: object) -> Access:
    """Map a symbolic access name to its level.

    Args:
        name: Wire value such as "public"; surrounding whitespace and case are ignored

    Returns:
        The matching Access level

    Raises:
        InvalidAccessLevel: If the value is not a recognized symbol
    """
    if not isinstance(name, str):
        raise InvalidAccessLevel(name)

    level = ACCESS_MAP.get(name.strip().lower())
    if level is None:
        raise InvalidAccessLevel(name)

    return level
