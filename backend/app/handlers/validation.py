"""Parameter validation shared by the handlers.

Everything here raises ``InvalidParameter``; handlers convert it to a
bad-request result before touching any collaborator.
"""

from collections.abc import Mapping, Sequence
from typing import Any

JSON_FORMATS = frozenset({"json", "js"})

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class InvalidParameter(ValueError):
    """A request parameter is missing or malformed."""


def require_format(fmt: str | None) -> str:
    """Only JSON-compatible response formats are served."""
    if fmt is None or fmt.lower() not in JSON_FORMATS:
        raise InvalidParameter(f"Unsupported format: {fmt!r}")
    return fmt.lower()


def parse_id(raw: Any, name: str = "id") -> int:
    """Parse a positive integer identifier."""
    if raw is None or isinstance(raw, bool):
        raise InvalidParameter(f"Missing {name}")

    try:
        value = int(str(raw).strip())
    except ValueError as e:
        raise InvalidParameter(f"Invalid {name}: {raw!r}") from e

    if value < 1:
        raise InvalidParameter(f"Invalid {name}: {raw!r}")

    return value


def parse_ids(raw: Any) -> set[int]:
    """Parse a list of document ids.

    Accepts a JSON list or a comma-separated string; ``None`` is empty.
    """
    if raw is None or raw == "":
        return set()

    if isinstance(raw, str):
        items: Sequence[Any] = [part for part in raw.split(",") if part.strip()]
    elif isinstance(raw, Sequence):
        items = raw
    else:
        raise InvalidParameter("document_ids must be a list of integers")

    return {parse_id(item, "document id") for item in items}


def pick(params: Mapping[str, Any], *keys: str) -> dict[str, Any]:
    """Whitelist ``keys`` that are present in ``params``."""
    return {key: params[key] for key in keys if key in params}


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


def require_text(value: Any, name: str) -> str:
    """A non-blank string parameter."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidParameter(f"{name} must be a non-blank string")
    return value


def optional_text(value: Any, name: str) -> str | None:
    if value is not None and not isinstance(value, str):
        raise InvalidParameter(f"{name} must be a string")
    return value
