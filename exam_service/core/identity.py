"""Identity normalization.

Ids reach the core in a handful of shapes: a UUID, its string form, a
numeric legacy id, or a whole record (a dict from a JSON body, a domain
dataclass) that carries an ``id``.  ``normalize_id`` is the one place that
knows the accepted shapes; everything else receives ``UUID | None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from uuid import UUID

IdLike = UUID | str | int | Mapping[str, object]


def _scalar_to_uuid(value: object) -> UUID | None:
    if isinstance(value, UUID):
        return value
    # bool is an int subclass; True is not an id
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        if value < 0 or value >= 1 << 128:
            return None
        return UUID(int=value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return UUID(text)
        except ValueError:
            return None
    return None


def normalize_id(value: IdLike | object | None) -> UUID | None:
    """Return the UUID that ``value`` identifies, or None.

    Accepted shapes:
      - ``UUID``
      - ``str`` holding a UUID (surrounding whitespace ignored)
      - ``int`` in [0, 2**128), mapped with ``UUID(int=...)``
      - a mapping with an ``id`` key, or an object with an ``id`` attribute,
        whose value is one of the scalar shapes above

    Records are unwrapped one level only.
    """
    if value is None:
        return None

    scalar = _scalar_to_uuid(value)
    if scalar is not None or isinstance(value, (UUID, str, int)):
        return scalar

    if isinstance(value, Mapping):
        return _scalar_to_uuid(value.get("id"))

    return _scalar_to_uuid(getattr(value, "id", None))
