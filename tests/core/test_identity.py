from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from exam_service.core.identity import normalize_id

FIXED = UUID("0b0e5b52-3f7a-4a59-8d0c-4c7a2f0e1d11")


@dataclass
class _Record:
    id: object


@pytest.mark.parametrize(
    "value,expected",
    [
        (FIXED, FIXED),
        (str(FIXED), FIXED),
        (f"  {FIXED}  ", FIXED),
        (str(FIXED).upper(), FIXED),
        (0, UUID(int=0)),
        (42, UUID(int=42)),
        ({"id": str(FIXED)}, FIXED),
        ({"id": 7}, UUID(int=7)),
        (_Record(FIXED), FIXED),
    ],
)
def test_normalize_id_accepts_supported_shapes(value: object, expected: UUID) -> None:
    assert normalize_id(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        None,
        "",
        "   ",
        "not-a-uuid",
        -1,
        1 << 128,
        True,
        3.5,
        {"name": "no id"},
        {"id": None},
        _Record(None),
        # one level only
        {"id": {"id": str(uuid4())}},
        _Record(_Record(uuid4())),
        [str(uuid4())],
    ],
)
def test_normalize_id_rejects_everything_else(value: object) -> None:
    assert normalize_id(value) is None
