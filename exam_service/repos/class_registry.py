"""Class membership lookup.

Class CRUD lives in another service; the exam core only needs to know
which classes a student sits in, to decide which schedules apply.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class ClassRegistry(Protocol):
    async def classes_for_student(self, student_id: UUID) -> frozenset[UUID]: ...
    async def add_member(self, class_id: UUID, student_id: UUID) -> None: ...
    async def remove_member(self, class_id: UUID, student_id: UUID) -> bool: ...


class InMemoryClassRegistry:
    def __init__(self) -> None:
        self._members: set[tuple[UUID, UUID]] = set()

    async def classes_for_student(self, student_id: UUID) -> frozenset[UUID]:
        return frozenset(c for c, s in self._members if s == student_id)

    async def add_member(self, class_id: UUID, student_id: UUID) -> None:
        self._members.add((class_id, student_id))

    async def remove_member(self, class_id: UUID, student_id: UUID) -> bool:
        key = (class_id, student_id)
        if key not in self._members:
            return False
        self._members.discard(key)
        return True
