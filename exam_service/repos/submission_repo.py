from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol
from uuid import UUID

from exam_service.models.submission import Submission


class DuplicateKeyError(ValueError):
    """The store already holds a submission for this (exam_id, student_id)."""


class SubmissionRepo(Protocol):
    async def get_by_id(self, submission_id: UUID) -> Submission | None: ...
    async def get_by_pair(
        self, exam_id: UUID, student_id: UUID
    ) -> Submission | None: ...
    async def add(self, submission: Submission) -> None: ...
    async def save(self, submission: Submission) -> None: ...
    async def remove(self, submission_id: UUID) -> bool: ...
    async def list_all(self) -> list[Submission]: ...
    async def list_by_exam(self, exam_id: UUID) -> list[Submission]: ...
    async def list_by_student(self, student_id: UUID) -> list[Submission]: ...
    def lock(
        self, submission_id: UUID
    ) -> AbstractAsyncContextManager[Submission | None]: ...


class InMemorySubmissionRepo:
    """Dict-backed store.

    ``add`` is the uniqueness constraint: the pair lookup and the insert
    run without an ``await`` in between, so two coroutines on the same
    event loop can never both pass the check.
    """

    def __init__(self) -> None:
        self._by_id: dict[UUID, Submission] = {}
        self._by_pair: dict[tuple[UUID, UUID], UUID] = {}
        self._locks: dict[UUID, asyncio.Lock] = {}

    async def get_by_id(self, submission_id: UUID) -> Submission | None:
        return self._by_id.get(submission_id)

    async def get_by_pair(self, exam_id: UUID, student_id: UUID) -> Submission | None:
        sid = self._by_pair.get((exam_id, student_id))
        return None if sid is None else self._by_id.get(sid)

    async def add(self, submission: Submission) -> None:
        key = (submission.exam_id, submission.student_id)
        if key in self._by_pair:
            raise DuplicateKeyError("submission already exists for exam/student")
        if submission.id in self._by_id:
            raise ValueError("submission id already exists")
        self._by_pair[key] = submission.id
        self._by_id[submission.id] = submission

    async def save(self, submission: Submission) -> None:
        if submission.id not in self._by_id:
            raise KeyError("submission not found")
        self._by_id[submission.id] = submission

    async def remove(self, submission_id: UUID) -> bool:
        s = self._by_id.pop(submission_id, None)
        if s is None:
            return False
        self._by_pair.pop((s.exam_id, s.student_id), None)
        self._locks.pop(submission_id, None)
        return True

    async def list_all(self) -> list[Submission]:
        return list(self._by_id.values())

    async def list_by_exam(self, exam_id: UUID) -> list[Submission]:
        return [s for s in self._by_id.values() if s.exam_id == exam_id]

    async def list_by_student(self, student_id: UUID) -> list[Submission]:
        return [
            s
            for s in self._by_id.values()
            if s.user_id == student_id or s.student_id == student_id
        ]

    @asynccontextmanager
    async def lock(self, submission_id: UUID) -> AsyncIterator[Submission | None]:
        """Hold exclusive access to one submission; yields its current state.

        Unknown ids yield None without registering a lock.
        """
        if submission_id not in self._by_id:
            yield None
            return
        lock = self._locks.setdefault(submission_id, asyncio.Lock())
        async with lock:
            yield self._by_id.get(submission_id)
