"""PostgreSQL implementation of ClassRegistry."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from exam_service.db.tables import ClassMembershipRow


class PgClassRegistry:
    """Satisfies the ClassRegistry Protocol using the class_memberships table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def classes_for_student(self, student_id: UUID) -> frozenset[UUID]:
        stmt = select(ClassMembershipRow.class_id).where(
            ClassMembershipRow.student_id == student_id
        )
        return frozenset((await self._session.execute(stmt)).scalars().all())

    async def add_member(self, class_id: UUID, student_id: UUID) -> None:
        stmt = (
            insert(ClassMembershipRow)
            .values(class_id=class_id, student_id=student_id)
            .on_conflict_do_nothing()
        )
        await self._session.execute(stmt)

    async def remove_member(self, class_id: UUID, student_id: UUID) -> bool:
        stmt = delete(ClassMembershipRow).where(
            ClassMembershipRow.class_id == class_id,
            ClassMembershipRow.student_id == student_id,
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0
