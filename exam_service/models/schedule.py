from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class ExamSchedule:
    """The window during which one exam is open to one class."""

    id: UUID
    exam_id: UUID
    class_id: UUID
    start_time: datetime
    end_time: datetime
    is_closed: bool = False  # manual force-close
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *,
        exam_id: UUID,
        class_id: UUID,
        start_time: datetime,
        end_time: datetime,
        is_closed: bool = False,
    ) -> ExamSchedule:
        return ExamSchedule(
            id=uuid4(),
            exam_id=exam_id,
            class_id=class_id,
            start_time=start_time,
            end_time=end_time,
            is_closed=is_closed,
        )
