"""Statistics Aggregator.

Everything is recomputed from the submission set on every call; there is
no materialized summary to drift out of sync with the submissions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from exam_service.models.submission import PENDING, Submission
from exam_service.repos.submission_repo import SubmissionRepo


@dataclass(frozen=True, slots=True)
class SubmissionStatistics:
    total: int = 0
    graded: int = 0
    pending: int = 0
    average_score: float = 0.0
    # Observed statuses only, in first-seen order; absent statuses are omitted
    status_distribution: dict[str, int] = field(default_factory=dict)


def summarize(submissions: Iterable[Submission]) -> SubmissionStatistics:
    total = 0
    graded = 0
    pending = 0
    score_sum = 0.0
    distribution: dict[str, int] = {}

    for s in submissions:
        total += 1
        score_sum += s.score
        if s.is_graded:
            graded += 1
        if s.status == PENDING:
            pending += 1
        distribution[s.status] = distribution.get(s.status, 0) + 1

    return SubmissionStatistics(
        total=total,
        graded=graded,
        pending=pending,
        average_score=score_sum / total if total else 0.0,
        status_distribution=distribution,
    )


async def get_statistics(
    repo: SubmissionRepo,
    *,
    exam_id: UUID | None = None,
    user_id: UUID | None = None,
) -> SubmissionStatistics:
    """Statistics over all submissions, or the per-exam / per-student slice."""
    if exam_id is not None:
        submissions = await repo.list_by_exam(exam_id)
    elif user_id is not None:
        submissions = await repo.list_by_student(user_id)
    else:
        submissions = await repo.list_all()

    if exam_id is not None and user_id is not None:
        submissions = [
            s for s in submissions if user_id in (s.user_id, s.student_id)
        ]
    return summarize(submissions)
