"""Submission Engine.

State machine::

    pending ──grade──▶ graded ──review──▶ reviewed
                        │  ▲
                        └──┘ re-grade

``reviewed`` is terminal.  Nothing goes back to ``pending`` and nothing
reaches ``reviewed`` without passing through ``graded``.

Two concurrency rules:

1. One submission per (exam, student).  ``submit`` looks for an existing
   record first so the common case gets a quick, friendly error, but the
   store's unique key decides: a DuplicateKeyError from ``add`` is the
   authoritative "already submitted" signal.
2. One writer per submission.  ``grade`` and ``review`` read, score and
   save inside ``repo.lock(id)``, so two graders can't interleave.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping, Sequence
from uuid import UUID

from exam_service.core.errors import (
    DataIntegrityError,
    DuplicateSubmissionError,
    ExamNotOpenError,
    InvalidTransitionError,
    MissingFieldError,
    NotFoundError,
    ValidationError,
)
from exam_service.core.identity import normalize_id
from exam_service.core.metrics import GRADING_OPERATIONS, SUBMISSION_ATTEMPTS
from exam_service.models.question import OPTION_LETTERS, Question
from exam_service.models.submission import (
    GRADED,
    PENDING,
    REVIEWED,
    STATUSES,
    Answer,
    GradingTotals,
    Submission,
)
from exam_service.repos.class_registry import ClassRegistry
from exam_service.repos.question_repo import QuestionRepo
from exam_service.repos.submission_repo import DuplicateKeyError, SubmissionRepo
from exam_service.services.schedule_service import Clock, ScheduleService, utcnow

logger = logging.getLogger(__name__)

Scorer = Callable[[Answer, Question], float]


def score_multiple_choice(answer: Answer, question: Question) -> float:
    """Full weight for the correct letter, 0 otherwise (skips included)."""
    if not answer.selected_option or question.correct_answer is None:
        return 0.0
    return question.score if answer.selected_option == question.correct_answer else 0.0


def tally(scored: Sequence[Answer]) -> GradingTotals:
    """Skipped answers have no selection; the rest count as correct when they
    earned points."""
    skipped = sum(1 for a in scored if not a.selected_option)
    correct = sum(1 for a in scored if a.selected_option and a.score > 0)
    return GradingTotals(
        total_questions=len(scored),
        correct=correct,
        incorrect=len(scored) - correct - skipped,
        skipped=skipped,
    )


def parse_answers(
    raw: Sequence[Mapping[str, object]] | None, *, with_scores: bool = False
) -> tuple[Answer, ...]:
    """Validate client answer payloads.

    Every bad entry is reported, as ``answers[i].<field>``.  Per-answer
    scores are only read when ``with_scores`` is set (review); on submit
    they start at 0 whatever the client sent.
    """
    if raw is None:
        return ()

    answers: list[Answer] = []
    bad: list[str] = []
    for i, item in enumerate(raw):
        qid = normalize_id(item.get("questionId", item.get("question_id")))
        if qid is None:
            bad.append(f"answers[{i}].questionId")

        option = item.get("selectedOption", item.get("selected_option"))
        if option == "":
            option = None
        if option is not None and option not in OPTION_LETTERS:
            bad.append(f"answers[{i}].selectedOption")

        score = 0.0
        if with_scores and item.get("score") is not None:
            try:
                score = float(item["score"])  # type: ignore[arg-type]
            except (TypeError, ValueError):
                score = -1.0
            if score < 0:
                bad.append(f"answers[{i}].score")

        if qid is not None:
            answers.append(
                Answer(question_id=qid, selected_option=option, score=score)  # type: ignore[arg-type]
            )

    if bad:
        raise ValidationError("Invalid answers", fields=bad)
    return tuple(answers)


class SubmissionService:
    def __init__(
        self,
        submissions: SubmissionRepo,
        questions: QuestionRepo,
        schedules: ScheduleService,
        classes: ClassRegistry,
        *,
        clock: Clock = utcnow,
        auto_grade: bool = True,
    ) -> None:
        self._submissions = submissions
        self._questions = questions
        self._schedules = schedules
        self._classes = classes
        self._clock = clock
        self._auto_grade = auto_grade

    # ------------------------------------------------------------------
    # submit
    # ------------------------------------------------------------------

    async def submit(
        self,
        student_id: object,
        exam_id: object,
        answers: Sequence[Mapping[str, object]] | None,
    ) -> Submission:
        sid = normalize_id(student_id)
        eid = normalize_id(exam_id)
        if sid is None or eid is None:
            missing = [
                name
                for name, value in (("studentId", sid), ("examId", eid))
                if value is None
            ]
            SUBMISSION_ATTEMPTS.labels(outcome="invalid").inc()
            raise MissingFieldError("Missing fields", fields=missing)

        try:
            parsed = parse_answers(answers)
        except ValidationError:
            SUBMISSION_ATTEMPTS.labels(outcome="invalid").inc()
            raise

        now = self._clock()
        class_ids = await self._classes.classes_for_student(sid)
        if not await self._schedules.find_open(eid, class_ids, now):
            SUBMISSION_ATTEMPTS.labels(outcome="not_open").inc()
            logger.warning(
                "Rejected submission: exam not open exam=%s student=%s",
                eid,
                sid,
                extra={"exam_id": str(eid), "student_id": str(sid)},
            )
            raise ExamNotOpenError("Exam is not open")

        if await self._submissions.get_by_pair(eid, sid) is not None:
            self._reject_duplicate(eid, sid)

        submission = Submission.new(
            student_id=sid, exam_id=eid, answers=parsed, submitted_at=now
        )
        try:
            await self._submissions.add(submission)
        except DuplicateKeyError:
            # Lost the race to a concurrent submit for the same pair.
            self._reject_duplicate(eid, sid)

        SUBMISSION_ATTEMPTS.labels(outcome="accepted").inc()
        logger.info(
            "Accepted submission id=%s exam=%s student=%s answers=%d",
            submission.id,
            eid,
            sid,
            len(parsed),
            extra={"submission_id": str(submission.id), "exam_id": str(eid)},
        )

        if not self._auto_grade:
            return submission
        try:
            return await self.grade(submission.id)
        except DataIntegrityError:
            # Stored as pending; a teacher can grade once the bank is fixed.
            return submission

    def _reject_duplicate(self, exam_id: UUID, student_id: UUID) -> None:
        SUBMISSION_ATTEMPTS.labels(outcome="duplicate").inc()
        logger.warning(
            "Rejected duplicate submission exam=%s student=%s",
            exam_id,
            student_id,
            extra={
                "kind": DuplicateSubmissionError.kind,
                "exam_id": str(exam_id),
                "student_id": str(student_id),
            },
        )
        raise DuplicateSubmissionError()

    # ------------------------------------------------------------------
    # grading state machine
    # ------------------------------------------------------------------

    async def grade(
        self, submission_id: UUID, scorer: Scorer = score_multiple_choice
    ) -> Submission:
        async with self._submissions.lock(submission_id) as current:
            if current is None:
                raise NotFoundError("Not found")
            if current.status == REVIEWED:
                raise self._illegal(current, GRADED)

            questions = await self._questions.get_many(
                a.question_id for a in current.answers
            )
            missing = sorted(
                {str(a.question_id) for a in current.answers} - {str(q) for q in questions}
            )
            if missing:
                GRADING_OPERATIONS.labels(result="integrity_error").inc()
                logger.warning(
                    "Cannot grade submission id=%s: missing questions=%s",
                    submission_id,
                    missing,
                    extra={"submission_id": str(submission_id)},
                )
                raise DataIntegrityError(
                    "Submission references questions that no longer exist: "
                    + ", ".join(missing)
                )

            scored = []
            for answer in current.answers:
                points = float(scorer(answer, questions[answer.question_id]))
                if points < 0:
                    raise ValueError(f"scorer returned a negative score: {points}")
                scored.append(dataclasses.replace(answer, score=points))

            totals = tally(scored)
            graded = dataclasses.replace(
                current,
                answers=tuple(scored),
                score=sum(a.score for a in scored),
                status=GRADED,
                is_graded=True,
                graded_at=self._clock(),
                totals=totals,
            )
            await self._submissions.save(graded)

        GRADING_OPERATIONS.labels(result="graded").inc()
        logger.info(
            "Graded submission id=%s score=%s correct=%s/%s",
            submission_id,
            graded.score,
            totals.correct,
            totals.total_questions,
            extra={"submission_id": str(submission_id)},
        )
        return graded

    async def review(
        self,
        submission_id: UUID,
        adjusted_answers: Sequence[Mapping[str, object]] | None = None,
        final_score: float | None = None,
    ) -> Submission:
        adjusted = (
            parse_answers(adjusted_answers, with_scores=True)
            if adjusted_answers is not None
            else None
        )
        if final_score is not None and final_score < 0:
            raise ValidationError("score must be non-negative", fields=["score"])

        async with self._submissions.lock(submission_id) as current:
            if current is None:
                raise NotFoundError("Not found")
            if current.status != GRADED:
                raise self._illegal(current, REVIEWED)

            answers = current.answers if adjusted is None else adjusted
            if final_score is not None:
                score = float(final_score)
            elif adjusted is not None:
                score = sum(a.score for a in adjusted)
            else:
                score = current.score

            reviewed = dataclasses.replace(
                current, answers=answers, score=score, status=REVIEWED, is_graded=True
            )
            await self._submissions.save(reviewed)

        logger.info(
            "Reviewed submission id=%s score=%s",
            submission_id,
            reviewed.score,
            extra={"submission_id": str(submission_id)},
        )
        return reviewed

    async def apply_update(
        self,
        submission_id: UUID,
        *,
        answers: Sequence[Mapping[str, object]] | None = None,
        score: float | None = None,
        status: str | None = None,
        is_graded: bool | None = None,
    ) -> Submission:
        """Route a client-side edit through the state machine."""
        if status is not None and status not in STATUSES:
            raise ValidationError(
                "status must be one of pending, graded, reviewed", fields=["status"]
            )

        target = status
        if is_graded is not None:
            if target is None:
                target = GRADED if is_graded else PENDING
            elif (target == PENDING) == is_graded:
                raise ValidationError(
                    "isGraded contradicts status", fields=["isGraded", "status"]
                )

        edits = answers is not None or score is not None

        if target is None:
            if edits:
                raise ValidationError(
                    "status is required when changing answers or score",
                    fields=["status"],
                )
            return await self.get(submission_id)

        if target == GRADED:
            if edits:
                raise ValidationError(
                    "answers and score are computed by grading; "
                    "adjust them with status=reviewed",
                    fields=["answers", "score"],
                )
            return await self.grade(submission_id)

        if target == REVIEWED:
            return await self.review(submission_id, answers, score)

        current = await self.get(submission_id)
        if current.status != PENDING:
            raise self._illegal(current, PENDING)
        if edits:
            raise InvalidTransitionError("Submissions cannot be edited before grading")
        return current

    def _illegal(self, current: Submission, target: str) -> InvalidTransitionError:
        logger.warning(
            "Illegal transition id=%s %s -> %s",
            current.id,
            current.status,
            target,
            extra={
                "kind": InvalidTransitionError.kind,
                "submission_id": str(current.id),
            },
        )
        return InvalidTransitionError(
            f"Cannot move submission from {current.status} to {target}"
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def get(self, submission_id: UUID) -> Submission:
        submission = await self._submissions.get_by_id(submission_id)
        if submission is None:
            raise NotFoundError("Not found")
        return submission

    async def list_all(self) -> list[Submission]:
        return await self._submissions.list_all()

    async def list_by_exam(self, exam_id: UUID) -> list[Submission]:
        return await self._submissions.list_by_exam(exam_id)

    async def list_by_student(self, student_id: UUID) -> list[Submission]:
        return await self._submissions.list_by_student(student_id)

    async def delete(self, submission_id: UUID) -> None:
        if not await self._submissions.remove(submission_id):
            raise NotFoundError("Not found")
        logger.info(
            "Deleted submission id=%s",
            submission_id,
            extra={"submission_id": str(submission_id)},
        )
