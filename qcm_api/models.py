"""Data models for quiz API responses."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .exceptions import InvalidResponseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Question:
    """Single multiple-choice question from the provider."""
    id: int
    question: str
    options: Tuple[str, ...]
    correct: Union[int, Tuple[int, ...]]

    @property
    def correct_indices(self) -> Tuple[int, ...]:
        if isinstance(self.correct, tuple):
            return self.correct
        return (self.correct,)

    @property
    def required_count(self) -> int:
        """Number of options the user has to pick."""
        return len(self.correct_indices)

    @property
    def is_multiple_choice(self) -> bool:
        return isinstance(self.correct, tuple) and len(self.correct) > 1


@dataclass
class QuestionBatch:
    """Question set returned by GET /api/qcm."""
    questions: List[Question] = field(default_factory=list)
    total: int = 0
    title: Optional[str] = None


@dataclass(frozen=True)
class CheckResult:
    """Verdict returned by POST /api/check."""
    correct: bool
    correct_answer: Tuple[int, ...] = ()
    explanation: Optional[str] = None


# ============================================================================
# CONVERTERS: JSON payloads → dataclasses
# ============================================================================

def _as_index(value) -> int:
    # bool is an int subclass but never a valid option index
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidResponseError(f"Invalid option index: {value!r}")
    return int(value)


def _parse_correct(value) -> Union[int, Tuple[int, ...]]:
    if isinstance(value, list):
        return tuple(_as_index(v) for v in value)
    return _as_index(value)


def question_from_payload(payload: dict) -> Optional[Question]:
    """
    Convert one question object into a Question.

    Questions with empty text or a non-positive id are skipped, the same way
    the provider filters its own data.
    """
    try:
        question_id = int(payload["id"])
        text = str(payload.get("question") or "").strip()
        options = tuple(str(o) for o in payload.get("options") or [])
        correct = _parse_correct(payload["correct"])
    except (KeyError, TypeError, ValueError, InvalidResponseError) as e:
        logger.warning("Skipping malformed question %r: %s", payload, e)
        return None

    if not text or question_id <= 0:
        logger.warning("Skipping invalid question id=%s", question_id)
        return None

    question = Question(id=question_id, question=text, options=options, correct=correct)
    if any(i < 0 or i >= len(options) for i in question.correct_indices):
        logger.warning("Skipping question id=%d: correct index out of range", question_id)
        return None

    return question


def batch_from_payload(payload) -> QuestionBatch:
    """Convert the GET /api/qcm body into a QuestionBatch."""
    if not isinstance(payload, dict):
        raise InvalidResponseError("Question response is not an object")

    raw_questions = payload.get("questions")
    if raw_questions is None:
        raw_questions = []
    if not isinstance(raw_questions, list):
        raise InvalidResponseError("'questions' is not a list")

    questions = []
    for raw in raw_questions:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object question: %r", raw)
            continue
        question = question_from_payload(raw)
        if question:
            questions.append(question)

    try:
        total = int(payload.get("total", len(questions)))
    except (TypeError, ValueError):
        raise InvalidResponseError(f"Invalid total: {payload.get('total')!r}")

    return QuestionBatch(questions=questions, total=total, title=payload.get("title") or None)


def check_result_from_payload(payload) -> CheckResult:
    """Convert the POST /api/check body into a CheckResult."""
    if not isinstance(payload, dict) or "correct" not in payload:
        raise InvalidResponseError("Check response lacks 'correct'")

    raw_answer = payload.get("correctAnswer")
    if raw_answer is None:
        correct_answer: Tuple[int, ...] = ()
    else:
        parsed = _parse_correct(raw_answer)
        correct_answer = parsed if isinstance(parsed, tuple) else (parsed,)

    return CheckResult(
        correct=bool(payload["correct"]),
        correct_answer=correct_answer,
        explanation=payload.get("explanation") or None,
    )
