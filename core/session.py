"""Quiz session state machine.

Holds everything one user's quiz needs (questions, position, selections,
score and mistakes) and exposes the transitions the handlers are allowed to
perform. Nothing in here talks to Telegram or to the network, so the whole
flow can be driven from tests.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple, Union

from qcm_api.models import CheckResult, Question, QuestionBatch
from core.scoring import feedback_message, score_percentage

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer"

MARK_CORRECT = "correct"
MARK_INCORRECT = "incorrect"

Selection = Union[int, List[int]]


class QuizStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    REVIEWING = "reviewing"
    FINISHED = "finished"


@dataclass(frozen=True)
class MistakeRecord:
    """Wrongly answered question kept for the final report."""
    question: str
    user_answer: str
    correct_answer: str
    options: Tuple[str, ...]
    is_multiple_choice: bool
    explanation: Optional[str] = None


@dataclass(frozen=True)
class AnswerReview:
    """Outcome of one check, with a mark per option for the correction view."""
    question: Question
    is_correct: bool
    marks: Tuple[Optional[str], ...]
    explanation: Optional[str] = None


@dataclass(frozen=True)
class QuizSummary:
    score: int
    total: int
    percentage: int
    message: str
    mistakes: Tuple[MistakeRecord, ...]


class QuizSession:
    """State of one user's quiz: IDLE → LOADING → IN_PROGRESS ⇄ REVIEWING → FINISHED."""

    def __init__(self):
        # Bumped on every reset so callers can detect a session replaced
        # while they were awaiting the network.
        self.generation = 0
        self.reset()

    def reset(self) -> None:
        """Drop all quiz data and return to IDLE."""
        self.status = QuizStatus.IDLE
        self.questions: List[Question] = []
        self.position = 0
        self.answers: Dict[int, Selection] = {}
        self.score = 0
        self.total = 0
        self.mistakes: List[MistakeRecord] = []
        self.title: Optional[str] = None
        self._checked: Set[int] = set()
        self.generation += 1

    # ------------------------------------------------------------------
    # Read-only helpers
    # ------------------------------------------------------------------

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.position < len(self.questions):
            return self.questions[self.position]
        return None

    @property
    def is_finished(self) -> bool:
        return self.status == QuizStatus.FINISHED

    def is_checked(self, question: Question) -> bool:
        return question.id in self._checked

    def selected_indices(self, question: Question) -> List[int]:
        """Current selection for a question as a list (empty when unanswered)."""
        selection = self.answers.get(question.id)
        if selection is None:
            return []
        if isinstance(selection, list):
            return list(selection)
        return [selection]

    def has_complete_answer(self) -> bool:
        question = self.current_question
        if question is None:
            return False
        if question.is_multiple_choice:
            return len(self.selected_indices(question)) == question.required_count
        return question.id in self.answers

    def progress_percent(self) -> int:
        """Progress shown while answering, counting the current question."""
        if self.total <= 0:
            return 0
        return min(100, int((self.position + 1) / self.total * 100))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def begin_loading(self) -> bool:
        """Wipe the previous quiz and wait for a batch. False if already loading."""
        if self.status == QuizStatus.LOADING:
            return False
        self.reset()
        self.status = QuizStatus.LOADING
        return True

    def load(self, batch: QuestionBatch) -> None:
        if self.status != QuizStatus.LOADING:
            logger.warning("Ignoring question batch in state %s", self.status.value)
            return

        self.questions = list(batch.questions)
        self.total = len(self.questions)
        self.title = batch.title
        if batch.total != self.total:
            logger.warning(
                "Provider reported total=%d but sent %d usable questions",
                batch.total, self.total,
            )

        self.status = QuizStatus.FINISHED if self.total == 0 else QuizStatus.IN_PROGRESS

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def select_option(self, index: int) -> bool:
        """
        Apply a click on option `index` of the current question.

        Single-answer questions replace the selection. Multi-answer questions
        toggle the option; adding beyond the required count is ignored.

        Returns:
            True if the stored selection changed
        """
        question = self.current_question
        if self.status != QuizStatus.IN_PROGRESS or question is None:
            return False
        if self.is_checked(question):
            return False
        if not 0 <= index < len(question.options):
            return False

        if not question.is_multiple_choice:
            if self.answers.get(question.id) == index:
                return False
            self.answers[question.id] = index
            return True

        selected = self.selected_indices(question)
        if index in selected:
            selected.remove(index)
        elif len(selected) < question.required_count:
            selected.append(index)
        else:
            return False
        self.answers[question.id] = selected
        return True

    def skip_checked(self) -> bool:
        """Move past a question that was already checked, without re-submitting."""
        question = self.current_question
        if self.status != QuizStatus.IN_PROGRESS or question is None:
            return False
        if not self.is_checked(question):
            return False
        self._move_forward()
        return True

    def begin_check(self) -> Optional[Selection]:
        """
        Lock the current question for checking.

        Returns:
            Answer payload for the checker: an int, or a list of indices for
            questions whose correct answer is a list. None when the question
            cannot be submitted (incomplete, already checked, or a check is
            already in flight).
        """
        question = self.current_question
        if self.status != QuizStatus.IN_PROGRESS or question is None:
            return None
        if self.is_checked(question) or not self.has_complete_answer():
            return None

        self.status = QuizStatus.REVIEWING
        selected = self.selected_indices(question)
        if isinstance(question.correct, tuple):
            return selected
        return selected[0]

    def record_result(self, result: CheckResult) -> Optional[AnswerReview]:
        """Score the checked question and build its correction marks."""
        question = self.current_question
        if self.status != QuizStatus.REVIEWING or question is None:
            return None
        if self.is_checked(question):
            return None

        selected = self.selected_indices(question)
        if question.is_multiple_choice:
            correct_indices = question.correct_indices
            is_correct = set(selected) == set(correct_indices)
        else:
            correct_indices = result.correct_answer or question.correct_indices
            is_correct = result.correct

        self._checked.add(question.id)
        if is_correct:
            self.score += 1
        else:
            self.mistakes.append(MistakeRecord(
                question=question.question,
                user_answer=self._options_text(question, selected),
                correct_answer=self._options_text(question, correct_indices),
                options=question.options,
                is_multiple_choice=question.is_multiple_choice,
                explanation=result.explanation,
            ))

        marks = []
        for index in range(len(question.options)):
            if index in correct_indices:
                marks.append(MARK_CORRECT)
            elif index in selected:
                marks.append(MARK_INCORRECT)
            else:
                marks.append(None)

        return AnswerReview(
            question=question,
            is_correct=is_correct,
            marks=tuple(marks),
            explanation=result.explanation,
        )

    def skip_current(self) -> bool:
        """Give up on the question being checked: move on without scoring it."""
        question = self.current_question
        if self.status != QuizStatus.REVIEWING or question is None:
            return False
        self._checked.add(question.id)
        self._move_forward()
        return True

    def complete_review(self) -> bool:
        """Leave the correction view and go to the next question."""
        question = self.current_question
        if self.status != QuizStatus.REVIEWING or question is None:
            return False
        if not self.is_checked(question):
            return False
        self._move_forward()
        return True

    def retreat(self) -> bool:
        if self.status != QuizStatus.IN_PROGRESS or self.position == 0:
            return False
        self.position -= 1
        return True

    # ------------------------------------------------------------------
    # Report
    # ------------------------------------------------------------------

    def summary(self) -> QuizSummary:
        percentage = score_percentage(self.score, self.total)
        return QuizSummary(
            score=self.score,
            total=self.total,
            percentage=percentage,
            message=feedback_message(percentage),
            mistakes=tuple(self.mistakes),
        )

    def _move_forward(self) -> None:
        self.position = min(self.position + 1, self.total)
        if self.position >= self.total:
            self.status = QuizStatus.FINISHED
        else:
            self.status = QuizStatus.IN_PROGRESS

    @staticmethod
    def _options_text(question: Question, indices) -> str:
        texts = [question.options[i] for i in indices if 0 <= i < len(question.options)]
        return ", ".join(texts) if texts else NO_ANSWER
