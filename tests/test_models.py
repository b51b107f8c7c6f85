"""Tests for converting API payloads into models."""
import pytest

from qcm_api.exceptions import InvalidResponseError
from qcm_api.models import (
    batch_from_payload, check_result_from_payload, question_from_payload,
)


class TestQuestionFromPayload:
    """Tests for question_from_payload."""

    def test_single_answer(self):
        """Integer correct: a single-choice question."""
        q = question_from_payload(
            {"id": 4, "question": " 2 + 2 ? ", "options": ["3", "4"], "correct": 1}
        )

        assert q.id == 4
        assert q.question == "2 + 2 ?"
        assert q.options == ("3", "4")
        assert q.correct == 1
        assert q.required_count == 1
        assert q.is_multiple_choice is False

    def test_multi_answer(self):
        """List of several correct indices: a multi-answer question."""
        q = question_from_payload(
            {"id": 5, "question": "Even?", "options": ["1", "2", "4"], "correct": [1, 2]}
        )

        assert q.correct == (1, 2)
        assert q.required_count == 2
        assert q.is_multiple_choice is True

    def test_list_of_one_is_single_choice(self):
        """List with one index: answered like a single-choice question."""
        q = question_from_payload(
            {"id": 6, "question": "Odd?", "options": ["1", "2"], "correct": [0]}
        )

        assert q.correct == (0,)
        assert q.is_multiple_choice is False

    @pytest.mark.parametrize("payload", [
        {"id": 0, "question": "No id", "options": ["a"], "correct": 0},
        {"id": 1, "question": "   ", "options": ["a"], "correct": 0},
        {"id": 1, "question": "Out of range", "options": ["a"], "correct": 3},
        {"id": 1, "question": "Bad correct", "options": ["a"], "correct": "a"},
        {"question": "Missing id", "options": ["a"], "correct": 0},
    ])
    def test_invalid_questions_skipped(self, payload):
        """Malformed entries are dropped, valid ones kept."""
        assert question_from_payload(payload) is None


class TestBatchFromPayload:
    """Tests for batch_from_payload."""

    def test_batch(self):
        """Full payload: questions, total and title."""
        batch = batch_from_payload({
            "title": "Capitals",
            "questions": [
                {"id": 1, "question": "France?", "options": ["Paris", "Lyon"], "correct": 0},
                {"id": 0, "question": "dropped", "options": ["x"], "correct": 0},
            ],
            "total": 2,
        })

        assert batch.title == "Capitals"
        assert [q.id for q in batch.questions] == [1]
        assert batch.total == 2

    def test_empty_batch(self):
        """Empty question list: empty batch with total 0."""
        batch = batch_from_payload({"questions": [], "total": 0})

        assert batch.questions == []
        assert batch.total == 0
        assert batch.title is None

    def test_null_questions(self):
        """Go encodes an empty slice as null."""
        batch = batch_from_payload({"title": "Empty", "questions": None, "total": 0})

        assert batch.questions == []

    def test_not_an_object(self):
        """A body that is not an object raises InvalidResponseError."""
        with pytest.raises(InvalidResponseError):
            batch_from_payload(["not", "a", "dict"])

    def test_questions_not_a_list(self):
        """questions of the wrong type raises InvalidResponseError."""
        with pytest.raises(InvalidResponseError):
            batch_from_payload({"questions": "nope"})


class TestCheckResultFromPayload:
    """Tests for check_result_from_payload."""

    def test_int_correct_answer(self):
        """Integer correctAnswer is normalised to a tuple."""
        result = check_result_from_payload({"correct": False, "correctAnswer": 2})

        assert result.correct is False
        assert result.correct_answer == (2,)
        assert result.explanation is None

    def test_list_correct_answer(self):
        """List correctAnswer is kept as a tuple."""
        result = check_result_from_payload(
            {"correct": True, "correctAnswer": [0, 3], "explanation": "Because."}
        )

        assert result.correct_answer == (0, 3)
        assert result.explanation == "Because."

    def test_missing_correct(self):
        """Result without the correct flag raises InvalidResponseError."""
        with pytest.raises(InvalidResponseError):
            check_result_from_payload({"correctAnswer": 1})
