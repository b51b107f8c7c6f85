"""Shared fixtures for the quiz bot tests."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from core.session import QuizSession
from qcm_api.models import Question, QuestionBatch


@pytest.fixture
def single_question():
    """Single-answer question, correct option is C."""
    return Question(
        id=1,
        question="Which planet is known as the red planet?",
        options=("Venus", "Jupiter", "Mars"),
        correct=2,
    )


@pytest.fixture
def multi_question():
    """Question with two correct options (A and C)."""
    return Question(
        id=2,
        question="Which of these are prime numbers?",
        options=("2", "4", "5", "9"),
        correct=(0, 2),
    )


@pytest.fixture
def list_single_question():
    """Question whose correct answer is a list holding one index."""
    return Question(
        id=3,
        question="Which language is this bot written in?",
        options=("Go", "Python", "Rust"),
        correct=(1,),
    )


@pytest.fixture
def sample_batch(single_question, multi_question, list_single_question):
    return QuestionBatch(
        questions=[single_question, multi_question, list_single_question],
        total=3,
        title="General knowledge",
    )


@pytest.fixture
def loaded_session(sample_batch):
    """Session in IN_PROGRESS on the first question of sample_batch."""
    session = QuizSession()
    session.begin_loading()
    session.load(sample_batch)
    return session


def make_mock_message(user_id: int = 12345) -> AsyncMock:
    """Mock of aiogram Message."""
    message = AsyncMock()
    message.from_user = MagicMock()
    message.from_user.id = user_id
    message.answer = AsyncMock()
    message.edit_text = AsyncMock()
    message.edit_reply_markup = AsyncMock()
    return message


def make_mock_callback(user_id: int = 12345, data: str = "next") -> AsyncMock:
    """Mock of aiogram CallbackQuery."""
    callback = AsyncMock()
    callback.from_user = MagicMock()
    callback.from_user.id = user_id
    callback.data = data
    callback.message = make_mock_message(user_id)
    callback.answer = AsyncMock()
    return callback


def make_mock_state(data: dict | None = None) -> AsyncMock:
    """Mock of FSMContext with a fixed data dict."""
    state = AsyncMock()
    state.get_data.return_value = dict(data or {})
    return state
