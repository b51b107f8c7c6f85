"""Quiz flow: question rendering, option selection, checking and navigation."""
import html
import logging
from typing import Optional

from aiogram import Router, F
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from config import settings
from core.registry import sessions
from core.session import AnswerReview, QuizSession, QuizStatus
from handlers.results import show_results
from keyboards.main_menu import home_keyboard
from keyboards.quiz_kb import question_keyboard, quit_confirm_keyboard, review_keyboard
from qcm_api.client import QcmClient
from qcm_api.exceptions import QcmAPIError
from states.quiz_states import QuizFlow

logger = logging.getLogger(__name__)

router = Router()

LOADING_TEXT = "⏳ Loading the quiz..."
LOAD_ERROR_TEXT = "❌ Error while loading the quiz. Please try again later."
QUIT_CONFIRM_TEXT = "Are you sure you want to quit the quiz?"

_PROGRESS_WIDTH = 10


# ============================================================================
# FORMATTING
# ============================================================================

def _format_progress_bar(percent: int) -> str:
    filled = round(percent / 100 * _PROGRESS_WIDTH)
    return "▓" * filled + "░" * (_PROGRESS_WIDTH - filled) + f" {percent}%"


def _format_header(session: QuizSession) -> list[str]:
    lines = []
    if session.title:
        lines.append(f"📝 <b>{html.escape(session.title)}</b>")
    lines.append(
        f"❓ Question {session.position + 1}/{session.total}"
        f"  ·  Score: {session.score}/{session.total}"
    )
    lines.append(_format_progress_bar(session.progress_percent()))
    lines.append("")
    return lines


def _format_question(session: QuizSession) -> str:
    """Text of the current question with counter, progress and instructions."""
    question = session.current_question
    lines = _format_header(session)
    lines.append(f"<b>{html.escape(question.question)}</b>")

    if question.is_multiple_choice:
        lines.append(f"<i>(Select {question.required_count} answers)</i>")
    if session.is_checked(question):
        lines.append("<i>(Already answered)</i>")

    return "\n".join(lines)


def _format_review(session: QuizSession, review: AnswerReview) -> str:
    """Question text followed by the verdict and the explanation, if any."""
    lines = _format_header(session)
    lines.append(f"<b>{html.escape(review.question.question)}</b>")
    lines.append("")
    lines.append("✅ Correct!" if review.is_correct else "❌ Wrong answer.")
    if review.explanation:
        lines.append(f"\n💡 {html.escape(review.explanation)}")
    return "\n".join(lines)


def _parse_option_index(data: str) -> Optional[int]:
    """Parse 'opt:<index>' callback data."""
    try:
        prefix, value = data.split(":", 1)
        if prefix != "opt":
            return None
        return int(value)
    except (ValueError, AttributeError):
        return None


# ============================================================================
# RENDERING
# ============================================================================

async def _render_question(message: Message, state: FSMContext, session: QuizSession):
    """Show the current question, or the results once the quiz is over."""
    question = session.current_question
    if session.is_finished or question is None:
        await show_results(message, state, session)
        return

    read_only = session.is_checked(question)
    keyboard = question_keyboard(
        question,
        session.selected_indices(question),
        can_go_back=session.position > 0,
        can_go_next=read_only or session.has_complete_answer(),
        read_only=read_only,
    )
    await message.edit_text(_format_question(session), reply_markup=keyboard, parse_mode="HTML")


async def start_quiz(
    message: Message,
    state: FSMContext,
    user_id: int,
    count: int,
    randomize: bool,
):
    """Load a fresh question batch into the user's session and show the first question."""
    sessions.cancel(user_id)
    session = sessions.get(user_id)
    if not session.begin_loading():
        logger.info("Quiz already loading for user_id=%d", user_id)
        return
    generation = session.generation

    await state.set_state(QuizFlow.loading_quiz)

    client = QcmClient()
    try:
        batch = await client.get_questions(count, randomize)
    except QcmAPIError as e:
        logger.error("Failed to load quiz for user_id=%d: %s", user_id, e)
        if session.generation == generation:
            session.reset()
        await state.set_state(QuizFlow.choosing_count)
        await message.edit_text(LOAD_ERROR_TEXT, reply_markup=home_keyboard())
        return
    finally:
        await client.close()

    if session.generation != generation:
        # Quit or restarted while the batch was in flight
        return

    session.load(batch)
    logger.info("Quiz started for user_id=%d with %d questions", user_id, session.total)
    await state.set_state(QuizFlow.answering_question)
    await _render_question(message, state, session)


async def _advance_after_review(
    message: Message,
    state: FSMContext,
    session: QuizSession,
    generation: int,
):
    if session.generation != generation:
        return
    if session.complete_review():
        await _render_question(message, state, session)


# ============================================================================
# CALLBACK HANDLERS
# ============================================================================

@router.callback_query(QuizFlow.answering_question, F.data.startswith("opt:"))
async def option_selected(callback: CallbackQuery, state: FSMContext):
    """Toggle or replace the selection on the current question."""
    try:
        index = _parse_option_index(callback.data)
        if index is None:
            logger.warning("Invalid callback_data: %s", callback.data)
            return

        session = sessions.get(callback.from_user.id)
        if session.select_option(index):
            await _render_question(callback.message, state, session)
    finally:
        await callback.answer()


@router.callback_query(QuizFlow.answering_question, F.data == "next")
async def next_question(callback: CallbackQuery, state: FSMContext):
    """Submit the current answer, show the correction, then move on."""
    await callback.answer()
    user_id = callback.from_user.id
    session = sessions.get(user_id)

    if session.skip_checked():
        await _render_question(callback.message, state, session)
        return

    answer = session.begin_check()
    if answer is None:
        return

    question = session.current_question
    generation = session.generation

    client = QcmClient()
    try:
        result = await client.check_answer(question.id, answer)
    except QcmAPIError as e:
        logger.warning("Check failed for question id=%d, skipping: %s", question.id, e)
        if session.generation == generation and session.skip_current():
            await _render_question(callback.message, state, session)
        return
    finally:
        await client.close()

    if session.generation != generation:
        return

    review = session.record_result(result)
    if review is None:
        return

    await callback.message.edit_text(
        _format_review(session, review),
        reply_markup=review_keyboard(review),
        parse_mode="HTML",
    )

    message = callback.message
    sessions.schedule(
        user_id,
        settings.ADVANCE_DELAY_SECONDS,
        lambda: _advance_after_review(message, state, session, generation),
    )


@router.callback_query(QuizFlow.answering_question, F.data == "prev")
async def previous_question(callback: CallbackQuery, state: FSMContext):
    try:
        session = sessions.get(callback.from_user.id)
        if session.retreat():
            await _render_question(callback.message, state, session)
    finally:
        await callback.answer()


@router.callback_query(F.data == "noop")
async def inert_button(callback: CallbackQuery):
    await callback.answer()


@router.callback_query(F.data == "quit_quiz")
async def quit_quiz(callback: CallbackQuery):
    """Ask before throwing the quiz away."""
    sessions.cancel(callback.from_user.id)
    await callback.message.edit_text(QUIT_CONFIRM_TEXT, reply_markup=quit_confirm_keyboard())
    await callback.answer()


@router.callback_query(F.data == "quit_confirm")
async def quit_confirmed(callback: CallbackQuery, state: FSMContext):
    # Imported here to avoid a circular import with handlers.start
    from handlers.start import show_main_menu

    user_id = callback.from_user.id
    sessions.discard(user_id)
    logger.info("Quiz abandoned by user_id=%d", user_id)
    await show_main_menu(callback.message, state, edit=True)
    await callback.answer()


@router.callback_query(F.data == "quit_cancel")
async def quit_cancelled(callback: CallbackQuery, state: FSMContext):
    """Go back to the quiz; a correction interrupted by the prompt is closed."""
    session = sessions.get(callback.from_user.id)
    if session.status == QuizStatus.REVIEWING:
        session.complete_review()

    if session.status in (QuizStatus.IN_PROGRESS, QuizStatus.FINISHED):
        await _render_question(callback.message, state, session)
    elif session.status == QuizStatus.IDLE:
        from handlers.start import show_main_menu
        await show_main_menu(callback.message, state, edit=True)
    await callback.answer()
