import html
import logging

from aiogram.types import Message
from aiogram.fsm.context import FSMContext

from core.session import MistakeRecord, QuizSession, QuizSummary
from keyboards.main_menu import home_keyboard
from states.quiz_states import QuizFlow

logger = logging.getLogger(__name__)

# Telegram caps a message at 4096 characters
MAX_MESSAGE_LENGTH = 4000

# Escaped field lengths; a single mistake block always fits one message
MAX_QUESTION_LENGTH = 1200
MAX_FIELD_LENGTH = 800

MISTAKES_HEADER = "📋 <b>Wrong answers</b>\n"


def _format_results(summary: QuizSummary) -> str:
    """Score line and feedback band."""
    return (
        f"🏁 <b>Quiz finished</b>\n\n"
        f"Score: {summary.score}/{summary.total} ({summary.percentage}%)\n\n"
        f"{html.escape(summary.message)}"
    )


def _escape_truncated(text: str, limit: int) -> str:
    """HTML-escape `text` and cut it to `limit` characters without splitting an entity."""
    escaped = html.escape(text)
    if len(escaped) <= limit:
        return escaped
    cut = escaped[:limit - 1]
    amp = cut.rfind("&")
    if amp != -1 and ";" not in cut[amp:]:
        cut = cut[:amp]
    return cut + "…"


def _format_mistake(number: int, mistake: MistakeRecord) -> str:
    lines = [
        f"{number}. <b>{_escape_truncated(mistake.question, MAX_QUESTION_LENGTH)}</b>",
        f"   ❌ Your answer: {_escape_truncated(mistake.user_answer, MAX_FIELD_LENGTH)}",
        f"   ✅ Correct answer: {_escape_truncated(mistake.correct_answer, MAX_FIELD_LENGTH)}",
    ]
    if mistake.explanation:
        lines.append(f"   💡 {_escape_truncated(mistake.explanation, MAX_FIELD_LENGTH)}")
    return "\n".join(lines)


def _format_mistakes(mistakes) -> list[str]:
    """
    Wrong answers split into messages that fit Telegram's limit.

    Returns:
        Empty list when there are no mistakes, so the section is not shown.
    """
    if not mistakes:
        return []

    chunks = []
    current = MISTAKES_HEADER
    for number, mistake in enumerate(mistakes, 1):
        block = f"\n{_format_mistake(number, mistake)}\n"
        if current != MISTAKES_HEADER and len(current) + len(block) > MAX_MESSAGE_LENGTH:
            chunks.append(current.rstrip())
            current = ""
        current += block
    chunks.append(current.rstrip())
    return chunks


async def show_results(message: Message, state: FSMContext, session: QuizSession):
    """Show the final score, then the list of wrong answers if there is one."""
    summary = session.summary()
    logger.info(
        "Quiz finished: %d/%d (%d%%), %d mistakes",
        summary.score, summary.total, summary.percentage, len(summary.mistakes),
    )

    await state.set_state(QuizFlow.viewing_results)
    mistake_chunks = _format_mistakes(summary.mistakes)

    if not mistake_chunks:
        await message.edit_text(
            _format_results(summary), reply_markup=home_keyboard(), parse_mode="HTML"
        )
        return

    await message.edit_text(_format_results(summary), parse_mode="HTML")
    for i, chunk in enumerate(mistake_chunks):
        is_last = i == len(mistake_chunks) - 1
        await message.answer(
            chunk,
            reply_markup=home_keyboard() if is_last else None,
            parse_mode="HTML",
        )
