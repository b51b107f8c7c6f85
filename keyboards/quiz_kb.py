from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from core.session import MARK_CORRECT, MARK_INCORRECT, AnswerReview
from qcm_api.models import Question

_MARK_PREFIX = {
    MARK_CORRECT: "✅ ",
    MARK_INCORRECT: "❌ ",
    None: "",
}


def option_letter(index: int) -> str:
    return chr(ord("A") + index)


def question_keyboard(
    question: Question,
    selected: list[int],
    can_go_back: bool,
    can_go_next: bool,
    read_only: bool = False,
) -> InlineKeyboardMarkup:
    """Options of the current question with the selection marked, plus navigation."""
    buttons = []
    for i, option in enumerate(question.options):
        prefix = "🔘 " if i in selected else ""
        buttons.append([InlineKeyboardButton(
            text=f"{prefix}{option_letter(i)}) {option}",
            callback_data="noop" if read_only else f"opt:{i}",
        )])

    nav = []
    if can_go_back:
        nav.append(InlineKeyboardButton(text="⬅️ Previous", callback_data="prev"))
    if can_go_next:
        nav.append(InlineKeyboardButton(text="Next ➡️", callback_data="next"))
    if nav:
        buttons.append(nav)

    buttons.append([InlineKeyboardButton(text="❌ Quit quiz", callback_data="quit_quiz")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def review_keyboard(review: AnswerReview) -> InlineKeyboardMarkup:
    """Inert option buttons coloured by correctness while the correction is shown."""
    buttons = []
    for i, option in enumerate(review.question.options):
        buttons.append([InlineKeyboardButton(
            text=f"{_MARK_PREFIX[review.marks[i]]}{option_letter(i)}) {option}",
            callback_data="noop",
        )])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def quit_confirm_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="✅ Yes, quit", callback_data="quit_confirm"),
            InlineKeyboardButton(text="↩️ Continue", callback_data="quit_cancel"),
        ],
    ])
