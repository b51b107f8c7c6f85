"""Main menu: available count discovery, count and order selection."""
import logging
from typing import Optional

from aiogram import Router, F
from aiogram.filters import CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from config import settings
from core.registry import sessions
from handlers.quiz import LOADING_TEXT, start_quiz
from keyboards.main_menu import main_menu_keyboard
from qcm_api.client import QcmClient
from qcm_api.exceptions import QcmAPIError
from states.quiz_states import QuizFlow

logger = logging.getLogger(__name__)

router = Router()

WELCOME_TEXT = "👋 Hi! I'm QCM Bot, a multiple-choice quiz."


def _clamp_count(count: int, available: Optional[int]) -> int:
    """Keep a requested count within [1, available]."""
    if available is not None:
        count = min(count, available)
    return max(1, count)


def _format_menu(available: Optional[int]) -> str:
    if available is None:
        return f"{WELCOME_TEXT}\n\n⚠️ Could not reach the quiz server, the question count is unknown."
    return f"{WELCOME_TEXT}\n\n📚 {available} questions available.\nHow many do you want?"


async def _discover_available() -> Optional[int]:
    """Ask the provider how many questions it holds. None if it is unreachable."""
    client = QcmClient()
    try:
        return await client.get_available_count()
    except QcmAPIError as e:
        logger.warning("Could not discover question count: %s", e)
        return None
    finally:
        await client.close()


async def show_main_menu(message: Message, state: FSMContext, edit: bool = False):
    """Show the menu, refreshing the available question count."""
    data = await state.get_data()
    randomize = data.get("randomize", False)
    available = await _discover_available()

    await state.set_state(QuizFlow.choosing_count)
    await state.update_data(available=available, randomize=randomize)

    keyboard = main_menu_keyboard(
        available, randomize, _clamp_count(settings.DEFAULT_QUESTION_COUNT, available)
    )
    text = _format_menu(available)
    if edit:
        await message.edit_text(text, reply_markup=keyboard)
    else:
        await message.answer(text, reply_markup=keyboard)


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    sessions.discard(message.from_user.id)
    await state.clear()
    await show_main_menu(message, state)


@router.callback_query(F.data == "go_home")
async def go_home(callback: CallbackQuery, state: FSMContext):
    sessions.discard(callback.from_user.id)
    await show_main_menu(callback.message, state, edit=True)
    await callback.answer()


@router.callback_query(QuizFlow.choosing_count, F.data == "toggle_random")
async def toggle_random(callback: CallbackQuery, state: FSMContext):
    data = await state.get_data()
    randomize = not data.get("randomize", False)
    available = data.get("available")
    await state.update_data(randomize=randomize)

    await callback.message.edit_reply_markup(reply_markup=main_menu_keyboard(
        available, randomize, _clamp_count(settings.DEFAULT_QUESTION_COUNT, available)
    ))
    await callback.answer("Random order on" if randomize else "Random order off")


@router.callback_query(QuizFlow.choosing_count, F.data.startswith("count:"))
async def count_selected(callback: CallbackQuery, state: FSMContext):
    value = callback.data.split(":", 1)[1]
    data = await state.get_data()
    available = data.get("available")

    if value == "custom":
        await state.set_state(QuizFlow.entering_custom_count)
        limit = f" (1-{available})" if available else ""
        await callback.message.edit_text(f"✏️ How many questions?{limit}")
        await callback.answer()
        return

    try:
        count = _clamp_count(int(value), available)
    except ValueError:
        logger.warning("Invalid callback_data: %s", callback.data)
        await callback.answer()
        return

    await callback.answer()
    await callback.message.edit_text(LOADING_TEXT)
    await start_quiz(
        callback.message, state, callback.from_user.id, count, data.get("randomize", False)
    )


@router.message(QuizFlow.entering_custom_count)
async def custom_count_entered(message: Message, state: FSMContext):
    text = (message.text or "").strip()
    if not text.isdecimal() or int(text) == 0:
        await message.answer("Please send a positive number:")
        return

    data = await state.get_data()
    count = _clamp_count(int(text), data.get("available"))

    loading = await message.answer(LOADING_TEXT)
    await start_quiz(loading, state, message.from_user.id, count, data.get("randomize", False))
