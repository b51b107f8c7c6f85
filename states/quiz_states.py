from aiogram.fsm.state import StatesGroup, State


class QuizFlow(StatesGroup):
    choosing_count = State()
    entering_custom_count = State()
    loading_quiz = State()
    answering_question = State()
    viewing_results = State()
