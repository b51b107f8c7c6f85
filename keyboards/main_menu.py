from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

QUESTION_COUNTS = [5, 10, 20]


def main_menu_keyboard(available: int | None, randomize: bool, quick_count: int) -> InlineKeyboardMarkup:
    """Quick start, count presets below `available`, an "all" button, custom count and order toggle."""
    buttons = [[InlineKeyboardButton(
        text=f"▶️ Start ({quick_count} questions)",
        callback_data=f"count:{quick_count}",
    )]]

    row = []
    for count in QUESTION_COUNTS:
        if count == quick_count:
            continue
        if available is not None and count >= available:
            continue
        row.append(InlineKeyboardButton(text=f"{count} questions", callback_data=f"count:{count}"))
    if row:
        buttons.append(row)

    if available and available != quick_count:
        buttons.append([InlineKeyboardButton(
            text=f"📚 All questions ({available})",
            callback_data=f"count:{available}",
        )])

    buttons.append([InlineKeyboardButton(text="✏️ Custom count", callback_data="count:custom")])
    order_text = "🔀 Random order: on" if randomize else "➡️ Random order: off"
    buttons.append([InlineKeyboardButton(text=order_text, callback_data="toggle_random")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def home_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text="🏠 Main menu", callback_data="go_home")],
    ])
