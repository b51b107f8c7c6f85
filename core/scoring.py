"""Final score percentage and feedback band."""
import math

# (lower bound in percent, message), checked top to bottom
FEEDBACK_BANDS = [
    (80, "🏆 Excellent! You mastered the subject perfectly!"),
    (60, "👍 Well done! A few revisions and you'll be perfect!"),
    (40, "📚 Not bad, but there's still work to do!"),
    (0, "💪 Don't get discouraged, keep learning!"),
]


def score_percentage(score: int, total: int) -> int:
    """Percentage of correct answers rounded half up, 0 for an empty quiz."""
    if total <= 0:
        return 0
    return int(math.floor(score / total * 100 + 0.5))


def feedback_message(percentage: int) -> str:
    for lower_bound, message in FEEDBACK_BANDS:
        if percentage >= lower_bound:
            return message
    return FEEDBACK_BANDS[-1][1]
