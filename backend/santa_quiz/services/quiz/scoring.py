import math
from enum import Enum
from typing import Tuple


class Difficulty(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HARD = 'hard'


MIXED = 'mixed'

_BASE_POINTS = {
    Difficulty.LOW: 10,
    Difficulty.MEDIUM: 20,
    Difficulty.HARD: 30,
}

_TIMER_DURATIONS = {
    Difficulty.LOW: 4,
    Difficulty.MEDIUM: 6,
    Difficulty.HARD: 8,
}

# (minimum percentage, grade, message), checked top-down
_GRADES = [
    (90, 'A+', 'Outstanding!'),
    (80, 'A', 'Excellent!'),
    (70, 'B', 'Great Job!'),
    (60, 'C', 'Good Effort!'),
    (50, 'D', 'Keep Practicing!'),
]


def base_points(difficulty: Difficulty) -> int:
    return _BASE_POINTS[Difficulty(difficulty)]


def timer_duration(difficulty: Difficulty) -> int:
    """Seconds on the countdown for a question of this difficulty."""
    return _TIMER_DURATIONS[Difficulty(difficulty)]


def points_for_answer(difficulty: Difficulty, is_correct: bool, time_remaining: float) -> int:
    """Base points plus two points per remaining second, floored.

    Wrong and timed-out answers score nothing.
    """
    if not is_correct:
        return 0
    return base_points(difficulty) + math.floor(max(0.0, time_remaining) * 2)


def coins_for_points(points: int) -> int:
    return points // 5


def grade_for(correct_answers: int, total_questions: int) -> Tuple[str, str]:
    percentage = correct_answers * 100 / total_questions if total_questions else 0
    for threshold, grade, message in _GRADES:
        if percentage >= threshold:
            return grade, message
    return 'F', 'Try Again!'


def format_duration(seconds) -> str:
    seconds = int(seconds)
    mins, secs = divmod(seconds, 60)
    return f"{mins}m {secs}s" if mins > 0 else f"{secs}s"
