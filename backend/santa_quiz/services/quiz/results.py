import logging
import math

from .errors import PersistenceError
from .round_state import QuizResults, RoundState
from .scoring import MIXED, Difficulty


def finalize(state: RoundState) -> QuizResults:
    """Snapshot the accumulators; no further scoring happens here."""
    return QuizResults(
        score=state.score,
        coins=state.coins,
        correct_answers=state.correct_answers,
        wrong_answers=state.wrong_answers,
        total_time=state.total_time_seconds,
        difficulty=state.difficulty,
    )


def attempt_record(results: QuizResults, player_name: str, device_id: str) -> dict:
    # Mixed rounds are stored as medium
    level = Difficulty.MEDIUM.value if results.difficulty == MIXED else results.difficulty
    return {
        'username': player_name,
        'device_id': device_id,
        'score': results.score,
        'coins': results.coins,
        'correct_answers': results.correct_answers,
        'wrong_answers': results.wrong_answers,
        'total_time_seconds': int(math.floor(results.total_time)),
        'difficulty_level': level,
    }


class ResultAggregator:
    """Turns a finished round into results and makes one best-effort write."""

    def __init__(self, store, logger=None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def finalize(self, state: RoundState) -> QuizResults:
        return finalize(state)

    def persist(self, results: QuizResults, player_name: str, device_id: str) -> bool:
        record = attempt_record(results, player_name, device_id)
        try:
            self.store.insert(record)
        except PersistenceError as exc:
            self.logger.error(f"[persist-failed] player={player_name} device={device_id} error={exc}")
            return False
        except Exception:
            self.logger.exception(f"[persist-failed] player={player_name} device={device_id} unexpected error")
            return False
        self.logger.info(f"[persist] player={player_name} score={results.score} time={record['total_time_seconds']}s")
        return True
