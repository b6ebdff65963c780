import logging
import math
import random
import threading
from typing import Any, Callable, Dict, Optional, Tuple

from .errors import QuestionSourceError
from .question_source import FALLBACK_QUESTION
from .results import ResultAggregator
from .round_state import AnswerRecord, Mood, Question, QuizResults, RoundState, RoundStatus
from .scoring import MIXED, Difficulty, coins_for_points, format_duration, grade_for, points_for_answer, timer_duration
from .timer import CountdownTimer

TOTAL_QUESTIONS = 10
TIMED_OUT = -1


class RoundController:
    """Drives one player's ten-question round.

    Pipeline per question: loading -> active (countdown running) ->
    evaluating (answer locked, settle delay pending) -> loading the next
    question, or finished after the last one. Every transition goes through
    the scheduler, so a virtual clock can drive the whole round.
    """

    def __init__(self, round_id: str, player_name: str, device_id: str, difficulty: str,
                 question_source, scheduler, aggregator: ResultAggregator,
                 total_questions: int = TOTAL_QUESTIONS, tick_interval: float = 0.1,
                 reveal_delay: float = 1.5, advance_delay: float = 2.0,
                 listener: Optional[Callable[[str, Dict[str, Any]], None]] = None,
                 rng: Optional[random.Random] = None, logger=None):
        if difficulty != MIXED:
            difficulty = Difficulty(difficulty).value
        self.round_id = round_id
        self.player_name = player_name
        self.device_id = device_id
        self.question_source = question_source
        self.scheduler = scheduler
        self.aggregator = aggregator
        self.total_questions = total_questions
        self.reveal_delay = reveal_delay
        self.advance_delay = advance_delay
        self.listener = listener
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)

        self.state = RoundState(difficulty=difficulty)
        self.status = RoundStatus.LOADING
        self.timer = CountdownTimer(scheduler, interval=tick_interval)
        self.question: Optional[Question] = None
        self.question_difficulty: Optional[Difficulty] = None
        self.question_start_time: Optional[float] = None
        self.used_fallback = False
        self.time_remaining: Optional[float] = None
        self.selected_index: Optional[int] = None
        self.last_answer: Optional[AnswerRecord] = None
        self.results: Optional[QuizResults] = None
        self.persisted: Optional[bool] = None
        self.finished_at: Optional[float] = None
        self.discarded = False
        self._settle = None
        self._lock = threading.RLock()

    # ---- events ----

    def start(self) -> None:
        with self._lock:
            self.logger.info(
                f"[round-start] round={self.round_id} player={self.player_name} difficulty={self.state.difficulty}"
            )
            pending = self._enter_loading()
        self._load_question(*pending)

    def select_option(self, index: int) -> bool:
        """Lock in the player's answer. Returns False when the selection is ignored."""
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= 3:
            raise ValueError('option_index must be an integer in 0..3')
        with self._lock:
            if self.discarded or self.status != RoundStatus.ACTIVE or self.selected_index is not None:
                self.logger.info(f"[answer-ignored] round={self.round_id} status={self.status.value} index={index}")
                return False
            handle = self.timer.current
            remaining = handle.remaining if handle is not None else 0.0
            self._evaluate(index, remaining, self.reveal_delay + self.advance_delay)
            return True

    def _on_tick(self, remaining: float) -> None:
        with self._lock:
            if self.discarded or self.status != RoundStatus.ACTIVE:
                return
            self.time_remaining = remaining
            self._emit('timer_tick', {
                'round_id': self.round_id,
                'remaining': remaining,
                'display': math.ceil(remaining),
            })

    def _on_time_up(self) -> None:
        with self._lock:
            if self.discarded or self.status != RoundStatus.ACTIVE or self.selected_index is not None:
                return
            self.logger.info(f"[time-up] round={self.round_id} question={self.state.question_number}")
            self._evaluate(TIMED_OUT, 0.0, self.advance_delay)

    def _advance(self) -> None:
        with self._lock:
            self._settle = None
            if self.discarded or self.status != RoundStatus.EVALUATING:
                return
            if self.state.question_number >= self.total_questions:
                self.results = self.aggregator.finalize(self.state)
                self.status = RoundStatus.FINISHED
                self.finished_at = self.scheduler.now()
                self.logger.info(
                    f"[round-finish] round={self.round_id} score={self.results.score} coins={self.results.coins} "
                    f"correct={self.results.correct_answers} wrong={self.results.wrong_answers}"
                )
                results = self.results
                pending = None
            else:
                self.state.question_number += 1
                pending = self._enter_loading()
        # Slow collaborators are called without holding the lock
        if pending is None:
            self._persist(results)
        else:
            self._load_question(*pending)

    def cancel(self) -> None:
        """Discard the round: no timer, delay or late fetch moves it on afterwards."""
        with self._lock:
            self.discarded = True
            self.timer.cancel()
            self._cancel_settle()
            self.logger.info(f"[round-discard] round={self.round_id} status={self.status.value}")

    # ---- transitions ----

    def _enter_loading(self) -> Tuple[int, Difficulty]:
        self._cancel_settle()
        self.timer.cancel()
        self.status = RoundStatus.LOADING
        self.state.mood = Mood.THINKING
        self.question = None
        self.selected_index = None
        self.time_remaining = None
        self.used_fallback = False
        self.question_difficulty = self._pick_difficulty()
        self._emit_state()
        return self.state.question_number, self.question_difficulty

    def _load_question(self, n: int, difficulty: Difficulty) -> None:
        used_fallback = False
        try:
            question = self.question_source.fetch(difficulty.value, n)
        except QuestionSourceError as exc:
            self.logger.warning(f"[question-fallback] round={self.round_id} question={n} reason={exc}")
            question, used_fallback = FALLBACK_QUESTION, True
        except Exception:
            self.logger.exception(f"[question-fallback] round={self.round_id} question={n} unexpected error")
            question, used_fallback = FALLBACK_QUESTION, True

        with self._lock:
            if self.discarded or self.status != RoundStatus.LOADING or self.state.question_number != n:
                self.logger.info(f"[question-dropped] round={self.round_id} question={n} status={self.status.value}")
                return
            self.used_fallback = used_fallback
            self.question = question.with_difficulty(difficulty.value)
            self.question_start_time = self.scheduler.now()
            self.status = RoundStatus.ACTIVE
            self.state.mood = Mood.IDLE
            duration = timer_duration(difficulty)
            self.time_remaining = float(duration)
            self.timer.start(duration, on_tick=self._on_tick, on_time_up=self._on_time_up)
            self.logger.info(
                f"[timer-set] round={self.round_id} question={n} difficulty={difficulty.value} duration={duration}s"
            )
            self._emit_state()

    def _evaluate(self, selected_index: int, time_remaining: float, settle_delay: float) -> None:
        self.timer.cancel()
        self.status = RoundStatus.EVALUATING
        self.selected_index = selected_index
        self.time_remaining = time_remaining

        now = self.scheduler.now()
        started = self.question_start_time if self.question_start_time is not None else now
        elapsed = max(0.0, now - started)
        self.state.total_time_seconds += elapsed

        is_correct = selected_index == self.question.correct_index
        points = points_for_answer(self.question_difficulty, is_correct, time_remaining)
        coins = coins_for_points(points)
        if is_correct:
            self.state.score += points
            self.state.coins += coins
            self.state.correct_answers += 1
            self.state.mood = Mood.HAPPY
        else:
            self.state.wrong_answers += 1
            self.state.mood = Mood.SAD

        record = AnswerRecord(
            question_number=self.state.question_number,
            selected_index=selected_index,
            is_correct=is_correct,
            time_remaining=time_remaining,
            elapsed=elapsed,
            points=points,
            coins=coins,
        )
        self.state.answers.append(record)
        self.last_answer = record
        self.logger.info(
            f"[answer] round={self.round_id} question={record.question_number} selected={selected_index} "
            f"correct={is_correct} points={points} coins={coins} elapsed={elapsed:.2f}s"
        )
        self._settle = self.scheduler.call_later(settle_delay, self._advance)
        self._emit_state()

    def _persist(self, results: QuizResults) -> None:
        persisted = self.aggregator.persist(results, self.player_name, self.device_id)
        with self._lock:
            self.persisted = persisted
            self._emit_state()

    # ---- helpers ----

    def _pick_difficulty(self) -> Difficulty:
        if self.state.difficulty == MIXED:
            return self.rng.choice(list(Difficulty))
        return Difficulty(self.state.difficulty)

    def _cancel_settle(self) -> None:
        if self._settle is not None:
            self._settle.cancel()
            self._settle = None

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self.listener is None:
            return
        try:
            self.listener(event, payload)
        except Exception:
            self.logger.exception(f"[emit-failed] round={self.round_id} event={event}")

    def _emit_state(self) -> None:
        self._emit('round_update', self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            reveal = self.status in (RoundStatus.EVALUATING, RoundStatus.FINISHED)
            payload = {
                'round_id': self.round_id,
                'player_name': self.player_name,
                'difficulty': self.state.difficulty,
                'status': self.status.value,
                'question_number': self.state.question_number,
                'total_questions': self.total_questions,
                'score': self.state.score,
                'coins': self.state.coins,
                'correct_answers': self.state.correct_answers,
                'wrong_answers': self.state.wrong_answers,
                'total_time': self.state.total_time_seconds,
                'mood': self.state.mood.value,
                'question': self.question.to_dict(reveal=reveal) if self.question else None,
                'question_difficulty': self.question_difficulty.value if self.question_difficulty else None,
                'time_limit': timer_duration(self.question_difficulty) if self.question_difficulty else None,
                'time_remaining': self.time_remaining,
                'display_time': math.ceil(self.time_remaining) if self.time_remaining is not None else None,
                'selected_index': self.selected_index,
                'last_answer': None,
                'results': None,
                'persisted': self.persisted,
                'discarded': self.discarded,
            }
            if self.last_answer is not None and self.status != RoundStatus.LOADING:
                payload['last_answer'] = {
                    'question_number': self.last_answer.question_number,
                    'is_correct': self.last_answer.is_correct,
                    'points': self.last_answer.points,
                    'coins': self.last_answer.coins,
                    'timed_out': self.last_answer.selected_index == TIMED_OUT,
                }
            if self.results is not None:
                grade, message = grade_for(self.results.correct_answers, self.total_questions)
                results = self.results.to_dict()
                results['grade'] = grade
                results['message'] = message
                results['total_time_display'] = format_duration(self.results.total_time)
                payload['results'] = results
            return payload
