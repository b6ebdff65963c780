from flask import Blueprint, jsonify, request, current_app, abort
from santa_quiz import socketio
from santa_quiz.services.quiz.results import ResultAggregator
from santa_quiz.services.quiz.round_controller import RoundController
from santa_quiz.services.quiz.round_state import RoundStatus
from santa_quiz.services.quiz.scoring import MIXED, Difficulty
from threading import Lock
from typing import Dict, Optional
from uuid import uuid4


rounds = Blueprint('rounds', __name__)

# Live rounds keyed by round id (runtime-only)
_rounds: Dict[str, RoundController] = {}
_rounds_lock = Lock()

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 20


def validate_player_name(name) -> Optional[str]:
    """Return an error message for a bad player name, or None."""
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        return 'Please enter your name to start!'
    if len(name) < NAME_MIN_LENGTH:
        return f'Name must be at least {NAME_MIN_LENGTH} characters!'
    if len(name) > NAME_MAX_LENGTH:
        return f'Name must be less than {NAME_MAX_LENGTH} characters!'
    return None


def _round_room(round_id: str) -> str:
    return f"round:{round_id}"


def _make_listener(round_id: str):
    def _listener(event, payload):
        socketio.emit(event, payload, to=_round_room(round_id), namespace='/ws')
    return _listener


def _is_live(controller: RoundController) -> bool:
    return not controller.discarded and controller.status != RoundStatus.FINISHED


def sweep_rounds(now: float, retention: float) -> int:
    """Drop discarded rounds and finished rounds older than `retention` seconds."""
    with _rounds_lock:
        stale = [
            round_id for round_id, controller in _rounds.items()
            if controller.discarded
            or (controller.finished_at is not None and now - controller.finished_at >= retention)
        ]
        for round_id in stale:
            del _rounds[round_id]
    if stale:
        current_app.logger.info(f"[round-sweep] dropped={len(stale)} remaining={len(_rounds)}")
    return len(stale)


def _sweep() -> None:
    sweep_rounds(
        current_app.extensions['quiz_scheduler'].now(),
        float(current_app.config.get('ROUND_RETENTION_SEC', 300)),
    )


def get_round(round_id: str) -> RoundController:
    controller = _rounds.get(round_id)
    if controller is None:
        abort(404)
    return controller


@rounds.route('', methods=['POST'])
def start_round():
    data = request.get_json(silent=True) or {}
    name_error = validate_player_name(data.get('name'))
    if name_error:
        return jsonify({'error': name_error}), 400
    name = data.get('name').strip()

    device_id = data.get('device_id')
    if not device_id or not isinstance(device_id, str):
        return jsonify({'error': 'device_id is required'}), 400

    difficulty = data.get('difficulty') or Difficulty.MEDIUM.value
    if difficulty != MIXED and difficulty not in {d.value for d in Difficulty}:
        return jsonify({'error': f'Unknown difficulty {difficulty}'}), 400

    _sweep()
    cfg = current_app.config
    store = current_app.extensions['leaderboard_store']
    if not cfg.get('ALLOW_REPLAY_FROM_DEVICE'):
        existing = store.find_by_device(device_id)
        if existing is not None:
            return jsonify({
                'error': 'You have already played this quiz from this device',
                'username': existing.username,
            }), 409

    round_id = uuid4().hex
    controller = RoundController(
        round_id=round_id,
        player_name=name,
        device_id=device_id,
        difficulty=difficulty,
        question_source=current_app.extensions['question_source'],
        scheduler=current_app.extensions['quiz_scheduler'],
        aggregator=ResultAggregator(store, logger=current_app.logger),
        total_questions=int(cfg.get('TOTAL_QUESTIONS', 10)),
        tick_interval=float(cfg.get('TICK_INTERVAL_SEC', 0.1)),
        reveal_delay=float(cfg.get('REVEAL_DELAY_SEC', 1.5)),
        advance_delay=float(cfg.get('ADVANCE_DELAY_SEC', 2.0)),
        listener=_make_listener(round_id),
        logger=current_app.logger,
    )
    with _rounds_lock:
        # One live round per device, even when replays are allowed
        if any(c.device_id == device_id and _is_live(c) for c in _rounds.values()):
            return jsonify({'error': 'A round is already in progress on this device'}), 409
        _rounds[round_id] = controller
    controller.start()
    return jsonify(controller.to_dict()), 201


@rounds.route('/<string:round_id>', methods=['GET'])
def get_round_state(round_id):
    _sweep()
    return jsonify(get_round(round_id).to_dict())


@rounds.route('/<string:round_id>/answer', methods=['POST'])
def submit_answer(round_id):
    controller = get_round(round_id)
    data = request.get_json(silent=True) or {}
    try:
        accepted = controller.select_option(data.get('option_index'))
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    payload = controller.to_dict()
    payload['accepted'] = accepted
    return jsonify(payload)


@rounds.route('/<string:round_id>', methods=['DELETE'])
def discard_round(round_id):
    with _rounds_lock:
        controller = _rounds.pop(round_id, None)
    if controller is None:
        abort(404)
    controller.cancel()
    return jsonify({'ok': True})
