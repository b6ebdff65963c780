from flask import Blueprint, jsonify, current_app

from santa_quiz.services.quiz.scoring import Difficulty, base_points, timer_duration

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Christmas quiz server!'})


@main.route('/api/config', methods=['GET'])
def quiz_config():
    cfg = current_app.config
    return jsonify({
        'total_questions': int(cfg.get('TOTAL_QUESTIONS', 10)),
        'difficulties': [d.value for d in Difficulty] + ['mixed'],
        # Include per-difficulty timers so clients can draw countdown rings
        'durations': {d.value: timer_duration(d) for d in Difficulty},
        'base_points': {d.value: base_points(d) for d in Difficulty},
        'reveal_delay': float(cfg.get('REVEAL_DELAY_SEC', 1.5)),
        'advance_delay': float(cfg.get('ADVANCE_DELAY_SEC', 2.0)),
    })
