from flask import Blueprint, jsonify, request, current_app
from santa_quiz.services.quiz.device import make_device_id


leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    store = current_app.extensions['leaderboard_store']
    limit = request.args.get('limit', type=int)
    if limit is not None and limit <= 0:
        return jsonify({'error': 'limit must be positive'}), 400
    # Never hand out more than the configured cap
    limit = min(limit or store.limit, store.limit)
    entries = []
    for rank, attempt in enumerate(store.query(limit), start=1):
        entry = attempt.to_dict()
        entry['rank'] = rank
        entries.append(entry)
    return jsonify({'leaderboard': entries})


@leaderboard.route('/devices', methods=['POST'])
def issue_device_id():
    data = request.get_json(silent=True) or {}
    parts = [
        data.get('user_agent') or request.headers.get('User-Agent', ''),
        data.get('language') or request.headers.get('Accept-Language', ''),
        data.get('color_depth'),
        data.get('screen'),
        data.get('timezone_offset'),
        data.get('canvas'),
    ]
    return jsonify({'device_id': make_device_id(parts)}), 201


@leaderboard.route('/devices/<string:device_id>', methods=['GET'])
def get_device(device_id):
    store = current_app.extensions['leaderboard_store']
    attempt = store.find_by_device(device_id)
    return jsonify({
        'device_id': device_id,
        'has_played': attempt is not None,
        'username': attempt.username if attempt else None,
    })
