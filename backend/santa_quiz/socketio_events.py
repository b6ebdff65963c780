from flask_socketio import join_room, leave_room, emit
from santa_quiz import socketio
from santa_quiz.services.quiz.leaderboard import LEADERBOARD_ROOM


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_round(data):
    round_id = (data or {}).get('round_id')
    if not round_id:
        emit('error', {'message': 'round_id is required'})
        return
    room = f"round:{round_id}"
    join_room(room)
    emit('joined', {'room': room})
    # Late joiners get the current state right away
    from santa_quiz.api.rounds import _rounds
    controller = _rounds.get(round_id)
    if controller is not None:
        emit('round_update', controller.to_dict())


def handle_leave_round(data):
    round_id = (data or {}).get('round_id')
    if not round_id:
        emit('error', {'message': 'round_id is required'})
        return
    room = f"round:{round_id}"
    leave_room(room)
    emit('left', {'room': room})


def handle_join_leaderboard(data=None):
    join_room(LEADERBOARD_ROOM)
    emit('joined', {'room': LEADERBOARD_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for ns in namespaces:
        socketio.on_event('connect', handle_connect, namespace=ns)
        socketio.on_event('join_round', handle_join_round, namespace=ns)
        socketio.on_event('leave_round', handle_leave_round, namespace=ns)
        socketio.on_event('join_leaderboard', handle_join_leaderboard, namespace=ns)
        socketio.on_event('ping', handle_ping, namespace=ns)
