import time

from flask import current_app

from santa_quiz import socketio
from santa_quiz.services.quiz.scheduler import SocketIOScheduler, VirtualScheduler


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        socketio.sleep(0.01)
    return predicate()


def test_virtual_scheduler_skips_cancelled_calls():
    clock = VirtualScheduler()
    fired = []
    clock.call_later(1.0, lambda: fired.append('kept'))
    dropped = clock.call_later(0.5, lambda: fired.append('dropped'))
    dropped.cancel()
    assert clock.pending() == 1
    clock.advance(1.0)
    assert fired == ['kept']
    assert clock.now() == 1.0


def test_socketio_scheduler_runs_in_app_context_and_honours_cancel(flask_app):
    scheduler = SocketIOScheduler(flask_app, socketio)
    fired = []
    kept = scheduler.call_later(0.05, lambda: fired.append(('kept', current_app.name)))
    dropped = scheduler.call_later(0.05, lambda: fired.append(('dropped', current_app.name)))
    dropped.cancel()

    assert wait_for(lambda: kept.fired)
    # Give the cancelled worker time to wake up as well
    socketio.sleep(0.2)
    assert fired == [('kept', flask_app.name)]
    assert not dropped.fired
    assert not dropped.active


def test_socketio_scheduler_logs_callback_errors(flask_app):
    scheduler = SocketIOScheduler(flask_app, socketio)
    fired = []

    def boom():
        raise RuntimeError('callback failed')

    scheduler.call_later(0.01, boom)
    after = scheduler.call_later(0.05, lambda: fired.append(True))
    assert wait_for(lambda: after.fired and fired)
    assert fired == [True]
