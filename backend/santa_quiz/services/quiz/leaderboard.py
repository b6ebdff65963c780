from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from santa_quiz import db, socketio
from santa_quiz.models import QuizAttempt
from .errors import PersistenceError

LEADERBOARD_ROOM = 'leaderboard'


class LeaderboardStore:
    """Insert-and-query access to quiz attempts.

    Successful inserts push `leaderboard_update` to the leaderboard room so
    viewers know to re-query.
    """

    def __init__(self, limit: int = 50):
        self.limit = limit

    def insert(self, attempt: dict) -> QuizAttempt:
        row = QuizAttempt(**attempt)
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise PersistenceError(str(exc)) from exc
        try:
            socketio.emit('leaderboard_update', {'id': row.id}, to=LEADERBOARD_ROOM, namespace='/ws')
        except Exception:
            # Row is already committed
            current_app.logger.exception(f"[leaderboard-emit-failed] attempt={row.id}")
        return row

    def query(self, limit: Optional[int] = None) -> List[QuizAttempt]:
        return (
            QuizAttempt.query
            .order_by(QuizAttempt.score.desc(), QuizAttempt.total_time_seconds.asc(), QuizAttempt.id.asc())
            .limit(limit or self.limit)
            .all()
        )

    def find_by_device(self, device_id: str) -> Optional[QuizAttempt]:
        return QuizAttempt.query.filter_by(device_id=device_id).order_by(QuizAttempt.id.asc()).first()
