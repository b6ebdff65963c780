from datetime import datetime, timezone

from santa_quiz import db


def _utcnow():
    return datetime.now(timezone.utc)


class QuizAttempt(db.Model):
    __tablename__ = 'quiz_attempt'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False)
    device_id = db.Column(db.String(128), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False, default=0)
    coins = db.Column(db.Integer, nullable=False, default=0)
    correct_answers = db.Column(db.Integer, nullable=False, default=0)
    wrong_answers = db.Column(db.Integer, nullable=False, default=0)
    total_time_seconds = db.Column(db.Integer, nullable=False, default=0)
    difficulty_level = db.Column(db.String(16), nullable=False, default='medium')
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'score': self.score,
            'coins': self.coins,
            'correct_answers': self.correct_answers,
            'wrong_answers': self.wrong_answers,
            'total_time_seconds': self.total_time_seconds,
            'difficulty_level': self.difficulty_level,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
