from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Round collaborators; tests swap these through app.extensions
    from santa_quiz.services.quiz.leaderboard import LeaderboardStore
    from santa_quiz.services.quiz.question_source import HttpQuestionSource
    from santa_quiz.services.quiz.scheduler import SocketIOScheduler, VirtualScheduler

    if flask_app.config.get('TESTING'):
        scheduler = VirtualScheduler()
    else:
        scheduler = SocketIOScheduler(flask_app, socketio)
    flask_app.extensions['quiz_scheduler'] = scheduler
    flask_app.extensions['question_source'] = HttpQuestionSource(
        flask_app.config.get('QUESTION_SOURCE_URL'),
        api_key=flask_app.config.get('QUESTION_SOURCE_API_KEY'),
        timeout=flask_app.config.get('QUESTION_SOURCE_TIMEOUT_SEC'),
    )
    flask_app.extensions['leaderboard_store'] = LeaderboardStore(
        limit=int(flask_app.config.get('LEADERBOARD_LIMIT', 50))
    )

    # Import and register blueprints here
    from santa_quiz.main import main
    flask_app.register_blueprint(main)

    from santa_quiz.api.rounds import rounds
    flask_app.register_blueprint(rounds, url_prefix='/api/rounds')

    from santa_quiz.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api')

    from santa_quiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the leaderboard tables."""
        import santa_quiz.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
