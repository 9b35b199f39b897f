from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Import and register blueprints here
    from boardgame.main import main
    flask_app.register_blueprint(main)

    from boardgame.api.games import games
    from boardgame.api.chat import chat
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')
    flask_app.register_blueprint(chat, url_prefix='/api/games')

    from boardgame.api.questions import questions
    flask_app.register_blueprint(questions, url_prefix='/api/questions')

    from boardgame.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from boardgame.services.games.errors import GameError

    @flask_app.errorhandler(GameError)
    def handle_game_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(404)
    def handle_not_found(exc):
        return jsonify({'error': 'Not found'}), 404

    # Flask-Login user loader
    from boardgame.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return User.query.filter_by(id=int(user_id)).first()

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from boardgame.models import User, Question, ROLE_ADMIN
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = User(username='admin', role=ROLE_ADMIN)
            admin.set_password('password')
            db.session.add(admin)

            # Seed players
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)

            seed_questions = [
                ('What is the closest star to Earth?', 'The Sun', 1),
                ('Which planet is known as the Red Planet?', 'Mars', 1),
                ('What is the largest planet in our solar system?', 'Jupiter', 1),
                ('How many moons does Mars have?', '2', 2),
                ('What galaxy do we live in?', 'The Milky Way', 2),
            ]
            for content, answer, level in seed_questions:
                db.session.add(Question(content=content, correct_answer=answer, level=level))

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
