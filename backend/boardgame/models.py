from boardgame import db, bcrypt
from flask_login import UserMixin
from sqlalchemy.orm import validates
from boardgame.services.games.movement import LAST_INDEX, clamp_position

ROLE_PLAYER = 'PLAYER'
ROLE_ADMIN = 'ADMIN'

STATUS_ACTIVE = 'ACTIVE'
STATUS_FINISHED = 'FINISHED'


game_questions = db.Table(
    'game_questions',
    db.Column('game_id', db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), primary_key=True),
    db.Column('question_id', db.Integer, db.ForeignKey('question.id', ondelete='CASCADE'), primary_key=True),
)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_PLAYER)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
        }


class Question(db.Model):
    __tablename__ = 'question'
    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)
    correct_answer = db.Column(db.String(255), nullable=False)
    level = db.Column(db.Integer, nullable=False, default=1)
    # Raw bytes are only served by the image endpoint
    image_data = db.Column(db.LargeBinary, nullable=True)
    image_content_type = db.Column(db.String(100), nullable=True)

    @property
    def has_image(self):
        return bool(self.image_data)

    def to_dict(self, include_answer=True):
        data = {
            'id': self.id,
            'content': self.content,
            'level': self.level,
            'hasImage': self.has_image,
        }
        if include_answer:
            data['correctAnswer'] = self.correct_answer
        return data


class Game(db.Model):
    """One board game room. Slots are derived from PlayerStatus join order."""
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=True)
    status = db.Column(db.String(16), nullable=False, default=STATUS_ACTIVE)  # ACTIVE, FINISHED
    current_turn_slot = db.Column(db.Integer, nullable=False, default=1)
    current_question_id = db.Column(db.Integer, nullable=True)
    # Epoch millis; null when no timer runs (no players yet, or finished)
    turn_ends_at = db.Column(db.BigInteger, nullable=True)
    time_limit_seconds = db.Column(db.Integer, nullable=True, default=300)
    winner_user_id = db.Column(db.Integer, nullable=True)
    winner_username = db.Column(db.String(50), nullable=True)
    finished_at = db.Column(db.BigInteger, nullable=True)

    questions = db.relationship('Question', secondary=game_questions, lazy='selectin')
    players = db.relationship(
        'PlayerStatus',
        back_populates='game',
        order_by='PlayerStatus.id',
        cascade='all, delete-orphan',
    )
    chat_messages = db.relationship(
        'ChatMessage',
        back_populates='game',
        cascade='all, delete-orphan',
    )

    def __init__(self, **kwargs):
        super(Game, self).__init__(**kwargs)
        if self.status is None:
            self.status = STATUS_ACTIVE
        if self.current_turn_slot is None:
            self.current_turn_slot = 1

    @property
    def is_active(self):
        return self.status == STATUS_ACTIVE

    @property
    def is_finished(self):
        return self.status == STATUS_FINISHED

    @property
    def question_ids(self):
        return sorted(q.id for q in self.questions)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'currentTurnSlot': self.current_turn_slot,
            'currentQuestionId': self.current_question_id,
            'turnEndsAt': self.turn_ends_at,
            'timeLimitSeconds': self.time_limit_seconds,
            'playerCount': len(self.players),
            'questionCount': len(self.questions),
            'winnerUserId': self.winner_user_id,
            'winnerUsername': self.winner_username,
            'finishedAt': self.finished_at,
        }


class PlayerStatus(db.Model):
    __tablename__ = 'player_game_status'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'player_id', name='uk_game_player'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    player_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    blocked = db.Column(db.Boolean, nullable=False, default=False)
    has_shield = db.Column(db.Boolean, nullable=False, default=False)
    question_multiplier = db.Column(db.Integer, nullable=False, default=1)
    position = db.Column(db.Integer, nullable=False, default=0)

    game = db.relationship('Game', back_populates='players')
    player = db.relationship('User', lazy='joined')

    def __init__(self, **kwargs):
        kwargs.setdefault('blocked', False)
        kwargs.setdefault('has_shield', False)
        kwargs.setdefault('question_multiplier', 1)
        kwargs.setdefault('position', 0)
        super(PlayerStatus, self).__init__(**kwargs)

    @validates('position')
    def _validate_position(self, key, value):
        return clamp_position(self.position or 0, value)

    @validates('question_multiplier')
    def _validate_multiplier(self, key, value):
        return max(1, int(value))

    @property
    def username(self):
        return self.player.username if self.player else None

    def to_dict(self, slot=None):
        return {
            'slot': slot,
            'userId': self.player_id,
            'username': self.username,
            'position': self.position,
            'blocked': self.blocked,
            'hasShield': self.has_shield,
            'atFinish': self.position == LAST_INDEX,
        }


class ChatMessage(db.Model):
    __tablename__ = 'chat_message'
    __table_args__ = (
        db.Index('idx_chat_game_id_id', 'game_id', 'id'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    text = db.Column(db.String(280), nullable=False)
    created_at = db.Column(db.BigInteger, nullable=False)

    game = db.relationship('Game', back_populates='chat_messages')
    user = db.relationship('User', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'username': self.user.username if self.user else None,
            'text': self.text,
            'createdAt': self.created_at,
        }
