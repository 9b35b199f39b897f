import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///boardgame.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Per-turn budget for new rooms (seconds)
    DEFAULT_TIME_LIMIT_SEC = int(os.environ.get('DEFAULT_TIME_LIMIT_SEC', '300'))
    # Used when a room has no time limit stored
    FALLBACK_TIME_LIMIT_SEC = int(os.environ.get('FALLBACK_TIME_LIMIT_SEC', '10'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '4'))
    # Chat paging and message cap
    CHAT_HISTORY_LIMIT = int(os.environ.get('CHAT_HISTORY_LIMIT', '50'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '280'))
    # Optional: fixed seed for prize card draws. Unset uses system randomness.
    PRIZE_CARD_SEED = os.environ.get('PRIZE_CARD_SEED')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
