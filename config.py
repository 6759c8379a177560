import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///uno.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Seconds a dropped seat is held before the player forfeits
    DISCONNECT_GRACE_SEC = float(os.environ.get('DISCONNECT_GRACE_SEC', '30'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '5'))
    HAND_SIZE = int(os.environ.get('HAND_SIZE', '7'))
    # Bearer token lifetime (seconds)
    TOKEN_MAX_AGE_SEC = int(os.environ.get('TOKEN_MAX_AGE_SEC', str(7 * 24 * 3600)))
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '25'))
    # Mint a fresh deck when both piles run dry instead of closing the room
    REPLENISH_EXHAUSTED_DECK = os.environ.get('REPLENISH_EXHAUSTED_DECK', '1') not in ('0', 'false', 'no')
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000',
        ).split(',') if o.strip()
    ]
