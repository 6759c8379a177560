from typing import List

from sqlalchemy.exc import SQLAlchemyError

from unoroom import db
from unoroom.models import User


def increment_wins(username: str) -> bool:
    """Add one win for ``username``.

    The increment happens in SQL (``wins = wins + 1``) so two rooms finishing
    at once cannot overwrite each other's win.
    """
    updated = (
        User.query.filter(db.func.lower(User.username) == username.lower())
        .update({User.wins: User.wins + 1}, synchronize_session=False)
    )
    db.session.commit()
    return updated > 0


def record_win(app, username: str, socketio=None) -> None:
    """Fire-and-forget win increment for a finished room."""

    def _worker(name: str):
        with app.app_context():
            try:
                if not increment_wins(name):
                    app.logger.warning(f"[leaderboard-skip] user={name} not found")
            except SQLAlchemyError as exc:
                db.session.rollback()
                app.logger.error(f"[leaderboard-error] user={name} error={exc}")

    if app.config.get('TESTING') or socketio is None:
        _worker(username)
    else:
        socketio.start_background_task(_worker, username)


def top_players(limit: int) -> List[dict]:
    users = User.query.order_by(User.wins.desc(), User.username.asc()).limit(limit).all()
    return [{'username': u.username, 'wins': u.wins} for u in users]
