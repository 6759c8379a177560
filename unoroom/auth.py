"""Bearer tokens for HTTP and socket callers.

Tokens are signed with the app's SECRET_KEY via itsdangerous and carry the
username. ``authenticate`` is the only place an identity is derived; the
game never trusts a username sent inside an action payload.
"""

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from unoroom.game.errors import Unauthorized

TOKEN_SALT = 'unoroom-auth'


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def issue_token(user) -> str:
    return _serializer().dumps({'id': user.id, 'username': user.username})


def load_token_user(token):
    """Return the User a token belongs to, or raise Unauthorized."""
    from unoroom.models import User

    if not token or not isinstance(token, str):
        raise Unauthorized('Missing credential')
    max_age = int(current_app.config.get('TOKEN_MAX_AGE_SEC', 7 * 24 * 3600))
    try:
        data = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise Unauthorized('Credential expired')
    except BadSignature:
        raise Unauthorized('Invalid credential')
    user = User.query.get(data.get('id')) if isinstance(data, dict) else None
    if user is None or user.username != data.get('username'):
        raise Unauthorized('Unknown user')
    return user


def authenticate(token) -> str:
    return load_token_user(token).username


def bearer_token(header_value) -> str:
    header_value = header_value or ''
    if header_value.startswith('Bearer '):
        return header_value[len('Bearer '):].strip()
    return ''
