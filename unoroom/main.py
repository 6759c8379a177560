from flask import Blueprint, current_app, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from unoroom import db
from unoroom.auth import issue_token
from unoroom.models import User
from unoroom.services.leaderboard import top_players

main = Blueprint('main', __name__)

MIN_USERNAME = 3
MIN_PASSWORD = 4
MAX_LEADERBOARD = 100


def _credentials():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    return username, password


@main.route('/register', methods=['POST'])
def register():
    username, password = _credentials()
    if not username or not password:
        return jsonify({'error': 'Missing username or password'}), 400
    if len(username) < MIN_USERNAME:
        return jsonify({'error': 'Username too short'}), 400
    if len(password) < MIN_PASSWORD:
        return jsonify({'error': 'Password too short'}), 400
    if User.find_by_username(username):
        return jsonify({'error': 'Username already exists'}), 409

    user = User(username=username, wins=0)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info(f"[register] user={user.username}")
    return jsonify({'token': issue_token(user), 'username': user.username}), 201


@main.route('/login', methods=['POST'])
def login():
    username, password = _credentials()
    if not username or not password:
        return jsonify({'error': 'Missing username or password'}), 400
    user = User.find_by_username(username)
    if user is None or not user.check_password(password):
        return jsonify({'error': 'Invalid credentials'}), 401
    login_user(user, remember=True)
    return jsonify({'token': issue_token(user), 'username': user.username})


@main.route('/me')
@login_required
def me():
    return jsonify({'username': current_user.username, 'wins': current_user.wins or 0})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'success': True})


@main.route('/leaderboard')
def leaderboard():
    default_limit = int(current_app.config.get('LEADERBOARD_LIMIT', 25))
    limit = request.args.get('limit', default_limit, type=int)
    limit = max(1, min(limit or default_limit, MAX_LEADERBOARD))
    return jsonify({'leaderboard': top_players(limit)})
