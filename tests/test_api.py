from unoroom.services.leaderboard import increment_wins, top_players


def test_register_and_me(client):
    res = client.post('/api/register', json={'username': 'Alice', 'password': 'secret'})
    assert res.status_code == 201
    data = res.get_json()
    assert data['username'] == 'Alice'
    assert data['token']

    res = client.get('/api/me', headers={'Authorization': f"Bearer {data['token']}"})
    assert res.status_code == 200
    assert res.get_json() == {'username': 'Alice', 'wins': 0}


def test_register_validation(client):
    assert client.post('/api/register', json={'username': 'al'}).status_code == 400
    assert client.post('/api/register', json={'username': 'al', 'password': 'secret'}).status_code == 400
    assert client.post('/api/register', json={'username': 'alice', 'password': 'abc'}).status_code == 400
    assert client.post('/api/register', json={'username': 'alice', 'password': 'secret'}).status_code == 201
    # names are unique regardless of case
    assert client.post('/api/register', json={'username': 'ALICE', 'password': 'secret'}).status_code == 409


def test_login(client, register):
    register('bob')
    res = client.post('/api/login', json={'username': 'bob', 'password': 'wrong'})
    assert res.status_code == 401
    res = client.post('/api/login', json={'username': 'BOB', 'password': 'secret'})
    assert res.status_code == 200
    assert res.get_json()['username'] == 'bob'
    # session cookie from login_user works without a bearer header
    assert client.get('/api/me').status_code == 200
    assert client.post('/api/logout').status_code == 200
    assert client.get('/api/me').status_code == 401


def test_me_rejects_bad_token(client):
    res = client.get('/api/me', headers={'Authorization': 'Bearer not-a-token'})
    assert res.status_code == 401


def test_leaderboard_orders_by_wins(client, register, flask_app):
    for name in ('alice', 'bob', 'carol'):
        register(name)
    increment_wins('bob')
    increment_wins('bob')
    increment_wins('carol')

    res = client.get('/api/leaderboard')
    board = res.get_json()['leaderboard']
    assert [row['username'] for row in board] == ['bob', 'carol', 'alice']
    assert board[0]['wins'] == 2

    res = client.get('/api/leaderboard?limit=1')
    assert len(res.get_json()['leaderboard']) == 1


def test_increment_wins_unknown_user(flask_app):
    assert increment_wins('ghost') is False
    assert top_players(10) == []
