from flask_socketio import ConnectionRefusedError

from unoroom import db, room_manager, socketio
from unoroom.models import User


def _states(sio_client):
    return [e['args'][0] for e in sio_client.get_received('/ws') if e['name'] == 'state']


def test_connect_requires_token(flask_app):
    try:
        test_client = socketio.test_client(flask_app, namespace='/ws', auth={'token': 'forged'})
    except ConnectionRefusedError:
        return
    assert not test_client.is_connected('/ws')


def test_connect_and_ping(register, sio_for):
    alice = sio_for(register('alice'))
    assert alice.is_connected('/ws')
    received = alice.get_received('/ws')
    assert any(pkt['name'] == 'connected' and pkt['args'][0]['username'] == 'alice' for pkt in received)
    alice.emit('ping', {'n': 1}, namespace='/ws')
    assert any(pkt['name'] == 'pong' for pkt in alice.get_received('/ws'))


def test_create_join_and_private_state(register, sio_for):
    alice = sio_for(register('alice'))
    bob = sio_for(register('bob'))
    alice.get_received('/ws')
    bob.get_received('/ws')

    ack = alice.emit('create_room', {}, namespace='/ws', callback=True)
    assert ack['ok'] is True
    code = ack['code']

    ack = bob.emit('join_room', {'code': code.lower()}, namespace='/ws', callback=True)
    assert ack == {'ok': True, 'code': code}

    alice_state = _states(alice)[-1]
    bob_state = _states(bob)[-1]
    assert alice_state['status'] == 'playing'
    assert len(alice_state['your_hand']) == 7
    assert alice_state['opponent']['cards'] == 7
    assert alice_state['draw_pile'] == 93
    assert bob_state['you'] == 'bob'
    alice_ids = {c['id'] for c in alice_state['your_hand']}
    assert not alice_ids & {c['id'] for c in bob_state['your_hand']}


def test_errors_are_acked_to_caller_only(register, sio_for):
    alice = sio_for(register('alice'))
    bob = sio_for(register('bob'))
    code = alice.emit('create_room', {}, namespace='/ws', callback=True)['code']
    bob.emit('join_room', {'code': code}, namespace='/ws', callback=True)
    alice.get_received('/ws')
    bob.get_received('/ws')

    ack = bob.emit('draw_card', {'code': code}, namespace='/ws', callback=True)
    assert ack['ok'] is False
    assert ack['error'] == 'not_your_turn'
    assert alice.get_received('/ws') == []

    ack = bob.emit('play_card', {'code': code}, namespace='/ws', callback=True)
    assert ack['error'] == 'malformed_payload'

    ack = bob.emit('join_room', {'code': 'NOPE1'}, namespace='/ws', callback=True)
    assert ack['error'] == 'room_not_found'


def test_draw_ack_reveals_card_to_drawer(register, sio_for):
    alice = sio_for(register('alice'))
    bob = sio_for(register('bob'))
    code = alice.emit('create_room', {}, namespace='/ws', callback=True)['code']
    bob.emit('join_room', {'code': code}, namespace='/ws', callback=True)
    bob.get_received('/ws')

    ack = alice.emit('draw_card', {'code': code}, namespace='/ws', callback=True)
    assert ack['ok'] is True
    drawn = ack['card']['id']
    bob_state = _states(bob)[-1]
    assert bob_state['last_event']['type'] == 'draw'
    assert drawn not in str(bob_state)


def test_quit_awards_leaderboard_win(register, sio_for, flask_app):
    alice = sio_for(register('alice'))
    bob = sio_for(register('bob'))
    code = alice.emit('create_room', {}, namespace='/ws', callback=True)['code']
    bob.emit('join_room', {'code': code}, namespace='/ws', callback=True)
    bob.get_received('/ws')

    ack = alice.emit('leave_room', {'code': code}, namespace='/ws', callback=True)
    assert ack == {'ok': True}
    bob_state = _states(bob)[-1]
    assert bob_state['status'] == 'finished'
    assert bob_state['winner'] == 'bob'
    # the win is written from its own app context
    db.session.expire_all()
    assert User.find_by_username('bob').wins == 1


def test_disconnect_holds_seat(register, sio_for):
    alice = sio_for(register('alice'))
    bob_token = register('bob')
    bob = sio_for(bob_token)
    code = alice.emit('create_room', {}, namespace='/ws', callback=True)['code']
    bob.emit('join_room', {'code': code}, namespace='/ws', callback=True)
    room = room_manager.get_room(code)
    hand = list(room.players['bob'].hand)

    bob.disconnect(namespace='/ws')
    assert room.players['bob'].grace_timer is not None
    assert room.status.value == 'playing'

    bob_again = sio_for(bob_token)
    ack = bob_again.emit('reconnect_room', {'code': code}, namespace='/ws', callback=True)
    assert ack == {'ok': True, 'code': code}
    assert room.players['bob'].grace_timer is None
    assert room.players['bob'].hand == hand
    assert _states(bob_again)[-1]['status'] == 'playing'
