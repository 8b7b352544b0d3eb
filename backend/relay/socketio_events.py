from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from relay import get_registry, socketio
from relay.models import JoinOutcome
from relay.services.rooms import RoomRegistry


INVALID_RESOURCES_MESSAGE = 'Invalid resources format. Expected 5 whole numbers, each between 0 and 50.'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry() -> RoomRegistry:
    return get_registry(current_app)


def _room_id_from(data):
    """Accept either a bare room id string or ``{"roomId": ...}``."""
    if isinstance(data, dict):
        data = data.get('roomId')
    return RoomRegistry.normalize_id(data)


def _emit_error(code: str, message: str, **extra) -> None:
    payload = {'code': code, 'message': message}
    payload.update(extra)
    emit('error', payload)


def handle_connect(auth=None):
    emit('connected', {'playerId': _get_sid()})


def handle_join_room(data):
    room_id = _room_id_from(data)
    if not room_id:
        _emit_error('bad_request', 'roomId is required')
        return

    registry = _registry()
    sid = _get_sid()
    outcome = registry.join_room(room_id, sid)

    if outcome is JoinOutcome.NOT_FOUND:
        _emit_error('room_not_found', 'Room not found', roomId=room_id)
        return
    if outcome is JoinOutcome.FULL:
        _emit_error('room_full', 'Room is full', roomId=room_id)
        return
    if outcome is JoinOutcome.IN_OTHER_ROOM:
        _emit_error('in_other_room', 'Leave your current room before joining another',
                    roomId=registry.room_of(sid))
        return

    room = registry.get_room(room_id)
    if not room:
        _emit_error('room_not_found', 'Room not found', roomId=room_id)
        return
    join_room(room.id)
    emit('room-joined', {
        'roomId': room.id,
        'players': room.players,
        'started': room.started,
        'state': registry.state_for_player(room.id, sid),
    })
    if outcome is JoinOutcome.ALREADY_MEMBER:
        return

    for other in room.players:
        if other == sid:
            continue
        emit('player-joined', {
            'playerId': sid,
            'roomId': room.id,
            'players': room.players,
            'started': room.started,
            'state': registry.state_for_player(room.id, other),
        }, to=other)

    if outcome is JoinOutcome.STARTED:
        for member in room.players:
            emit('game-started', {
                'roomId': room.id,
                'players': room.players,
                'startedAt': room.started_at.isoformat(),
                'state': registry.state_for_player(room.id, member),
            }, to=member)

    current_app.logger.info(f"[socket-join] room={room.id} player={sid} players={room.player_count}/2")


def handle_update_resources(data):
    data = data if isinstance(data, dict) else {}
    room_id = _room_id_from(data)
    if not room_id:
        _emit_error('bad_request', 'roomId is required')
        return
    registry = _registry()
    sid = _get_sid()

    room = registry.get_room(room_id)
    if not room:
        _emit_error('room_not_found', 'Room not found', roomId=room_id)
        return
    if not room.has_player(sid):
        _emit_error('not_in_room', 'You are not a player in this room', roomId=room.id)
        return
    if not room.started:
        _emit_error('game_not_started', 'Game has not started yet. Wait for second player.', roomId=room.id)
        return

    if not registry.update_resources(room.id, sid, data.get('resources')):
        _emit_error('invalid_resources', INVALID_RESOURCES_MESSAGE, roomId=room.id)
        return

    resources = registry.get_resources(room.id, sid)
    emit('resources-updated', {
        'roomId': room.id,
        'playerId': sid,
        'resources': resources,
    }, to=room.id, include_self=False)
    emit('resources-accepted', {'roomId': room.id, 'resources': resources})


def _notify_left(room_id: str, player: str) -> None:
    room = _registry().get_room(room_id)
    if not room:
        return
    emit('player-left', {
        'roomId': room_id,
        'playerId': player,
        'players': room.players,
    }, to=room_id, include_self=False)


def handle_leave_room(data):
    room_id = _room_id_from(data)
    if not room_id:
        _emit_error('bad_request', 'roomId is required')
        return
    registry = _registry()
    sid = _get_sid()

    room = registry.get_room(room_id)
    if not room:
        _emit_error('room_not_found', 'Room not found', roomId=room_id)
        return
    if not room.has_player(sid):
        _emit_error('not_in_room', 'You are not a player in this room', roomId=room.id)
        return

    registry.leave_room(room.id, sid)
    leave_room(room.id)
    emit('room-left', {'roomId': room.id})
    _notify_left(room.id, sid)


def handle_disconnect(reason=None):
    sid = _get_sid()
    for room_id in _registry().leave_all_rooms(sid):
        _notify_left(room_id, sid)
    current_app.logger.info(f"[socket-disconnect] player={sid} reason={reason}")


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register the room gateway's Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('update-resources', handle_update_resources, namespace=namespace)
    socketio.on_event('leave-room', handle_leave_room, namespace=namespace)
