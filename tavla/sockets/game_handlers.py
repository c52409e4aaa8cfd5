# tavla/sockets/game_handlers.py

from flask import request, current_app
from flask_socketio import emit
from ..extensions import socketio
from ..globals import log_event


@socketio.on('create_room')
def handle_create_room(data=None):
    game_service = current_app.game_service
    sid = request.sid

    notifications = game_service.create_room(sid)
    for msg in notifications:
        emit(msg['event'], msg['payload'], to=msg['room'])


@socketio.on('join_room')
def handle_join_room(data=None):
    game_service = current_app.game_service
    sid = request.sid

    notifications = game_service.join_room(sid, data)
    for msg in notifications:
        emit(msg['event'], msg['payload'], to=msg['room'])


@socketio.on('roll')
def handle_roll(data=None):
    game_service = current_app.game_service
    sid = request.sid

    notifications = game_service.roll(sid)
    for msg in notifications:
        emit(msg['event'], msg['payload'], to=msg['room'])


@socketio.on('move')
def handle_move(data=None):
    """
    Один шаг {from, to, die}. Выброс: to = "off".
    """
    game_service = current_app.game_service
    sid = request.sid

    if data is None:
        log_event("INVALID_REQUEST", "move received without payload.", sid=sid)

    notifications = game_service.move(sid, data)
    for msg in notifications:
        emit(msg['event'], msg['payload'], to=msg['room'])


@socketio.on('request_sync')
def handle_request_sync(data=None):
    """Клиент просит текущий снимок (например, после перерисовки)."""
    game_service = current_app.game_service
    sid = request.sid

    for msg in game_service.sync(sid):
        emit(msg['event'], msg['payload'], to=msg['room'])
