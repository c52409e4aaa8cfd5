# tavla/sockets/connection_handlers.py
from flask import request, current_app
from flask_socketio import emit
from ..extensions import socketio
from ..globals import log_event


@socketio.on('connect')
def handle_connect(auth=None):
    sid = request.sid
    log_event("SESSION_START", "Client connected.", sid=sid)
    emit('info', {'message': 'Отправьте create_room или join_room.'})


@socketio.on('disconnect')
def handle_disconnect(*args):
    game_service = current_app.game_service

    sid = request.sid
    log_event("SESSION_END", "Client disconnected.", sid=sid)

    for msg in game_service.handle_disconnect(sid):
        emit(msg['event'], msg['payload'], to=msg['room'])
