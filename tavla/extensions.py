# tavla/extensions.py
"""
Инициализация расширений Flask.

Этот файл централизует создание экземпляров расширений, чтобы избежать
циклических импортов и упростить управление в фабрике приложений (app factory).
"""

from flask_socketio import SocketIO

# --- Расширения Flask ---

# SocketIO для обработки WebSocket соединений.
# Параметры (async_mode, cors_allowed_origins) передаются в init_app из конфига.
socketio = SocketIO(compress=True)
