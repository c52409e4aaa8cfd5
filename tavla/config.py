# tavla/config.py

class Config:
    """Базовый класс конфигурации (безопасные значения)."""

    SECRET_KEY = 'super-secret-default-key-SHOULD-BE-CHANGED'

    LOG_FILE = 'application.log'
    EVENT_LOG_FILE = 'game_events.log'
    LOG_LEVEL = 'INFO'

    # --- Socket.IO ---
    # None = автоопределение (eventlet в проде, threading в тестах)
    SOCKETIO_ASYNC_MODE = None
    CORS_ALLOWED_ORIGINS = "*"

    # --- Правила ---
    STARTING_PLAYER = "WHITE"
    # Выброс кубиком больше нужного, если дальше фишек нет
    BEAR_OFF_OVERSHOOT = False

    # --- Комнаты ---
    ROOM_ID_LENGTH = 6
