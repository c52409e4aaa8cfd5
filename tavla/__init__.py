import os
import logging
from flask import Flask
from .extensions import socketio
from .globals import log_event

# Получаем логгер
logger = logging.getLogger(__name__)


def _configure_logging(app):
    """Настраивает файловый логгер."""
    level = getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO)
    file_handler = logging.FileHandler(app.config['LOG_FILE'], encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))
    # app.logger - это логгер 'tavla', родитель всех логгеров пакета
    app.logger.addHandler(file_handler)
    app.logger.setLevel(level)
    logger.info("Файловый логгер настроен.")


def _init_extensions(app):
    """Инициализирует расширения Flask."""
    socketio.init_app(
        app,
        async_mode=app.config['SOCKETIO_ASYNC_MODE'],
        cors_allowed_origins=app.config['CORS_ALLOWED_ORIGINS']
    )
    logger.info("Расширения Flask (SocketIO) инициализированы.")


def _init_services(app):
    """Инициализирует и внедряет сервисы приложения."""

    # Импорты сервисов делаем здесь, чтобы избежать циклических зависимостей.
    from .services.game_service import GameService
    from .services.game_factory import GameFactory
    from .services.game_registry import GameRegistry

    registry = GameRegistry(log_event_func=log_event)
    game_factory = GameFactory(config=app.config, log_event=log_event)

    # Прикрепляем главный сервис к экземпляру приложения
    app.game_service = GameService(registry=registry, factory=game_factory)
    logger.info("Игровые сервисы (GameService, Factory, Registry) инициализированы.")


def _register_blueprints(app):
    """Регистрирует все маршруты API (Blueprints)."""
    from .api.main_routes import bp as main_bp
    app.register_blueprint(main_bp)

    logger.info("Blueprints (маршруты API) зарегистрированы.")


def _register_socketio_handlers():
    """
    Импортирует обработчики SocketIO для их регистрации.
    """
    # Этот импорт регистрирует обработчики в экземпляре socketio
    from .sockets import connection_handlers  # noqa: F401
    from .sockets import game_handlers  # noqa: F401
    logger.info("Обработчики SocketIO (connection, game) зарегистрированы.")


def create_app(config_overrides=None):
    """
    Фабрика приложений (Паттерн Application Factory).
    """

    app = Flask(__name__, instance_relative_config=True)

    # 1. Загрузка конфигурации
    app.config.from_object('tavla.config.Config')
    app.config.from_pyfile('config.py', silent=True)
    if config_overrides:
        app.config.update(config_overrides)

    for key in ('LOG_FILE', 'EVENT_LOG_FILE'):
        if not os.path.isabs(app.config[key]):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config[key] = os.path.join(app.instance_path, app.config[key])

    # 2. Настройка логирования
    _configure_logging(app)

    # 3. Регистрация обработчиков SocketIO.
    # Должна идти до init_app, иначе повторный вызов фабрики их потеряет.
    _register_socketio_handlers()

    # 4. Инициализация расширений
    _init_extensions(app)

    # 5. Инициализация сервисов
    _init_services(app)

    # 6. Регистрация Blueprints (маршрутов API)
    _register_blueprints(app)

    app.logger.info("Приложение 'tavla-server' создано.")
    app.logger.info(f"Путь к логам: {app.config['LOG_FILE']}")

    return app, socketio
