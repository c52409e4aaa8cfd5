import eventlet
eventlet.monkey_patch()

# 2. Обычные импорты
import argparse
import logging
from tavla import create_app

logger = logging.getLogger("tavla.run")

# 3. Создаем приложение
app, socketio = create_app()

if __name__ == '__main__':

    # 4. Настраиваем парсер аргументов
    parser = argparse.ArgumentParser(description='Запуск Flask-SocketIO сервера нард.')

    parser.add_argument(
        '-e', '--env',
        default='local',
        choices=['local', 'prod'],
        help='Режим запуска: local (для разработки) или prod (для боевого сервера). По умолчанию: local.'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=None,
        help='Порт (по умолчанию 8080 для prod и 4999 для local).'
    )

    # 5. Считываем аргументы
    args = parser.parse_args()

    # 6. Выбираем, как запускать сервер

    if args.env == 'prod':
        port = args.port or 8080
        logger.info(f"Запуск в режиме PRODUCTION (prod) на 0.0.0.0:{port}...")

        socketio.run(app,
                     host='0.0.0.0',
                     port=port,
                     debug=False
                     )

    else:
        port = args.port or 4999
        logger.info(f"Запуск в режиме LOCAL (dev) на 127.0.0.1:{port}...")

        socketio.run(app,
                     host='127.0.0.1',
                     port=port,
                     debug=True,
                     allow_unsafe_werkzeug=True  # Нужно для debug=True при использовании eventlet
                     )
