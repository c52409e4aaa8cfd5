from flask import Blueprint, current_app, jsonify

# Создаем новый Blueprint
bp = Blueprint('main', __name__)


@bp.route('/health')
def health():
    """
    Проверка живости сервера.
    """
    return jsonify({
        "status": "ok",
        "rooms": len(current_app.game_service.registry)
    })
