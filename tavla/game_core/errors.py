# tavla/game_core/errors.py
"""
Ошибки игрового ядра.

GameRuleError и ее наследники - "мягкие" ошибки: запрос отклоняется,
состояние игры не меняется. Движок ловит их сам и возвращает ActionResult.

InvariantViolation - ошибка движка (нарушен закон сохранения фишек и т.п.),
восстановлению не подлежит.
"""


class GameRuleError(Exception):
    code = "GAME_RULE_ERROR"
    default_message = "Действие невозможно."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self):
        return {'code': self.code, 'message': self.message}


class IllegalMove(GameRuleError):
    code = "ILLEGAL_MOVE"
    default_message = "Недопустимый ход."


class OutOfTurn(GameRuleError):
    code = "OUT_OF_TURN"
    default_message = "Сейчас не ваш ход."


class DiceAlreadyRolled(GameRuleError):
    code = "DICE_ALREADY_ROLLED"
    default_message = "Кубики уже брошены."


class MalformedRequest(GameRuleError):
    code = "MALFORMED_REQUEST"
    default_message = "Некорректный запрос."


class InvariantViolation(RuntimeError):
    """Внутреннее состояние движка испорчено."""
