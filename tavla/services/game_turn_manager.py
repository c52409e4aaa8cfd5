# tavla/services/game_turn_manager.py

import threading
from typing import TYPE_CHECKING, Callable, Dict, Any, List

from tavla.api.schemas import dump_snapshot, load_move_request
from tavla.game_core.errors import GameRuleError

if TYPE_CHECKING:
    from tavla.game_core.engine import GameEngine
    from .game_player_manager import GamePlayerManager

Notification = Dict[str, Any]


class GameTurnManager:
    """
    Управляет логикой одного хода: бросок, применение шага,
    передача хода (в т.ч. вынужденный пропуск) и проверка победы.

    Движок сам не передает ход - это делает этот класс, когда
    движок сообщает, что ходов больше нет.
    """
    def __init__(self, game_id: str, log_event: Callable):
        self.game_id = game_id
        self.lock = threading.RLock()
        self.log_event = log_event

    def set_lock(self, lock: threading.RLock):
        """Устанавливает внешний RLock из GameSession."""
        self.lock = lock

    # --- Уведомления ---

    def state_notifications(self, engine: 'GameEngine', player_manager: 'GamePlayerManager') -> List[Notification]:
        payload = dump_snapshot(engine.snapshot())
        return [
            {'event': 'state', 'payload': payload, 'room': sid}
            for sid in player_manager.get_all_sids()
        ]

    def _broadcast(self, player_manager: 'GamePlayerManager', event: str, payload: dict) -> List[Notification]:
        return [{'event': event, 'payload': payload, 'room': sid} for sid in player_manager.get_all_sids()]

    @staticmethod
    def _rejection(sid: str, error: GameRuleError) -> Notification:
        return {'event': 'move_rejection', 'payload': error.to_payload(), 'room': sid}

    # --- Бросок ---

    def roll_dice_for_player(self, engine: 'GameEngine', player_manager: 'GamePlayerManager', sid: str) -> List[Notification]:
        """
        1. Проверяет, что игрок за столом.
        2. Бросает кубики (движок сам проверяет очередь и кубики).
        3. Если ходов нет - объявляет вынужденный пропуск и передает ход.
        """
        with self.lock:
            notifications = []

            player_context = player_manager.get_player_context(sid)
            if player_context is None:
                self.log_event("AUTH_ERROR", f"Player not found for sid {sid}", sid=sid, game_id=self.game_id)
                return notifications

            player, _ = player_context

            result = engine.roll_dice(player)
            if not result.ok:
                self.log_event("ROLL_REJECTED", result.error.message, sid=sid, game_id=self.game_id)
                notifications.append(self._rejection(sid, result.error))
                return notifications

            self.log_event("DICE_ROLL", f"{player} бросил {list(result.dice)}", sid=sid, game_id=self.game_id)
            notifications.extend(self.state_notifications(engine, player_manager))

            if result.turn_over:
                notifications.extend(self._pass_turn(engine, player_manager, player, list(result.dice)))

            return notifications

    # --- Шаг ---

    def apply_player_step(self, engine: 'GameEngine', player_manager: 'GamePlayerManager', sid: str, step: Any) -> List[Notification]:
        """
        Обрабатывает ОДИН шаг игрока {from, to, die}.
        Включает немедленную проверку победы.
        """
        with self.lock:
            notifications = []

            player_context = player_manager.get_player_context(sid)
            if player_context is None:
                self.log_event("AUTH_ERROR", f"Player not found for sid {sid}", sid=sid, game_id=self.game_id)
                return notifications

            player, _ = player_context

            # --- 1. Валидация формы (до любых правил) ---
            try:
                request_data = load_move_request(step)
            except GameRuleError as e:
                self.log_event("MALFORMED_REQUEST", e.message, sid=sid, game_id=self.game_id, extra_data=step)
                notifications.append(self._rejection(sid, e))
                return notifications

            # --- 2. Применение ---
            result = engine.apply_move(
                request_data['origin'], request_data['destination'], request_data['die'], player
            )
            if not result.ok:
                notifications.append(self._rejection(sid, result.error))
                return notifications

            move_payload = dict(result.move.to_dict(), player=player, wasBlot=result.was_blot)
            notifications.extend(self._broadcast(player_manager, 'move_applied', move_payload))
            notifications.extend(self.state_notifications(engine, player_manager))

            # --- 3. Немедленная проверка победы ---
            if engine.winner is not None:
                notifications.extend(self._handle_victory(engine, player_manager))
                return notifications

            # --- 4. Конец хода ---
            if result.turn_over:
                if result.dice:
                    # Кубики остались, но ими нечем ходить
                    notifications.extend(self._pass_turn(engine, player_manager, player, list(result.dice)))
                else:
                    notifications.extend(self._finish_turn(engine, player_manager, player))

            return notifications

    # --- Внутренние ---

    def _pass_turn(self, engine, player_manager, player: str, dice: list) -> List[Notification]:
        self.log_event(
            "AUTO_TURN_FINISH",
            f"У игрока {player} нет ходов с {dice}. Вынужденный пропуск.",
            game_id=self.game_id
        )
        engine.switch_turn()
        notifications = self._broadcast(player_manager, 'turn_passed', {
            'player': player,
            'dice': dice,
            'message': 'Нет доступных ходов.'
        })
        notifications.extend(self.state_notifications(engine, player_manager))
        return notifications

    def _finish_turn(self, engine, player_manager, player: str) -> List[Notification]:
        engine.switch_turn()
        self.log_event("TURN_FINISHED", f"Ход {player} завершен, ходит {engine.current_player}.", game_id=self.game_id)
        notifications = self._broadcast(player_manager, 'turn_finished', {'next_player': engine.current_player})
        notifications.extend(self.state_notifications(engine, player_manager))
        return notifications

    def _handle_victory(self, engine, player_manager) -> List[Notification]:
        winner = engine.winner
        self.log_event("GAME_END_WIN", f"Winner: {winner}", game_id=self.game_id)
        return self._broadcast(player_manager, 'game_over', {'winner': winner})
