# tavla/services/game_session.py

import threading
import logging
from typing import Any, Callable, List, Optional

from tavla.game_core import GameEngine, InvariantViolation
from .game_player_manager import GamePlayerManager
from .game_turn_manager import GameTurnManager, Notification

logger = logging.getLogger(__name__)


class GameSession:
    """
    Представляет ОДНУ комнату (одну игру).
    Является "Фасадом", который координирует работу
    GameEngine, GamePlayerManager и GameTurnManager.

    Все запросы проходят под одним RLock: запрос обрабатывается
    до конца (принят или отклонен) прежде, чем начнется следующий.
    """

    def __init__(
        self,
        game_id: str,
        engine: GameEngine,
        turn_manager: GameTurnManager,
        player_manager: GamePlayerManager,
        log_event: Callable
    ):
        self.id = game_id
        self.log_event = log_event
        self.lock = threading.RLock()

        self.engine = engine

        # Присваиваем готовые сервисы
        self.players = player_manager
        self.turn_manager = turn_manager

        # Настраиваем связи
        self.players.set_lock(self.lock)
        self.turn_manager.set_lock(self.lock)

        self.broken = False

        self.log_event("SESSION_INIT", f"Экземпляр сессии {self.id} (Фасад) создан.", game_id=self.id)

    # --- Хелперы (делегируем) ---

    def get_all_sids(self) -> list:
        return self.players.get_all_sids()

    def has_started(self) -> bool:
        return self.players.is_full()

    # --- Места ---

    def add_player(self, sid: str) -> str:
        with self.lock:
            return self.players.add_player(sid)

    def remove_player(self, sid: str) -> Optional[str]:
        with self.lock:
            return self.players.remove_player(sid)

    def start_notifications(self) -> List[Notification]:
        """Стартовый снимок обоим игрокам, когда стол заполнен."""
        with self.lock:
            self.log_event("GAME_START", f"Оба игрока на месте, первым ходит {self.engine.current_player}.", game_id=self.id)
            return self.turn_manager.state_notifications(self.engine, self.players)

    def sync(self, sid: str) -> List[Notification]:
        with self.lock:
            if self.players.get_player_context(sid) is None:
                return []
            payload = self.turn_manager.state_notifications(self.engine, self.players)
            return [msg for msg in payload if msg['room'] == sid]

    # --- Логика Хода (координируем) ---

    def roll_dice_for_player(self, sid: str) -> List[Notification]:
        return self._guarded(sid, self.turn_manager.roll_dice_for_player, self.engine, self.players, sid)

    def apply_player_step(self, sid: str, step: Any) -> List[Notification]:
        return self._guarded(sid, self.turn_manager.apply_player_step, self.engine, self.players, sid, step)

    def _guarded(self, sid: str, action: Callable, *args) -> List[Notification]:
        with self.lock:

            if self.broken:
                return [self._error(sid, 'Игра прервана из-за внутренней ошибки.')]
            if not self.has_started():
                return [self._error(sid, 'Игра еще не началась. Ожидается второй игрок.')]

            try:
                return action(*args)
            except InvariantViolation as e:
                # Баг движка: дальше играть в этой комнате нельзя
                self.broken = True
                logger.critical(f"[GameSession {self.id}] Нарушен инвариант: {e}", exc_info=True)
                self.log_event("CRITICAL_ERROR", f"Invariant violation: {e}", sid=sid, game_id=self.id)
                return [
                    self._error(room_sid, 'Игра прервана из-за внутренней ошибки.')
                    for room_sid in self.players.get_all_sids()
                ]

    @staticmethod
    def _error(sid: str, message: str) -> Notification:
        return {'event': 'error', 'payload': {'message': message}, 'room': sid}
