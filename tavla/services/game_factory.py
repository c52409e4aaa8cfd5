# tavla/services/game_factory.py

import uuid
from typing import Dict, Any, Callable

from tavla.game_core import GameEngine
from .game_session import GameSession
from .game_player_manager import GamePlayerManager
from .game_turn_manager import GameTurnManager


class GameFactory:

    def __init__(self, config: Dict[str, Any], log_event: Callable):
        self.log_event = log_event

        # --- Извлекаем нужные ключи из внедренного конфига ---
        try:
            self.config = {
                'STARTING_PLAYER': config['STARTING_PLAYER'],
                'BEAR_OFF_OVERSHOOT': config['BEAR_OFF_OVERSHOOT'],
                'ROOM_ID_LENGTH': config['ROOM_ID_LENGTH'],
            }
        except KeyError as e:
            raise KeyError(f"GameFactory: отсутствует ключ конфига {e} при внедрении.")

    def new_room_id(self) -> str:
        return uuid.uuid4().hex[:self.config['ROOM_ID_LENGTH']]

    def create_room(self, game_id: str = None) -> GameSession:
        """
        Создает пустую комнату со своим движком в стартовой позиции.
        """
        game_id = game_id or self.new_room_id()

        engine = GameEngine(
            starting_player=self.config['STARTING_PLAYER'],
            allow_overshoot=self.config['BEAR_OFF_OVERSHOOT'],
            game_id=game_id
        )

        session = GameSession(
            game_id=game_id,
            engine=engine,
            turn_manager=GameTurnManager(game_id=game_id, log_event=self.log_event),
            player_manager=GamePlayerManager(game_id=game_id, log_event=self.log_event),
            log_event=self.log_event
        )
        self.log_event("GAME_CREATED", f"Комната {game_id} создана.", game_id=game_id)
        return session
