# tavla/services/game_player_manager.py

import threading
from typing import Optional, Callable, List, Tuple

from tavla.game_core.constants import PLAYER_WHITE, PLAYER_BLACK


class RoomFullError(Exception):
    pass


class GamePlayerManager:
    """
    Управляет местами за столом: первый SID играет белыми, второй черными.
    Ничего не знает о правилах.
    """
    def __init__(self, game_id: str, log_event: Callable):
        self.game_id = game_id
        self.lock = threading.RLock()
        self.log_event = log_event

        self.sid_white: Optional[str] = None
        self.sid_black: Optional[str] = None

    def set_lock(self, lock: threading.RLock):
        """Устанавливает внешний RLock из GameSession."""
        self.lock = lock

    def add_player(self, sid: str) -> str:
        """Сажает игрока на свободное место. Возвращает его цвет."""
        with self.lock:
            if sid in (self.sid_white, self.sid_black):
                return self.get_player_context(sid)[0]
            if self.sid_white is None:
                self.sid_white = sid
                player = PLAYER_WHITE
            elif self.sid_black is None:
                self.sid_black = sid
                player = PLAYER_BLACK
            else:
                raise RoomFullError("Комната заполнена.")

            self.log_event("SEAT_ASSIGNED", f"Игрок сел за {player}.", sid=sid, game_id=self.game_id)
            return player

    def remove_player(self, sid: str) -> Optional[str]:
        with self.lock:
            if sid == self.sid_white:
                self.sid_white = None
                return PLAYER_WHITE
            if sid == self.sid_black:
                self.sid_black = None
                return PLAYER_BLACK
            return None

    def is_full(self) -> bool:
        with self.lock:
            return self.sid_white is not None and self.sid_black is not None

    def get_all_sids(self) -> List[str]:
        with self.lock:
            return [sid for sid in (self.sid_white, self.sid_black) if sid]

    def get_player_context(self, sid: str) -> Optional[Tuple[str, Optional[str]]]:
        """Определяет цвет игрока и SID оппонента. None, если SID не за столом."""
        with self.lock:
            if sid and sid == self.sid_white:
                return PLAYER_WHITE, self.sid_black
            if sid and sid == self.sid_black:
                return PLAYER_BLACK, self.sid_white
            return None
