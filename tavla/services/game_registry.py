# tavla/services/game_registry.py

import threading
from typing import Dict, Optional, Set, TYPE_CHECKING

if TYPE_CHECKING:
    from .game_session import GameSession


class GameRegistry:
    """
    Хранит открытые комнаты: room_id -> GameSession и sid -> room_id.
    Единственное общее состояние сервера; каждая игра живет в своей сессии.
    """
    def __init__(self, log_event_func):
        self.rooms: Dict[str, 'GameSession'] = {}
        self.sid_to_room: Dict[str, str] = {}
        # Обратный индекс, чтобы закрытие комнаты не перебирало всех игроков
        self.room_sids: Dict[str, Set[str]] = {}

        self.lock = threading.RLock()
        self.log_event = log_event_func or (lambda *args, **kwargs: None)

    def add_room(self, session: 'GameSession'):
        """Регистрирует комнату вместе с уже сидящими в ней игроками."""
        with self.lock:
            if session.id in self.rooms:
                self.log_event("REGISTRY_WARN", f"Комната {session.id} уже открыта.", game_id=session.id)
                return

            self.rooms[session.id] = session
            self.room_sids[session.id] = set()
            for sid in session.get_all_sids():
                self.bind_sid(sid, session.id)

            self.log_event("REGISTRY_ADD", f"Открыта комната {session.id}. Всего: {len(self.rooms)}", game_id=session.id)

    def remove_room(self, room_id: str) -> Optional['GameSession']:
        with self.lock:
            session = self.rooms.pop(room_id, None)
            if session is None:
                return None

            for sid in self.room_sids.pop(room_id, set()):
                self.sid_to_room.pop(sid, None)

            self.log_event("REGISTRY_REMOVE", f"Комната {room_id} закрыта. Осталось: {len(self.rooms)}", game_id=room_id)
            return session

    def get_room(self, room_id: str) -> Optional['GameSession']:
        with self.lock:
            return self.rooms.get(room_id)

    def get_room_by_sid(self, sid: str) -> Optional['GameSession']:
        with self.lock:
            room_id = self.sid_to_room.get(sid)
            return self.rooms.get(room_id) if room_id else None

    def bind_sid(self, sid: str, room_id: str) -> bool:
        with self.lock:
            if room_id not in self.rooms:
                self.log_event("REGISTRY_WARN", f"Комнаты {room_id} нет, SID не привязан.", sid=sid, game_id=room_id)
                return False
            self.sid_to_room[sid] = room_id
            self.room_sids[room_id].add(sid)
            return True

    def unbind_sid(self, sid: str) -> Optional[str]:
        with self.lock:
            room_id = self.sid_to_room.pop(sid, None)
            if room_id is not None:
                self.room_sids.get(room_id, set()).discard(sid)
            return room_id

    def __contains__(self, room_id: str) -> bool:
        with self.lock:
            return room_id in self.rooms

    def __len__(self):
        with self.lock:
            return len(self.rooms)
