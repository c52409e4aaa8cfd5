# tavla/services/game_service.py

from typing import Optional, Dict, Any, List

from tavla.api.schemas import load_join_request
from tavla.game_core.errors import GameRuleError
from .game_session import GameSession
from .game_registry import GameRegistry
from .game_factory import GameFactory
from .game_player_manager import RoomFullError

Notification = Dict[str, Any]


def _error(sid: str, message: str) -> Notification:
    return {'event': 'error', 'payload': {'message': message}, 'room': sid}


class GameService:
    """
    Фасад, координирующий высокоуровневые действия с комнатами.
    Не владеет состоянием, а делегирует его специализированным сервисам.
    """

    def __init__(self, registry: GameRegistry, factory: GameFactory):
        """
        Инициализируется через Внедрение Зависимостей (Dependency Injection).
        """
        self.registry = registry
        self.factory = factory

    ### Публичный API (Прокси к Registry) ###

    def get_game_by_sid(self, sid: str) -> Optional[GameSession]:
        """Находит игровую сессию, связанную с SID."""
        return self.registry.get_room_by_sid(sid)

    ### Комнаты ###

    def create_room(self, sid: str) -> List[Notification]:
        if self.registry.get_room_by_sid(sid):
            return [_error(sid, 'Вы уже в комнате.')]

        session = self.factory.create_room()
        while session.id in self.registry:
            session = self.factory.create_room()

        player = session.add_player(sid)
        self.registry.add_room(session)

        return [{
            'event': 'room_created',
            'payload': {'roomId': session.id, 'player': player},
            'room': sid
        }]

    def join_room(self, sid: str, data: Any) -> List[Notification]:
        try:
            room_id = load_join_request(data)
        except GameRuleError as e:
            return [_error(sid, e.message)]

        if self.registry.get_room_by_sid(sid):
            return [_error(sid, 'Вы уже в комнате.')]

        session = self.registry.get_room(room_id)
        if not session:
            return [_error(sid, f'Комната не найдена: {room_id}')]

        try:
            player = session.add_player(sid)
        except RoomFullError as e:
            return [_error(sid, str(e))]

        if not self.registry.bind_sid(sid, room_id):
            # Комнату закрыли, пока игрок садился
            session.remove_player(sid)
            return [_error(sid, f'Комната не найдена: {room_id}')]

        notifications = [{
            'event': 'room_joined',
            'payload': {'roomId': room_id, 'player': player},
            'room': sid
        }]
        if session.has_started():
            notifications.extend(session.start_notifications())
        return notifications

    ### Игровые действия ###

    def roll(self, sid: str) -> List[Notification]:
        session = self.registry.get_room_by_sid(sid)
        if not session:
            return [_error(sid, 'Вы не в комнате. Создайте комнату или войдите в нее.')]
        return session.roll_dice_for_player(sid)

    def move(self, sid: str, data: Any) -> List[Notification]:
        session = self.registry.get_room_by_sid(sid)
        if not session:
            return [_error(sid, 'Вы не в комнате. Создайте комнату или войдите в нее.')]
        return session.apply_player_step(sid, data)

    def sync(self, sid: str) -> List[Notification]:
        session = self.registry.get_room_by_sid(sid)
        if not session:
            return [_error(sid, 'Вы не в комнате.')]
        return session.sync(sid)

    ### Управление подключением ###

    def handle_disconnect(self, sid: str) -> List[Notification]:
        """
        Игрок ушел - комната закрывается целиком, оппонент уведомляется.
        """
        session = self.registry.get_room_by_sid(sid)
        if not session:
            return []

        self.registry.unbind_sid(sid)
        session.remove_player(sid)

        notifications = [
            {'event': 'opponent_left', 'payload': {}, 'room': other_sid}
            for other_sid in session.get_all_sids()
        ]
        self.registry.remove_room(session.id)
        return notifications
