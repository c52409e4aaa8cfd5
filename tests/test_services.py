import pytest

from tavla.game_core import constants as c
from tavla.game_core.engine import GameEngine
from tavla.game_core.errors import InvariantViolation
from tavla.services.game_factory import GameFactory
from tavla.services.game_player_manager import GamePlayerManager, RoomFullError
from tavla.services.game_registry import GameRegistry
from tavla.services.game_service import GameService

CONFIG = {'STARTING_PLAYER': c.PLAYER_WHITE, 'BEAR_OFF_OVERSHOOT': False, 'ROOM_ID_LENGTH': 6}


def events(notifications, room=None):
    return [msg['event'] for msg in notifications if room is None or msg['room'] == room]


def payloads(notifications, event):
    return [msg['payload'] for msg in notifications if msg['event'] == event]


@pytest.fixture
def service(log_event):
    registry = GameRegistry(log_event_func=log_event)
    return GameService(registry=registry, factory=GameFactory(config=CONFIG, log_event=log_event))


@pytest.fixture
def room(service):
    """Комната с двумя игроками: 'w' за белых, 'b' за черных."""
    created = service.create_room('w')
    room_id = created[0]['payload']['roomId']
    service.join_room('b', {'roomId': room_id})
    return service.registry.get_room(room_id)


class TestPlayerManager:

    def test_seats_in_order(self, log_event):
        players = GamePlayerManager('g1', log_event)
        assert players.add_player('a') == c.PLAYER_WHITE
        assert players.add_player('b') == c.PLAYER_BLACK
        assert players.is_full()
        assert players.get_player_context('a') == (c.PLAYER_WHITE, 'b')
        assert players.get_player_context('x') is None
        with pytest.raises(RoomFullError):
            players.add_player('c')

    def test_same_sid_keeps_seat(self, log_event):
        players = GamePlayerManager('g1', log_event)
        players.add_player('a')
        assert players.add_player('a') == c.PLAYER_WHITE
        assert players.get_all_sids() == ['a']


class TestRegistry:

    def test_bind_and_remove(self, log_event):
        registry = GameRegistry(log_event_func=log_event)
        session = GameFactory(config=CONFIG, log_event=log_event).create_room('room01')
        session.add_player('a')

        registry.add_room(session)
        assert registry.bind_sid('b', 'room01')
        assert not registry.bind_sid('c', 'missing')

        assert registry.get_room_by_sid('a') is session
        assert registry.get_room_by_sid('b') is session
        assert 'room01' in registry

        assert registry.unbind_sid('b') == 'room01'
        assert registry.remove_room('room01') is session
        assert registry.get_room_by_sid('a') is None
        assert registry.remove_room('room01') is None
        assert len(registry) == 0


class TestFactory:

    def test_missing_config_key(self, log_event):
        with pytest.raises(KeyError):
            GameFactory(config={'STARTING_PLAYER': c.PLAYER_WHITE}, log_event=log_event)

    def test_room_uses_config(self, log_event):
        factory = GameFactory(config=dict(CONFIG, BEAR_OFF_OVERSHOOT=True, ROOM_ID_LENGTH=8), log_event=log_event)
        session = factory.create_room()
        assert len(session.id) == 8
        assert session.engine.allow_overshoot
        assert session.engine.current_player == c.PLAYER_WHITE


class TestRooms:

    def test_create_room(self, service):
        notifications = service.create_room('w')
        assert events(notifications) == ['room_created']
        payload = notifications[0]['payload']
        assert payload['player'] == c.PLAYER_WHITE
        assert len(payload['roomId']) == 6
        assert len(service.registry) == 1

    def test_create_twice(self, service):
        service.create_room('w')
        assert events(service.create_room('w')) == ['error']
        assert len(service.registry) == 1

    def test_join_starts_game(self, service):
        room_id = service.create_room('w')[0]['payload']['roomId']
        notifications = service.join_room('b', {'roomId': room_id})

        assert notifications[0] == {
            'event': 'room_joined', 'payload': {'roomId': room_id, 'player': c.PLAYER_BLACK}, 'room': 'b'
        }
        assert events(notifications, room='w') == ['state']
        assert events(notifications, room='b') == ['room_joined', 'state']
        assert payloads(notifications, 'state')[0]['currentPlayer'] == c.PLAYER_WHITE

    def test_join_unknown_room(self, service):
        assert events(service.join_room('b', {'roomId': 'nope'})) == ['error']

    def test_join_malformed(self, service):
        assert events(service.join_room('b', {'room': 'x'})) == ['error']
        assert events(service.join_room('b', None)) == ['error']

    def test_room_full(self, service, room):
        notifications = service.join_room('c', {'roomId': room.id})
        assert events(notifications) == ['error']
        assert service.get_game_by_sid('c') is None

    def test_join_into_closed_room(self, service, monkeypatch):
        room_id = service.create_room('w')[0]['payload']['roomId']
        session = service.registry.get_room(room_id)
        monkeypatch.setattr(service.registry, 'bind_sid', lambda sid, rid: False)

        notifications = service.join_room('b', {'roomId': room_id})

        assert events(notifications) == ['error']
        assert session.get_all_sids() == ['w']
        assert service.get_game_by_sid('b') is None

    def test_actions_outside_room(self, service):
        assert events(service.roll('x')) == ['error']
        assert events(service.move('x', {'from': 7, 'to': 4, 'die': 3})) == ['error']
        assert events(service.sync('x')) == ['error']

    def test_roll_before_opponent_joins(self, service):
        service.create_room('w')
        assert events(service.roll('w')) == ['error']

    def test_sync_targets_requester(self, room, service):
        notifications = service.sync('b')
        assert events(notifications) == ['state']
        assert notifications[0]['room'] == 'b'

    def test_disconnect_closes_room(self, service, room):
        notifications = service.handle_disconnect('w')
        assert notifications == [{'event': 'opponent_left', 'payload': {}, 'room': 'b'}]
        assert len(service.registry) == 0
        assert service.get_game_by_sid('b') is None
        assert service.handle_disconnect('w') == []


class TestTurns:

    def test_roll_out_of_turn(self, service, room):
        notifications = service.roll('b')
        assert events(notifications) == ['move_rejection']
        assert notifications[0]['payload']['code'] == "OUT_OF_TURN"

    def test_roll_twice(self, service, room, scripted_rng):
        room.engine = GameEngine(rng=scripted_rng(3, 5), game_id=room.id)
        service.roll('w')
        notifications = service.roll('w')
        assert notifications[0]['payload']['code'] == "DICE_ALREADY_ROLLED"

    def test_full_turn(self, service, room, scripted_rng):
        room.engine = GameEngine(rng=scripted_rng(3, 5), game_id=room.id)

        rolled = service.roll('w')
        assert events(rolled) == ['state', 'state']
        assert payloads(rolled, 'state')[0]['dice'] == [3, 5]

        first = service.move('w', {'from': 7, 'to': 4, 'die': 3})
        assert events(first, room='w') == ['move_applied', 'state']
        assert payloads(first, 'move_applied')[0] == {
            'from': 7, 'to': 4, 'die': 3, 'player': c.PLAYER_WHITE, 'wasBlot': False
        }

        second = service.move('w', {'from': 7, 'to': 2, 'die': 5})
        assert events(second, room='b') == ['move_applied', 'state', 'turn_finished', 'state']
        assert payloads(second, 'turn_finished')[0] == {'next_player': c.PLAYER_BLACK}
        assert room.engine.current_player == c.PLAYER_BLACK
        assert payloads(second, 'state')[-1]['dice'] == []

    def test_illegal_move_rejected_to_sender_only(self, service, room, scripted_rng):
        room.engine = GameEngine(rng=scripted_rng(3, 5), game_id=room.id)
        service.roll('w')
        notifications = service.move('w', {'from': 23, 'to': 18, 'die': 5})
        assert notifications == [{
            'event': 'move_rejection',
            'payload': {'code': "ILLEGAL_MOVE", 'message': notifications[0]['payload']['message']},
            'room': 'w'
        }]

    def test_malformed_move(self, service, room):
        notifications = service.move('w', {'from': 7, 'to': 4, 'die': 9})
        assert events(notifications) == ['move_rejection']
        assert notifications[0]['payload']['code'] == "MALFORMED_REQUEST"

    def test_forced_pass_is_announced(self, service, room, position, scripted_rng):
        blocks = {i: 2 for i in range(18, 24)}
        blocks[0] = 3
        board = position(white={5: 14}, black=blocks, white_bar=1)
        room.engine = GameEngine.from_position(board, c.PLAYER_WHITE, rng=scripted_rng(2, 4))

        notifications = service.roll('w')

        assert events(notifications, room='b') == ['state', 'turn_passed', 'state']
        assert payloads(notifications, 'turn_passed')[0]['player'] == c.PLAYER_WHITE
        assert payloads(notifications, 'turn_passed')[0]['dice'] == [2, 4]
        assert room.engine.current_player == c.PLAYER_BLACK

    def test_game_over(self, service, room, position):
        board = position(white={0: 1}, black={23: 15})
        room.engine = GameEngine.from_position(board, c.PLAYER_WHITE, dice=(1, 3))

        notifications = service.move('w', {'from': 0, 'to': 'off', 'die': 1})

        assert events(notifications, room='b') == ['move_applied', 'state', 'game_over']
        assert payloads(notifications, 'game_over')[0] == {'winner': c.PLAYER_WHITE}
        assert payloads(notifications, 'state')[0]['winner'] == c.PLAYER_WHITE
        assert service.roll('b')[0]['payload']['code'] == "ILLEGAL_MOVE"

    def test_invariant_violation_breaks_room(self, service, room, monkeypatch):
        def broken_apply(*args, **kwargs):
            raise InvariantViolation("test")

        monkeypatch.setattr(room.engine, 'apply_move', broken_apply)
        notifications = service.move('w', {'from': 7, 'to': 4, 'die': 3})

        assert events(notifications) == ['error', 'error']
        assert room.broken
        assert events(service.roll('w')) == ['error']
