import pytest

from tavla.api.schemas import (
    dump_snapshot, load_snapshot, load_move_request, load_join_request
)
from tavla.game_core import constants as c
from tavla.game_core.engine import GameEngine
from tavla.game_core.errors import MalformedRequest


class TestMoveRequest:

    def test_regular_move(self):
        assert load_move_request({'from': 7, 'to': 4, 'die': 3}) == {
            'origin': 7, 'destination': 4, 'die': 3
        }

    def test_bar_entry_and_bear_off_sentinels(self):
        assert load_move_request({'from': 'bar', 'to': 20, 'die': 4})['origin'] == c.BAR
        assert load_move_request({'from': 3, 'to': 'off', 'die': 4})['destination'] == c.OFF

    def test_legacy_step_key(self):
        assert load_move_request({'from': 7, 'to': 4, 'step': 3})['die'] == 3

    def test_unknown_keys_ignored(self):
        assert load_move_request({'from': 7, 'to': 4, 'die': 3, 'client': 'web'}) == {
            'origin': 7, 'destination': 4, 'die': 3
        }

    @pytest.mark.parametrize("payload", [
        None,
        [7, 4, 3],
        {'to': 4, 'die': 3},
        {'from': 7, 'die': 3},
        {'from': 7, 'to': 4},
        {'from': 7, 'to': 4, 'die': 7},
        {'from': 7, 'to': 4, 'die': '3'},
        {'from': 'off', 'to': 4, 'die': 3},
        {'from': 7, 'to': 'bar', 'die': 3},
        {'from': 24, 'to': 20, 'die': 4},
        {'from': True, 'to': 4, 'die': 3},
    ])
    def test_malformed(self, payload):
        with pytest.raises(MalformedRequest) as exc:
            load_move_request(payload)
        assert exc.value.code == "MALFORMED_REQUEST"


class TestJoinRequest:

    def test_room_id_trimmed(self):
        assert load_join_request({'roomId': ' ab12cd '}) == 'ab12cd'

    @pytest.mark.parametrize("payload", [None, {}, {'roomId': ''}, {'roomId': '   '}, {'roomId': 5}])
    def test_invalid(self, payload):
        with pytest.raises(MalformedRequest):
            load_join_request(payload)


class TestSnapshotWireFormat:

    def test_dump_uses_camel_case(self):
        data = dump_snapshot(GameEngine().snapshot())
        assert set(data) == {
            'points', 'whiteBar', 'blackBar', 'whiteOff', 'blackOff',
            'dice', 'currentPlayer', 'winner', 'bearOffOvershoot'
        }
        assert len(data['points']) == 24
        assert data['points'][0] == {'index': 0, 'owner': c.PLAYER_BLACK, 'count': 2}
        assert data['points'][1] == {'index': 1, 'owner': None, 'count': 0}
        assert data['dice'] == []
        assert data['currentPlayer'] == c.PLAYER_WHITE
        assert data['winner'] is None
        assert data['bearOffOvershoot'] is False

    def test_load_restores_snapshot(self, fresh_engine):
        engine = fresh_engine(3, 5)
        engine.roll_dice()
        snapshot = engine.snapshot()
        assert load_snapshot(dump_snapshot(snapshot)) == snapshot

    def test_winner_optional(self):
        data = dump_snapshot(GameEngine().snapshot())
        del data['winner']
        assert load_snapshot(data).winner is None

    def test_wrong_point_count(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['points'] = data['points'][:23]
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_points_out_of_order(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['points'][0], data['points'][1] = data['points'][1], data['points'][0]
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_owner_without_checkers(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['points'][1] = {'index': 1, 'owner': c.PLAYER_WHITE, 'count': 0}
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_too_many_dice(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['dice'] = [2, 2, 2, 2, 2]
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_overshoot_variant_travels_with_snapshot(self):
        data = dump_snapshot(GameEngine(allow_overshoot=True).snapshot())
        assert data['bearOffOvershoot'] is True
        assert load_snapshot(data).bear_off_overshoot

        del data['bearOffOvershoot']
        assert not load_snapshot(data).bear_off_overshoot

    def test_missing_checker_rejected(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['points'][0] = {'index': 0, 'owner': c.PLAYER_BLACK, 'count': 1}
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_extra_checker_rejected(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['whiteOff'] = 1
        with pytest.raises(MalformedRequest):
            load_snapshot(data)

    def test_checker_moved_to_bar_is_accepted(self):
        data = dump_snapshot(GameEngine().snapshot())
        data['points'][23] = {'index': 23, 'owner': c.PLAYER_WHITE, 'count': 1}
        data['whiteBar'] = 1
        assert load_snapshot(data).white_bar == 1
