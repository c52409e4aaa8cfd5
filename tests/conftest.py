import random

import pytest

from tavla.game_core import constants as c
from tavla.game_core.board_state import Board
from tavla.game_core.engine import GameEngine


class ScriptedRng:
    """Отдает заранее заданные значения кубиков по очереди."""

    def __init__(self, *values):
        self.values = list(values)

    def randint(self, a, b):
        return self.values.pop(0)


def _noop_log_event(*args, **kwargs):
    pass


@pytest.fixture
def log_event():
    return _noop_log_event


@pytest.fixture
def scripted_rng():
    return ScriptedRng


@pytest.fixture
def position():
    """
    Собирает Board из словарей {индекс: количество}.
    Недостающие до 15 фишки считаются выброшенными.
    """
    def build(white=None, black=None, white_bar=0, black_bar=0):
        board = Board()
        for player, layout, bar in ((c.PLAYER_WHITE, white or {}, white_bar),
                                    (c.PLAYER_BLACK, black or {}, black_bar)):
            for index, count in layout.items():
                board.place(index, player, count)
            board.bar[player] = bar
            board.off[player] = c.CHECKERS_PER_PLAYER - sum(layout.values()) - bar
        return board
    return build


@pytest.fixture
def play_random_game():
    """
    Играет случайную партию до конца (или до max_turns ходов).
    on_step(engine) вызывается после каждого броска и каждого шага.
    """
    def play(engine, seed=0, max_turns=2000, on_step=None):
        chooser = random.Random(seed)
        for _ in range(max_turns):
            if engine.winner is not None:
                break
            result = engine.roll_dice()
            assert result.ok
            if on_step:
                on_step(engine)
            while not result.turn_over:
                moves = sorted(engine.enumerate_legal_moves(), key=repr)
                result = engine.apply_move(*chooser.choice(moves))
                assert result.ok, result.error
                if on_step:
                    on_step(engine)
            engine.switch_turn()
        return engine
    return play


@pytest.fixture
def fresh_engine():
    def build(*dice_values, **kwargs):
        rng = ScriptedRng(*dice_values) if dice_values else None
        return GameEngine(rng=rng, **kwargs)
    return build
