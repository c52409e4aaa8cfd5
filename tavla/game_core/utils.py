# tavla/game_core/utils.py

import random
from typing import List, Optional

from . import constants as c


def roll_dice(rng: Optional[random.Random] = None) -> List[int]:
    """
    Бросает два кубика. Дубль дает четыре хода одного значения.
    """
    rng = rng or random
    die1 = rng.randint(c.DIE_MIN, c.DIE_MAX)
    die2 = rng.randint(c.DIE_MIN, c.DIE_MAX)
    if die1 == die2:
        return [die1] * 4
    return [die1, die2]


def get_winner(borne_off_white: int, borne_off_black: int) -> Optional[str]:
    """Возвращает WHITE, BLACK или None (нет победителя), используя константу."""
    if borne_off_white >= c.WINNING_SCORE:
        return c.PLAYER_WHITE
    if borne_off_black >= c.WINNING_SCORE:
        return c.PLAYER_BLACK
    return None


def are_moves_available(legal_moves) -> bool:
    """Проверяет, есть ли хотя бы один ход."""
    return bool(legal_moves)
