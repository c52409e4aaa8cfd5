# tavla/game_core/rules.py
"""
Единый модуль правил. Его вызывают и движок (живая Board), и зеркало
(неизменяемый Snapshot) - поэтому правила у них не могут разойтись.

Все функции чистые. "Вид доски" - любой объект с:
    view.points[i].owner / view.points[i].count
    view.bar_count(player) / view.off_count(player)
"""

from typing import NamedTuple, Set, Union

from . import constants as c

Location = Union[int, str]


class Move(NamedTuple):
    origin: Location       # 0..23 или "bar"
    destination: Location  # 0..23 или "off"
    die: int

    def to_dict(self):
        return {'from': self.origin, 'to': self.destination, 'die': self.die}


def opponent(player: str) -> str:
    return c.PLAYER_BLACK if player == c.PLAYER_WHITE else c.PLAYER_WHITE


def direction(player: str) -> int:
    return c.DIRECTION_WHITE if player == c.PLAYER_WHITE else c.DIRECTION_BLACK


def get_home_board_range(player: str) -> range:
    return c.HOME_BOARD_WHITE if player == c.PLAYER_WHITE else c.HOME_BOARD_BLACK


def bear_off_target(player: str) -> int:
    """Индекс сразу за последней точкой дома."""
    return c.BEAR_OFF_TARGET_WHITE if player == c.PLAYER_WHITE else c.BEAR_OFF_TARGET_BLACK


def entry_point(player: str, die: int) -> int:
    """Точка входа с бара: белые 24-die (6 -> 18), черные die-1 (6 -> 5)."""
    if player == c.PLAYER_WHITE:
        return c.NUM_POINTS - die
    return die - 1


def target_index(player: str, origin: int, die: int) -> int:
    return origin + die * direction(player)


def is_on_board(index) -> bool:
    return isinstance(index, int) and c.FIRST_POINT <= index <= c.LAST_POINT


def can_land_on(view, player: str, index: int) -> bool:
    """Пусто, своя точка или одиночная фишка соперника (блот)."""
    point = view.points[index]
    if point.count == 0 or point.owner == player:
        return True
    return point.count == 1


def is_hit(view, player: str, index: int) -> bool:
    point = view.points[index]
    return point.count == 1 and point.owner not in (None, player)


def can_bear_off(view, player: str) -> bool:
    """Бар пуст и все фишки игрока в доме. Не кэшируется."""
    if view.bar_count(player) > 0:
        return False
    home = get_home_board_range(player)
    for point in view.points:
        if point.owner == player and point.count > 0 and point.index not in home:
            return False
    return True


def _has_checkers_further_from_exit(view, player: str, origin: int) -> bool:
    if player == c.PLAYER_WHITE:
        search_range = range(origin + 1, c.HOME_BOARD_WHITE.stop)
    else:
        search_range = range(c.HOME_BOARD_BLACK.start, origin)
    return any(view.points[i].owner == player for i in search_range)


def _bear_off_allowed(view, player, origin, target, allow_overshoot) -> bool:
    if target == bear_off_target(player):
        return True
    # Перебор: разрешен только с самой дальней фишки
    return allow_overshoot and not _has_checkers_further_from_exit(view, player, origin)


def legal_moves_from(view, player: str, origin: Location, dice,
                     allow_overshoot: bool = False) -> Set[Move]:
    """Легальные ходы из одной точки (или с бара) для оставшихся кубиков."""
    moves = set()
    unique_dice = set(dice)
    on_bar = view.bar_count(player) > 0

    if origin == c.BAR:
        if not on_bar:
            return moves
        for die in unique_dice:
            to_point = entry_point(player, die)
            if can_land_on(view, player, to_point):
                moves.add(Move(c.BAR, to_point, die))
        return moves

    # Пока на баре есть фишки, других ходов нет
    if on_bar or not is_on_board(origin):
        return moves

    point = view.points[origin]
    if point.owner != player or point.count <= 0:
        return moves

    bear_off_ok = can_bear_off(view, player)
    for die in unique_dice:
        to = target_index(player, origin, die)
        if is_on_board(to):
            if can_land_on(view, player, to):
                moves.add(Move(origin, to, die))
        elif bear_off_ok and _bear_off_allowed(view, player, origin, to, allow_overshoot):
            moves.add(Move(origin, c.OFF, die))
    return moves


def enumerate_legal_moves(view, player: str, dice, allow_overshoot: bool = False) -> Set[Move]:
    """
    Каноничный генератор легальных ходов (одиночных шагов).
    Пустое множество = вынужденный пропуск хода.
    """
    if not dice:
        return set()

    if view.bar_count(player) > 0:
        return legal_moves_from(view, player, c.BAR, dice, allow_overshoot)

    moves = set()
    for point in view.points:
        if point.owner == player and point.count > 0:
            moves |= legal_moves_from(view, player, point.index, dice, allow_overshoot)
    return moves
