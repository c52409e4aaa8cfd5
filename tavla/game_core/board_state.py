# tavla/game_core/board_state.py

from typing import List, Optional

from . import constants as c
from .errors import InvariantViolation


class Point:
    """Одна позиция на доске: владелец и количество фишек."""

    __slots__ = ('index', 'owner', 'count')

    def __init__(self, index: int, owner: Optional[str] = None, count: int = 0):
        self.index = index
        self.owner = owner
        self.count = count

    def add_checker(self, player: str):
        if self.count and self.owner != player:
            raise InvariantViolation(
                f"Точка {self.index} занята {self.owner}, нельзя добавить фишку {player}."
            )
        self.owner = player
        self.count += 1

    def remove_checker(self, player: str):
        if self.count == 0 or self.owner != player:
            raise InvariantViolation(
                f"На точке {self.index} нет фишки {player} (owner={self.owner}, count={self.count})."
            )
        self.count -= 1
        if self.count == 0:
            self.owner = None

    def __repr__(self):
        return f"Point({self.index}, {self.owner}, {self.count})"


class Board:
    """
    Живая (изменяемая) доска: 24 точки, бар и сброс для каждого игрока.
    Принадлежит движку; наружу отдается только через Snapshot.
    """

    def __init__(self):
        self.points: List[Point] = [Point(i) for i in range(c.NUM_POINTS)]
        self.bar = {c.PLAYER_WHITE: 0, c.PLAYER_BLACK: 0}
        self.off = {c.PLAYER_WHITE: 0, c.PLAYER_BLACK: 0}

    # --- Протокол "вида доски" (общий с Snapshot) ---

    def bar_count(self, player: str) -> int:
        return self.bar[player]

    def off_count(self, player: str) -> int:
        return self.off[player]

    def place(self, index: int, player: str, count: int):
        """Ставит фишки на точку (используется раскладкой и тестами)."""
        for _ in range(count):
            self.points[index].add_checker(player)


def create_initial_board_state() -> Board:
    """
    Создает доску в классической расстановке, используя константы правил.
    """
    board = Board()
    for pos, count in c.STANDARD_WHITE_SETUP.items():
        board.place(pos, c.PLAYER_WHITE, count)
    for pos, count in c.STANDARD_BLACK_SETUP.items():
        board.place(pos, c.PLAYER_BLACK, count)
    return board


def apply_move_to_board(board: Board, origin, destination, player: str) -> bool:
    """
    Применяет ОДИН уже проверенный ход к доске (in-place).
    Возвращает True, если был сбит блот соперника.
    """
    was_blot = False

    if origin == c.BAR:
        if board.bar[player] == 0:
            raise InvariantViolation(f"Бар игрока {player} пуст.")
        board.bar[player] -= 1
    else:
        board.points[origin].remove_checker(player)

    if destination == c.OFF:
        board.off[player] += 1
        return was_blot

    target = board.points[destination]
    if target.count and target.owner != player:
        if target.count != 1:
            raise InvariantViolation(f"Точка {destination} заблокирована соперником.")
        opponent = target.owner
        target.remove_checker(opponent)
        board.bar[opponent] += 1
        was_blot = True

    target.add_checker(player)
    return was_blot


def count_checkers(board, player: str) -> int:
    """Все фишки игрока: на точках + бар + сброс."""
    on_points = sum(p.count for p in board.points if p.owner == player)
    return on_points + board.bar_count(player) + board.off_count(player)


def verify_invariants(board):
    """Проверяет закон сохранения и инвариант точки. Нарушение = баг движка."""
    for point in board.points:
        if point.count < 0 or (point.count == 0) != (point.owner is None):
            raise InvariantViolation(f"Сломан инвариант точки: {point!r}")

    for player in c.PLAYERS:
        total = count_checkers(board, player)
        if total != c.CHECKERS_PER_PLAYER:
            raise InvariantViolation(
                f"Закон сохранения нарушен для {player}: {total} фишек вместо {c.CHECKERS_PER_PLAYER}."
            )
