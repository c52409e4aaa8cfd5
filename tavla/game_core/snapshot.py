# tavla/game_core/snapshot.py

from dataclasses import dataclass
from typing import Optional, Tuple

from . import constants as c


@dataclass(frozen=True)
class PointView:
    index: int
    owner: Optional[str]
    count: int


@dataclass(frozen=True)
class Snapshot:
    """
    Неизменяемая копия состояния хода для передачи и отображения.
    Реализует тот же "вид доски", что и Board, поэтому годится для rules.
    """
    points: Tuple[PointView, ...]
    white_bar: int
    black_bar: int
    white_off: int
    black_off: int
    dice: Tuple[int, ...]
    current_player: str
    winner: Optional[str] = None
    # Вариант правил: выброс кубиком больше нужного
    bear_off_overshoot: bool = False

    def bar_count(self, player: str) -> int:
        return self.white_bar if player == c.PLAYER_WHITE else self.black_bar

    def off_count(self, player: str) -> int:
        return self.white_off if player == c.PLAYER_WHITE else self.black_off


def take_snapshot(board, dice, current_player: str, winner: Optional[str],
                  bear_off_overshoot: bool = False) -> Snapshot:
    """Копирует живое состояние; дальнейшие изменения доски на снимок не влияют."""
    return Snapshot(
        points=tuple(PointView(p.index, p.owner, p.count) for p in board.points),
        white_bar=board.bar_count(c.PLAYER_WHITE),
        black_bar=board.bar_count(c.PLAYER_BLACK),
        white_off=board.off_count(c.PLAYER_WHITE),
        black_off=board.off_count(c.PLAYER_BLACK),
        dice=tuple(dice),
        current_player=current_player,
        winner=winner,
        bear_off_overshoot=bear_off_overshoot,
    )
