# tavla/game_core/mirror.py
"""
Зеркало правил для клиента: пересчитывает легальные ходы по Snapshot
для подсветки до подтверждения сервером. Без состояния, ничего не меняет.

Вариант выброса берется из самого снимка (bear_off_overshoot), поэтому
клиенту не нужно знать конфиг сервера. Явный allow_overshoot его перекрывает.

Последнее слово всегда за движком; при расхождении клиент просто
пересчитывает ходы по следующему снимку.
"""

from typing import List, Optional, Set, Union

from . import rules
from .rules import Move
from .snapshot import Snapshot


def _sort_key(location):
    # "bar"/"off" после числовых индексов
    return (1, 0) if isinstance(location, str) else (0, location)


def _overshoot(snapshot: Snapshot, allow_overshoot: Optional[bool]) -> bool:
    return snapshot.bear_off_overshoot if allow_overshoot is None else allow_overshoot


def legal_destinations_from(snapshot: Snapshot, from_index: Union[int, str],
                            allow_overshoot: Optional[bool] = None) -> List[Union[int, str]]:
    """Куда можно пойти из точки (для подсветки при начале перетаскивания)."""
    if snapshot.winner is not None:
        return []
    moves = rules.legal_moves_from(
        snapshot, snapshot.current_player, from_index, snapshot.dice,
        _overshoot(snapshot, allow_overshoot)
    )
    return sorted({m.destination for m in moves}, key=_sort_key)


def all_legal_moves(snapshot: Snapshot, allow_overshoot: Optional[bool] = None) -> Set[Move]:
    """Полный перебор (для обнаружения вынужденного пропуска на клиенте)."""
    if snapshot.winner is not None:
        return set()
    return rules.enumerate_legal_moves(
        snapshot, snapshot.current_player, snapshot.dice, _overshoot(snapshot, allow_overshoot)
    )


def is_forced_pass(snapshot: Snapshot, allow_overshoot: Optional[bool] = None) -> bool:
    return bool(snapshot.dice) and not all_legal_moves(snapshot, allow_overshoot)


def highlightable_origins(snapshot: Snapshot, allow_overshoot: Optional[bool] = None) -> List[Union[int, str]]:
    """Точки, с которых сейчас вообще можно ходить."""
    origins = {m.origin for m in all_legal_moves(snapshot, allow_overshoot)}
    return sorted(origins, key=_sort_key)
