# tavla/game_core/engine.py
"""
Авторитетный движок: единственный владелец живого состояния одной игры.

Движок не решает, КОГДА передавать ход. Он отвечает на вопросы
"есть ли ходы" и "примени этот ход", а передачу хода (switch_turn)
вызывает оркестратор (GameTurnManager или LocalGame).
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional, Set, Tuple

from . import constants as c
from . import rules
from .board_state import Board, apply_move_to_board, verify_invariants
from .errors import (
    GameRuleError,
    IllegalMove,
    OutOfTurn,
    DiceAlreadyRolled,
    MalformedRequest,
)
from .rules import Move
from .snapshot import Snapshot, take_snapshot
from .turn_state import TurnState
from .utils import roll_dice, get_winner, are_moves_available

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Результат публичной операции движка. Исключения правил наружу не выходят."""
    ok: bool
    error: Optional[GameRuleError] = None
    move: Optional[Move] = None
    was_blot: bool = False
    dice: Tuple[int, ...] = ()
    # После операции ходов нет (вынужденный пропуск или кубики кончились)
    turn_over: bool = False


class GameEngine:

    def __init__(
        self,
        starting_player: str = c.PLAYER_WHITE,
        rng: Optional[random.Random] = None,
        allow_overshoot: bool = False,
        game_id: Optional[str] = None
    ):
        if starting_player not in c.PLAYERS:
            raise ValueError(f"Неизвестный игрок: {starting_player!r}")
        self.starting_player = starting_player
        self.allow_overshoot = allow_overshoot
        self.game_id = game_id
        self._rng = rng or random.Random()
        self.turn = TurnState(starting_player)

    @classmethod
    def from_position(cls, board: Board, current_player: str, dice=(), **kwargs) -> 'GameEngine':
        """Создает движок из произвольной позиции (задачи, тесты, восстановление)."""
        engine = cls(starting_player=current_player, **kwargs)
        verify_invariants(board)
        engine.turn.board = board
        engine.turn.dice = list(dice)
        engine.turn.rolled = bool(dice)
        engine.turn.winner = engine.check_winner()
        return engine

    def initialize(self):
        """Сбрасывает игру в классическую стартовую позицию."""
        self.turn = TurnState(self.starting_player)
        logger.debug(f"[{self.game_id}] Игра инициализирована, первым ходит {self.starting_player}.")

    # --- Чтение состояния ---

    @property
    def current_player(self) -> str:
        return self.turn.current_player

    @property
    def dice(self) -> Tuple[int, ...]:
        return tuple(self.turn.dice)

    @property
    def winner(self) -> Optional[str]:
        return self.turn.winner

    @property
    def phase(self) -> str:
        if self.turn.winner is not None:
            return c.PHASE_GAME_OVER
        if not self.turn.rolled:
            return c.PHASE_AWAITING_ROLL
        if self.turn.dice and are_moves_available(self.enumerate_legal_moves()):
            return c.PHASE_AWAITING_MOVE
        return c.PHASE_TURN_OVER

    def snapshot(self) -> Snapshot:
        return take_snapshot(
            self.turn.board, self.turn.dice, self.turn.current_player, self.turn.winner,
            bear_off_overshoot=self.allow_overshoot
        )

    # --- Правила ---

    def can_bear_off(self, player: str) -> bool:
        return rules.can_bear_off(self.turn.board, player)

    def enumerate_legal_moves(self) -> Set[Move]:
        if self.turn.winner is not None:
            return set()
        return rules.enumerate_legal_moves(
            self.turn.board, self.turn.current_player, self.turn.dice, self.allow_overshoot
        )

    def check_winner(self) -> Optional[str]:
        return get_winner(
            self.turn.board.off_count(c.PLAYER_WHITE),
            self.turn.board.off_count(c.PLAYER_BLACK)
        )

    # --- Изменение состояния ---

    def roll_dice(self, player: Optional[str] = None) -> ActionResult:
        try:
            self._check_can_roll(player)
        except GameRuleError as e:
            logger.info(f"[{self.game_id}] Бросок отклонен ({e.code}): {e.message}")
            return ActionResult(ok=False, error=e, dice=self.dice)

        self.turn.dice = roll_dice(self._rng)
        self.turn.rolled = True

        turn_over = not are_moves_available(self.enumerate_legal_moves())
        logger.debug(
            f"[{self.game_id}] {self.current_player} бросил {self.turn.dice}."
            + (" Ходов нет." if turn_over else "")
        )
        return ActionResult(ok=True, dice=self.dice, turn_over=turn_over)

    def apply_move(self, origin, destination, die, player: Optional[str] = None) -> ActionResult:
        """
        Единственная точка изменения доски: вход с бара, обычный ход, выброс.
        При отказе состояние не меняется.
        """
        try:
            move = self._validate_move(origin, destination, die, player)
        except GameRuleError as e:
            logger.info(
                f"[{self.game_id}] Ход {origin}->{destination} ({die}) отклонен ({e.code}): {e.message}"
            )
            return ActionResult(ok=False, error=e, dice=self.dice)

        player = self.turn.current_player
        was_blot = apply_move_to_board(self.turn.board, move.origin, move.destination, player)
        self.turn.dice.remove(move.die)
        verify_invariants(self.turn.board)

        winner = self.check_winner()
        if winner is not None and self.turn.winner is None:
            self.turn.winner = winner
            logger.info(f"[{self.game_id}] Игра окончена, победитель: {winner}.")

        turn_over = not are_moves_available(self.enumerate_legal_moves())
        return ActionResult(ok=True, move=move, was_blot=was_blot, dice=self.dice, turn_over=turn_over)

    def switch_turn(self):
        """Передает ход сопернику и очищает кубики. В GAME_OVER ничего не делает."""
        if self.turn.winner is not None:
            logger.warning(f"[{self.game_id}] switch_turn после окончания игры проигнорирован.")
            return
        self.turn.current_player = rules.opponent(self.turn.current_player)
        self.turn.dice = []
        self.turn.rolled = False

    # --- Проверки ---

    def _check_can_roll(self, player: Optional[str]):
        if self.turn.winner is not None:
            raise IllegalMove("Игра уже окончена.")
        if player is not None and player != self.turn.current_player:
            raise OutOfTurn()
        if self.turn.dice:
            raise DiceAlreadyRolled()
        if self.turn.rolled:
            raise OutOfTurn("Ход завершен, ожидается передача хода.")

    def _validate_move(self, origin, destination, die, player: Optional[str]) -> Move:
        if self.turn.winner is not None:
            raise IllegalMove("Игра уже окончена.")
        if player is not None and player != self.turn.current_player:
            raise OutOfTurn()

        validate_move_shape(origin, destination, die)

        if die not in self.turn.dice:
            raise IllegalMove(f"Кубика {die} нет среди оставшихся {self.turn.dice}.")

        current = self.turn.current_player
        if destination == c.OFF and not self.can_bear_off(current):
            raise IllegalMove("Выброс невозможен: не все фишки в доме.")

        move = Move(origin, destination, die)
        if move not in self.enumerate_legal_moves():
            raise IllegalMove()
        return move


def validate_move_shape(origin, destination, die):
    """Базовая проверка формы и диапазонов до любых правил."""
    if isinstance(die, bool) or not isinstance(die, int) or not c.DIE_MIN <= die <= c.DIE_MAX:
        raise MalformedRequest(f"Кубик должен быть от {c.DIE_MIN} до {c.DIE_MAX}.")
    if origin != c.BAR and (isinstance(origin, bool) or not rules.is_on_board(origin)):
        raise MalformedRequest("'from' должен быть 0..23 или 'bar'.")
    if destination != c.OFF and (isinstance(destination, bool) or not rules.is_on_board(destination)):
        raise MalformedRequest("'to' должен быть 0..23 или 'off'.")
