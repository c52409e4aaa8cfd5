# tavla/game_core/turn_state.py

from typing import List, Optional

from .board_state import Board, create_initial_board_state
from . import constants as c


class TurnState:
    """
    Простой класс-хранилище для состояния ОДНОЙ игры.
    Не содержит логики; изменяет его только GameEngine.
    """
    def __init__(self, starting_player: str = c.PLAYER_WHITE):
        self.board: Board = create_initial_board_state()
        self.dice: List[int] = []
        self.current_player: str = starting_player
        self.winner: Optional[str] = None
        # Бросок в этом ходу уже был (кубики могли закончиться)
        self.rolled: bool = False
