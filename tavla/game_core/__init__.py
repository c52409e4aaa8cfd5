# tavla/game_core/__init__.py

# "Публичный API" игрового ядра
from .constants import (
    PLAYER_WHITE, PLAYER_BLACK, WINNING_SCORE, BAR, OFF,
    PHASE_AWAITING_ROLL, PHASE_AWAITING_MOVE, PHASE_TURN_OVER, PHASE_GAME_OVER
)

from .board_state import (
    Board,
    create_initial_board_state,
    count_checkers,
)

from .engine import (
    GameEngine,
    ActionResult,
)

from .errors import (
    GameRuleError,
    IllegalMove,
    OutOfTurn,
    DiceAlreadyRolled,
    MalformedRequest,
    InvariantViolation,
)

from .rules import Move

from .snapshot import Snapshot, PointView

from .mirror import (
    legal_destinations_from,
    all_legal_moves,
    is_forced_pass,
)

from .utils import (
    roll_dice,
    get_winner,
)
