# tavla/game_core/constants.py

# === Игроки ===
PLAYER_WHITE = "WHITE"
PLAYER_BLACK = "BLACK"
PLAYERS = (PLAYER_WHITE, PLAYER_BLACK)

# Белые идут к 0, черные к 23
DIRECTION_WHITE = -1
DIRECTION_BLACK = 1

# === Настройка доски (индексы 0-23) ===
STANDARD_WHITE_SETUP = {23: 2, 12: 5, 7: 3, 5: 5}
STANDARD_BLACK_SETUP = {0: 2, 11: 5, 16: 3, 18: 5}

CHECKERS_PER_PLAYER = 15
WINNING_SCORE = 15

NUM_POINTS = 24
FIRST_POINT = 0
LAST_POINT = 23

# Сентинелы для ходов с бара и выброса
BAR = "bar"
OFF = "off"

# Диапазоны "Дома" на доске
HOME_BOARD_WHITE = range(0, 6)
HOME_BOARD_BLACK = range(18, 24)

# Целевой индекс "за краем" доски, означающий точный выброс
BEAR_OFF_TARGET_WHITE = -1
BEAR_OFF_TARGET_BLACK = 24

DIE_MIN = 1
DIE_MAX = 6

# === Фазы хода ===
PHASE_AWAITING_ROLL = "AWAITING_ROLL"
PHASE_AWAITING_MOVE = "AWAITING_MOVE"
PHASE_TURN_OVER = "TURN_OVER"
PHASE_GAME_OVER = "GAME_OVER"
