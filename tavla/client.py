# tavla/client.py
"""
Адаптеры для слоя отображения.

RemoteGame - клиент сервера (python-socketio): хранит последний снимок
и считает подсветку через зеркало правил. LocalGame - офлайн-режим,
движок без сервера с тем же набором методов чтения.
"""

import logging
import threading
from concurrent.futures import Future
from typing import List, Optional, Set, Tuple, Union

import socketio

from tavla.api.schemas import load_snapshot
from tavla.game_core import mirror
from tavla.game_core import constants as c
from tavla.game_core.engine import GameEngine, ActionResult
from tavla.game_core.errors import GameRuleError
from tavla.game_core.rules import Move
from tavla.game_core.snapshot import Snapshot

logger = logging.getLogger(__name__)


class RemoteGame:
    """
    Состояние на клиенте - только последний снимок от сервера.
    Место за столом приходит один раз (room_created / room_joined)
    и доступно через seat (Future), без опроса.
    """

    def __init__(self, url: str, sio: Optional[socketio.Client] = None):
        self.url = url
        self.sio = sio or socketio.Client(reconnection=False)
        self.lock = threading.Lock()

        self.seat: Future = Future()
        self.room_id: Optional[str] = None
        self._snapshot: Optional[Snapshot] = None

        self.last_error: Optional[str] = None
        self.last_rejection: Optional[dict] = None
        self.passes: List[Tuple[str, List[int]]] = []
        self.opponent_left = False

        self.sio.on('state', self._on_state)
        self.sio.on('room_created', self._on_seat)
        self.sio.on('room_joined', self._on_seat)
        self.sio.on('turn_passed', self._on_turn_passed)
        self.sio.on('move_rejection', self._on_rejection)
        self.sio.on('error', self._on_error)
        self.sio.on('info', self._on_info)
        self.sio.on('opponent_left', self._on_opponent_left)

    # --- Соединение ---

    def connect(self):
        self.sio.connect(self.url)

    def disconnect(self):
        self.sio.disconnect()

    # --- Запросы ---

    def create_room(self):
        self.sio.emit('create_room')

    def join_room(self, room_id: str):
        self.sio.emit('join_room', {'roomId': room_id})

    def wait_for_seat(self, timeout: Optional[float] = None) -> str:
        return self.seat.result(timeout=timeout)

    def roll_dice(self):
        self.sio.emit('roll')

    def apply_move(self, origin, destination, die: int):
        """Отправляет один шаг. Ответ придет снимком или move_rejection."""
        self.sio.emit('move', Move(origin, destination, die).to_dict())

    def bear_off(self, origin: int, die: int):
        self.apply_move(origin, c.OFF, die)

    def request_sync(self):
        self.sio.emit('request_sync')

    # --- Чтение ---

    def get_board_snapshot(self) -> Optional[Snapshot]:
        with self.lock:
            return self._snapshot

    @property
    def player(self) -> Optional[str]:
        return self.seat.result() if self.seat.done() else None

    def is_my_turn(self) -> bool:
        snapshot = self.get_board_snapshot()
        return (
            snapshot is not None and snapshot.winner is None
            and self.player is not None and snapshot.current_player == self.player
        )

    def legal_destinations_from(self, from_index: Union[int, str]) -> List[Union[int, str]]:
        snapshot = self.get_board_snapshot()
        if snapshot is None:
            return []
        return mirror.legal_destinations_from(snapshot, from_index)

    def all_legal_moves(self) -> Set[Move]:
        snapshot = self.get_board_snapshot()
        if snapshot is None:
            return set()
        return mirror.all_legal_moves(snapshot)

    # --- Обработчики событий ---

    def _on_state(self, data):
        try:
            snapshot = load_snapshot(data)
        except GameRuleError as e:
            # Оставляем предыдущий снимок, следующий state его заменит
            logger.warning(f"Отброшен некорректный снимок: {e.message}")
            return
        with self.lock:
            self._snapshot = snapshot

    def _on_seat(self, data):
        if self.seat.done():
            logger.warning(f"Повторное назначение места проигнорировано: {data}")
            return
        self.room_id = data.get('roomId')
        self.seat.set_result(data.get('player'))
        logger.info(f"Комната {self.room_id}, играем за {data.get('player')}.")

    def _on_turn_passed(self, data):
        self.passes.append((data.get('player'), list(data.get('dice', []))))

    def _on_rejection(self, data):
        self.last_rejection = data
        logger.info(f"Ход отклонен: {data}")

    def _on_error(self, data):
        self.last_error = data.get('message') if isinstance(data, dict) else str(data)
        logger.warning(f"Ошибка сервера: {self.last_error}")

    def _on_info(self, data):
        logger.debug(f"info: {data}")

    def _on_opponent_left(self, data=None):
        self.opponent_left = True
        logger.info("Соперник покинул комнату.")


class LocalGame:
    """
    Офлайн-игра на одном устройстве. Вынужденные пропуски и конец хода
    обрабатываются сразу, как это делает сервер.
    """

    def __init__(self, starting_player: str = c.PLAYER_WHITE, rng=None, allow_overshoot: bool = False):
        self.engine = GameEngine(starting_player=starting_player, rng=rng, allow_overshoot=allow_overshoot)
        self.passes: List[Tuple[str, List[int]]] = []

    def new_game(self):
        self.engine.initialize()
        self.passes = []

    def roll_dice(self) -> ActionResult:
        result = self.engine.roll_dice()
        if result.ok and result.turn_over:
            self._pass_turn(list(result.dice))
        return result

    def apply_move(self, origin, destination, die: int) -> ActionResult:
        result = self.engine.apply_move(origin, destination, die)
        if result.ok and result.turn_over and self.engine.winner is None:
            if result.dice:
                self._pass_turn(list(result.dice))
            else:
                self.engine.switch_turn()
        return result

    def bear_off(self, origin: int, die: int) -> ActionResult:
        return self.apply_move(origin, c.OFF, die)

    def _pass_turn(self, dice: List[int]):
        player = self.engine.current_player
        logger.info(f"У {player} нет ходов с {dice}, ход переходит сопернику.")
        self.passes.append((player, dice))
        self.engine.switch_turn()

    # --- Чтение ---

    @property
    def current_player(self) -> str:
        return self.engine.current_player

    @property
    def winner(self) -> Optional[str]:
        return self.engine.winner

    def get_board_snapshot(self) -> Snapshot:
        return self.engine.snapshot()

    def legal_destinations_from(self, from_index: Union[int, str]) -> List[Union[int, str]]:
        return mirror.legal_destinations_from(self.engine.snapshot(), from_index)

    def all_legal_moves(self) -> Set[Move]:
        return mirror.all_legal_moves(self.engine.snapshot())
