# tavla/api/schemas.py

from marshmallow import Schema, fields, pre_load, post_load, validates_schema, ValidationError, EXCLUDE
from marshmallow.validate import Length, Range, OneOf

from tavla.game_core import constants as c
from tavla.game_core.errors import MalformedRequest
from tavla.game_core.snapshot import Snapshot, PointView


# --- Наши собственные поля ---

class LocationField(fields.Field):
    """
    Индекс точки 0..23 ИЛИ строковый сентинел ('bar' для from, 'off' для to).
    """
    default_error_messages = {
        "invalid": "Ожидается индекс 0..23 или '{sentinel}'.",
    }

    def __init__(self, sentinel: str, **kwargs):
        self.sentinel = sentinel
        super().__init__(**kwargs)

    def _deserialize(self, value, attr, data, **kwargs):
        if value == self.sentinel:
            return self.sentinel
        if isinstance(value, int) and not isinstance(value, bool) and c.FIRST_POINT <= value <= c.LAST_POINT:
            return value
        raise self.make_error("invalid", sentinel=self.sentinel)


# --- Запрос хода ---

class MoveRequestSchema(Schema):
    """{ from: 0..23 | "bar", to: 0..23 | "off", die: 1..6 }"""

    class Meta:
        unknown = EXCLUDE

    origin = LocationField(
        c.BAR, data_key='from', required=True,
        error_messages={"required": "Не указано поле 'from'."}
    )
    destination = LocationField(
        c.OFF, data_key='to', required=True,
        error_messages={"required": "Не указано поле 'to'."}
    )
    die = fields.Integer(
        strict=True,
        required=True,
        validate=Range(min=c.DIE_MIN, max=c.DIE_MAX, error="Кубик должен быть от 1 до 6."),
        error_messages={"required": "Не указан кубик 'die'."}
    )

    @pre_load
    def accept_legacy_step(self, data, **kwargs):
        # Старые клиенты присылают 'step' вместо 'die'
        if isinstance(data, dict) and 'die' not in data and 'step' in data:
            data = dict(data)
            data['die'] = data.pop('step')
        return data


class JoinRoomSchema(Schema):

    class Meta:
        unknown = EXCLUDE

    room_id = fields.Str(
        data_key='roomId',
        required=True,
        validate=Length(min=1, max=64, error="roomId не может быть пустым."),
        error_messages={"required": "Не указан roomId."}
    )

    @pre_load
    def strip_whitespace(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('roomId'), str):
            data = dict(data)
            data['roomId'] = data['roomId'].strip()
        return data


# --- Снимок состояния ---

class PointSchema(Schema):
    index = fields.Integer(strict=True, required=True, validate=Range(min=c.FIRST_POINT, max=c.LAST_POINT))
    owner = fields.Str(required=True, allow_none=True, validate=OneOf(c.PLAYERS))
    count = fields.Integer(strict=True, required=True, validate=Range(min=0, max=c.CHECKERS_PER_PLAYER))

    @validates_schema
    def validate_owner_matches_count(self, data, **kwargs):
        if (data['count'] == 0) != (data['owner'] is None):
            raise ValidationError("count == 0 допустим только без владельца.", field_name='owner')

    @post_load
    def make_point(self, data, **kwargs):
        return PointView(**data)


class SnapshotSchema(Schema):
    points = fields.List(
        fields.Nested(PointSchema), required=True,
        validate=Length(equal=c.NUM_POINTS, error="Ожидается ровно 24 точки.")
    )
    white_bar = fields.Integer(data_key='whiteBar', strict=True, required=True, validate=Range(min=0))
    black_bar = fields.Integer(data_key='blackBar', strict=True, required=True, validate=Range(min=0))
    white_off = fields.Integer(data_key='whiteOff', strict=True, required=True, validate=Range(min=0))
    black_off = fields.Integer(data_key='blackOff', strict=True, required=True, validate=Range(min=0))
    dice = fields.List(
        fields.Integer(strict=True, validate=Range(min=c.DIE_MIN, max=c.DIE_MAX)),
        required=True, validate=Length(max=4)
    )
    current_player = fields.Str(data_key='currentPlayer', required=True, validate=OneOf(c.PLAYERS))
    winner = fields.Str(allow_none=True, load_default=None, validate=OneOf(c.PLAYERS))
    bear_off_overshoot = fields.Boolean(data_key='bearOffOvershoot', load_default=False)

    @validates_schema
    def validate_point_order(self, data, **kwargs):
        indices = [p.index for p in data.get('points', [])]
        if indices and indices != list(range(c.NUM_POINTS)):
            raise ValidationError("Точки должны идти по порядку 0..23.", field_name='points')

    @validates_schema
    def validate_conservation(self, data, **kwargs):
        # На доске, баре и в сбросе у каждого ровно 15 фишек
        for player, bar_key, off_key in ((c.PLAYER_WHITE, 'white_bar', 'white_off'),
                                         (c.PLAYER_BLACK, 'black_bar', 'black_off')):
            on_points = sum(p.count for p in data['points'] if p.owner == player)
            total = on_points + data[bar_key] + data[off_key]
            if total != c.CHECKERS_PER_PLAYER:
                raise ValidationError(
                    f"У {player} {total} фишек вместо {c.CHECKERS_PER_PLAYER}.", field_name='points'
                )

    @post_load
    def make_snapshot(self, data, **kwargs):
        data['points'] = tuple(data['points'])
        data['dice'] = tuple(data['dice'])
        return Snapshot(**data)


# --- Хелперы для слоя транспорта ---

def _first_error_message(err: ValidationError) -> str:
    """Берем первое поле с ошибкой и его первое сообщение."""
    messages = err.messages
    if isinstance(messages, dict) and messages:
        field_name = next(iter(messages))
        detail = messages[field_name]
        while isinstance(detail, (list, dict)) and detail:
            detail = detail[0] if isinstance(detail, list) else next(iter(detail.values()))
        return f"'{field_name}': {detail}"
    return str(messages)


def load_move_request(data) -> dict:
    """Возвращает {'origin', 'destination', 'die'} или бросает MalformedRequest."""
    if not isinstance(data, dict):
        raise MalformedRequest("Ожидается объект хода {from, to, die}.")
    try:
        return MoveRequestSchema().load(data)
    except ValidationError as err:
        raise MalformedRequest(f"Ошибка валидации {_first_error_message(err)}")


def load_join_request(data) -> str:
    if not isinstance(data, dict):
        raise MalformedRequest("Ожидается объект {roomId}.")
    try:
        return JoinRoomSchema().load(data)['room_id']
    except ValidationError as err:
        raise MalformedRequest(f"Ошибка валидации {_first_error_message(err)}")


def dump_snapshot(snapshot: Snapshot) -> dict:
    return SnapshotSchema().dump(snapshot)


def load_snapshot(data) -> Snapshot:
    """Декодирует снимок с провода. Некорректный снимок -> MalformedRequest."""
    try:
        return SnapshotSchema().load(data)
    except ValidationError as err:
        raise MalformedRequest(f"Некорректный снимок {_first_error_message(err)}")
