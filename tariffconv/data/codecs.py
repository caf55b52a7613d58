from typing import Annotated, Any, Dict, List, Protocol, Tuple, TypeVar
from datetime import datetime, timedelta, timezone
from uuid import UUID
import re

from pydantic import AnyUrl, PlainSerializer, PlainValidator, TypeAdapter, UrlConstraints, ValidationError
from pydantic_core import PydanticCustomError


T = TypeVar("T")

# Тип ошибки pydantic, по которому ошибки кодеков отличаются от структурных
FIELD_CODEC_ERROR = "field_codec"

DATE_TAG = "Date: "


class FieldCodec(Protocol[T]):
    """Пара функций кодирования/декодирования для одного поля.

    decode получает сырое значение из документа (обычно строку) и
    возвращает типизированное значение либо бросает PydanticCustomError.
    encode возвращает текстовое представление для записи в документ.
    """

    name: str

    def decode(self, raw: Any) -> T:
        ...

    def encode(self, value: T) -> str:
        ...


def codec_error(codec: str, message: str, raw: Any) -> PydanticCustomError:
    """Ошибка кодека поля: неверный формат значения."""
    return PydanticCustomError(
        FIELD_CODEC_ERROR,
        "{codec}: {reason}",
        {"codec": codec, "reason": message, "input_repr": repr(raw)},
    )


def require_str(raw: Any) -> str:
    if not isinstance(raw, str):
        raise PydanticCustomError("string_type", "Input should be a valid string")
    return raw


def codec_field(python_type: Any, codec: "FieldCodec[Any]") -> Any:
    """Собирает аннотацию поля pydantic с подключённым кодеком."""
    return Annotated[
        python_type,
        PlainValidator(codec.decode),
        PlainSerializer(codec.encode, return_type=str),
    ]


# ---------------------------------------------------------------------------
# Длительности в человекочитаемом виде ("233ms", "1h 30m", "2days")
# ---------------------------------------------------------------------------

_NANOS_PER_SECOND = 1_000_000_000

# Единицы в наносекундах; регистр важен ("M" - месяцы, "m" - минуты)
_DURATION_UNITS: Dict[str, int] = {
    "nsec": 1,
    "ns": 1,
    "usec": 1_000,
    "us": 1_000,
    "µs": 1_000,
    "msec": 1_000_000,
    "ms": 1_000_000,
    "seconds": _NANOS_PER_SECOND,
    "second": _NANOS_PER_SECOND,
    "sec": _NANOS_PER_SECOND,
    "s": _NANOS_PER_SECOND,
    "minutes": 60 * _NANOS_PER_SECOND,
    "minute": 60 * _NANOS_PER_SECOND,
    "min": 60 * _NANOS_PER_SECOND,
    "m": 60 * _NANOS_PER_SECOND,
    "hours": 3_600 * _NANOS_PER_SECOND,
    "hour": 3_600 * _NANOS_PER_SECOND,
    "hr": 3_600 * _NANOS_PER_SECOND,
    "h": 3_600 * _NANOS_PER_SECOND,
    "days": 86_400 * _NANOS_PER_SECOND,
    "day": 86_400 * _NANOS_PER_SECOND,
    "d": 86_400 * _NANOS_PER_SECOND,
    "weeks": 604_800 * _NANOS_PER_SECOND,
    "week": 604_800 * _NANOS_PER_SECOND,
    "w": 604_800 * _NANOS_PER_SECOND,
    "months": 2_630_016 * _NANOS_PER_SECOND,
    "month": 2_630_016 * _NANOS_PER_SECOND,
    "M": 2_630_016 * _NANOS_PER_SECOND,
    "years": 31_557_600 * _NANOS_PER_SECOND,
    "year": 31_557_600 * _NANOS_PER_SECOND,
    "y": 31_557_600 * _NANOS_PER_SECOND,
}

_DURATION_PIECE = re.compile(r"\s*(\d+)\s*([A-Za-zµ]+)")

# Порядок и подписи частей при кодировании; дни пишутся с учётом числа
_DURATION_FORMAT: List[Tuple[int, str]] = [
    (86_400_000_000, "day"),
    (3_600_000_000, "h"),
    (60_000_000, "m"),
    (1_000_000, "s"),
    (1_000, "ms"),
    (1, "us"),
]


def parse_duration(text: str) -> timedelta:
    """Разбирает строку длительности в timedelta.

    Args:
        text: Строка вида "234ms", "1h 30m", "2days"

    Returns:
        timedelta: Точное значение длительности (разрешение 1 мкс)

    Raises:
        ValueError: если строка пустая, содержит неизвестную единицу,
            число без единицы или не кратна микросекунде
    """
    if not text.strip():
        raise ValueError("пустая строка длительности")

    total_ns = 0
    pos = 0
    while pos < len(text):
        if text[pos:].isspace():
            break
        match = _DURATION_PIECE.match(text, pos)
        if match is None:
            raise ValueError(f"неверный фрагмент длительности: {text[pos:]!r}")
        number, unit = match.groups()
        if unit not in _DURATION_UNITS:
            raise ValueError(f"неизвестная единица времени: {unit!r}")
        total_ns += int(number) * _DURATION_UNITS[unit]
        pos = match.end()

    micros, rest_ns = divmod(total_ns, 1_000)
    if rest_ns:
        raise ValueError("точность длительности ограничена микросекундами")
    try:
        return timedelta(microseconds=micros)
    except OverflowError as e:
        raise ValueError(f"длительность слишком велика: {text!r}") from e


def format_duration(value: timedelta) -> str:
    """Кодирует timedelta в строку, которая разбирается обратно в то же значение."""
    if value < timedelta(0):
        raise ValueError("отрицательная длительность не поддерживается")
    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    if micros == 0:
        return "0s"

    parts: List[str] = []
    for size, label in _DURATION_FORMAT:
        count, micros = divmod(micros, size)
        if not count:
            continue
        if label == "day":
            label = "day" if count == 1 else "days"
        parts.append(f"{count}{label}")
    return " ".join(parts)


class DurationCodec:
    name = "duration"

    def decode(self, raw: Any) -> timedelta:
        if isinstance(raw, timedelta):
            if raw < timedelta(0):
                raise codec_error(self.name, "отрицательная длительность", raw)
            return raw
        text = require_str(raw)
        try:
            return parse_duration(text)
        except ValueError as e:
            raise codec_error(self.name, str(e), raw) from e

    def encode(self, value: timedelta) -> str:
        return format_duration(value)


# ---------------------------------------------------------------------------
# Строка с префиксом "Date: " на проводе
# ---------------------------------------------------------------------------


class TaggedDateCodec:
    """Кодек поля Event.date.

    При кодировании к значению всегда добавляется префикс "Date: ".
    При декодировании префикс снимается, если он есть; строка без
    префикса принимается как есть. Эта асимметрия намеренная.
    """

    name = "tagged_date"

    def __init__(self, tag: str = DATE_TAG) -> None:
        self.tag = tag

    def decode(self, raw: Any) -> str:
        text = require_str(raw)
        if text.startswith(self.tag):
            return text[len(self.tag):]
        return text

    def encode(self, value: str) -> str:
        return f"{self.tag}{value}"


# ---------------------------------------------------------------------------
# UUID в каноническом виде 8-4-4-4-12
# ---------------------------------------------------------------------------

_UUID_RE = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


class UUIDCodec:
    name = "uuid"

    def decode(self, raw: Any) -> UUID:
        if isinstance(raw, UUID):
            return raw
        text = require_str(raw)
        if not _UUID_RE.fullmatch(text):
            raise codec_error(self.name, f"ожидается UUID вида 8-4-4-4-12, получено {text!r}", raw)
        return UUID(text)

    def encode(self, value: UUID) -> str:
        return str(value)


# ---------------------------------------------------------------------------
# Абсолютный URL (схема + хост)
# ---------------------------------------------------------------------------

_URL_ADAPTER: TypeAdapter = TypeAdapter(Annotated[AnyUrl, UrlConstraints(host_required=True)])


class URLCodec:
    name = "url"

    def decode(self, raw: Any) -> AnyUrl:
        if isinstance(raw, AnyUrl):
            return raw
        text = require_str(raw)
        try:
            return _URL_ADAPTER.validate_python(text)
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            raise codec_error(self.name, f"неверный URL {text!r}: {reason}", raw) from None

    def encode(self, value: AnyUrl) -> str:
        return str(value)


# ---------------------------------------------------------------------------
# Момент времени с явным смещением, хранится в UTC
# ---------------------------------------------------------------------------


# RFC 3339: YYYY-MM-DD[T ]HH:MM:SS[.доли](Z|±HH:MM)
_RFC3339_RE = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2}(?:\.\d+)?)([Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def to_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("у времени нет смещения относительно UTC")
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError("время в UTC выходит за допустимый диапазон дат") from e


def format_utc(value: datetime) -> str:
    """Пишет время в UTC в формате RFC 3339 с суффиксом Z."""
    value = to_utc(value)
    timespec = "microseconds" if value.microsecond else "seconds"
    return value.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"


class UTCDateTimeCodec:
    name = "datetime"

    def decode(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            value = raw
        else:
            text = require_str(raw)
            match = _RFC3339_RE.fullmatch(text)
            if match is None:
                raise codec_error(self.name, f"ожидается время RFC 3339 со смещением, получено {text!r}", raw)
            date_part, time_part, offset = match.groups()
            if offset in ("Z", "z"):
                offset = "+00:00"
            try:
                value = datetime.fromisoformat(f"{date_part}T{time_part}{offset}")
            except ValueError as e:
                raise codec_error(self.name, f"неверная метка времени {text!r}", raw) from e
        try:
            return to_utc(value)
        except ValueError as e:
            raise codec_error(self.name, str(e), raw) from e

    def encode(self, value: datetime) -> str:
        return format_utc(value)


DURATION = DurationCodec()
TAGGED_DATE = TaggedDateCodec()
UUID_CODEC = UUIDCodec()
URL_CODEC = URLCodec()
UTC_DATETIME = UTCDateTimeCodec()
