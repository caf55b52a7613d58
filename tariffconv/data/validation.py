from typing import Any, List, Tuple, Type, TypeVar
import yaml
from pydantic import BaseModel, ValidationError

from tariffconv.data.codecs import FIELD_CODEC_ERROR
from tariffconv.data.errors import (
    DecodeError,
    DocumentSyntaxError,
    EncodeError,
    FieldCodecError,
    StructuralDecodeError,
)
from tariffconv.data.formats import JSON, WireFormat
from tariffconv.data.schema import Event, Request


M = TypeVar("M", bound=BaseModel)


def field_path(loc: Tuple[Any, ...]) -> str:
    """Путь поля вида stream.public_tariff.duration или gifts.1.id."""
    return ".".join(str(part) for part in loc)


def classify_errors(exc: ValidationError, source: str = "") -> DecodeError:
    """Переводит ValidationError pydantic в ошибку нашей таксономии.

    Структурные ошибки важнее ошибок кодеков: если есть хотя бы одна
    структурная, возвращается StructuralDecodeError со всеми ошибками.
    """
    errors: List[Tuple[str, str]] = []
    structural = False
    for err in exc.errors():
        errors.append((field_path(err["loc"]), err["msg"]))
        if err["type"] != FIELD_CODEC_ERROR:
            structural = True

    if structural:
        return StructuralDecodeError(errors, source)
    return FieldCodecError(errors, source)


def load_tree(text: str, fmt: WireFormat = JSON, source: str = "") -> Any:
    """Разбирает текст в дерево dict/list без проверки схемы."""
    try:
        return fmt.loads(text)
    except fmt.syntax_errors as e:
        raise DocumentSyntaxError([("", f"некорректный {fmt.name.upper()}: {e}")], source) from e


def validate_tree(tree: Any, model: Type[M], source: str = "") -> M:
    """Проверяет дерево по схеме модели. Частично собранный объект не возвращается."""
    try:
        return model.model_validate(tree)
    except ValidationError as e:
        raise classify_errors(e, source) from None


def decode_document(text: str, model: Type[M], fmt: WireFormat = JSON, source: str = "") -> M:
    tree = load_tree(text, fmt, source)
    return validate_tree(tree, model, source)


def decode_request(text: str, fmt: WireFormat = JSON, source: str = "") -> Request:
    """Разбирает документ запроса.

    Args:
        text: Текст документа
        fmt: Формат входного текста (по умолчанию JSON)
        source: Имя источника для сообщений об ошибках

    Returns:
        Request: Полностью проверенный запрос

    Raises:
        DocumentSyntaxError: текст не разбирается форматом
        StructuralDecodeError: нет поля, неверный тип или значение "type"
        FieldCodecError: неверный UUID, URL, длительность или время
    """
    return decode_document(text, Request, fmt, source)


def decode_event(text: str, fmt: WireFormat = JSON) -> Event:
    return decode_document(text, Event, fmt)


def to_tree(value: BaseModel) -> Any:
    """Общее дерево для всех форматов: имена полей как на проводе, значения через кодеки."""
    return value.model_dump(mode="json", by_alias=True)


def encode_document(value: BaseModel, fmt: WireFormat) -> str:
    """Кодирует значение в текст указанного формата."""
    try:
        return fmt.dumps(to_tree(value))
    except (ValueError, TypeError, yaml.YAMLError) as e:
        raise EncodeError(f"Не удалось записать {type(value).__name__} в {fmt.name}: {e}") from e
