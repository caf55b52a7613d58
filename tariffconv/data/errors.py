from typing import List, Tuple


class ConversionError(Exception):
    """Базовая ошибка конвертации. Любая такая ошибка прерывает весь запуск."""


class InputReadError(ConversionError):
    """Входной файл не найден или не читается."""


class OutputWriteError(ConversionError):
    """Не удалось создать директорию или записать файл результата."""


class ConfigError(ConversionError):
    """Некорректный файл конфигурации или неизвестный формат."""


class EncodeError(ConversionError):
    """Не удалось сериализовать корректное значение в целевой формат."""


class DecodeError(ConversionError):
    """Документ не разобран. errors: список пар (путь поля, сообщение)."""

    kind = "decode"

    def __init__(self, errors: List[Tuple[str, str]], source: str = "") -> None:
        self.errors = errors
        self.source = source
        super().__init__(self._render())

    @property
    def paths(self) -> List[str]:
        return [path for path, _ in self.errors]

    def _render(self) -> str:
        where = f" ({self.source})" if self.source else ""
        lines = [f"Ошибка разбора документа [{self.kind}]{where}:"]
        for path, message in self.errors:
            lines.append(f"  {path or '<документ>'}: {message}")
        return "\n".join(lines)


class DocumentSyntaxError(DecodeError):
    """Текст не является корректным JSON/YAML/TOML."""

    kind = "syntax"


class StructuralDecodeError(DecodeError):
    """Нет обязательного поля, неверный тип значения или неизвестный тип запроса."""

    kind = "structure"


class FieldCodecError(DecodeError):
    """Значение поля не разобрано кодеком: UUID, URL, длительность, время."""

    kind = "field_codec"
