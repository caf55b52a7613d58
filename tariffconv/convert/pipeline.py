from typing import Dict, List, Optional
import os

from tariffconv.convert.utils import ensure_dir, read_text, write_text
from tariffconv.data.errors import OutputWriteError
from tariffconv.data.formats import JSON, WireFormat, get_format
from tariffconv.data.schema import Request
from tariffconv.data.validation import decode_request, encode_document


DEFAULT_OUTPUT_FORMATS: List[str] = ["yaml", "toml"]


class ConversionResult:
    """Результат одного запуска: разобранный запрос и тексты по форматам."""

    def __init__(
        self,
        source: str,
        request: Request,
        outputs: Dict[str, str],
        written: Optional[List[str]] = None,
    ) -> None:
        self.source = source
        self.request = request
        self.outputs = outputs
        self.written = written or []


def guess_input_format(path: str) -> WireFormat:
    """Определяет формат по расширению файла; без расширения - JSON."""
    ext = os.path.splitext(path)[1].lstrip(".")
    if not ext:
        return JSON
    return get_format(ext)


def encode_all(request: Request, formats: List[WireFormat]) -> Dict[str, str]:
    """Кодирует запрос во все форматы. Порядок форматов сохраняется."""
    return {fmt.name: encode_document(request, fmt) for fmt in formats}


def convert_text(
    text: str,
    output_formats: List[WireFormat],
    input_format: WireFormat = JSON,
    source: str = "",
) -> ConversionResult:
    """Разбирает документ и перекодирует его во все выходные форматы.

    Выходные тексты строятся только после успешного разбора; при любой
    ошибке бросается исключение и ничего не возвращается.
    """
    request = decode_request(text, input_format, source)
    outputs = encode_all(request, output_formats)
    return ConversionResult(source, request, outputs)


def convert_file(
    input_path: str,
    output_formats: List[WireFormat],
    input_format: Optional[WireFormat] = None,
    output_dir: Optional[str] = None,
) -> ConversionResult:
    """Точка входа конвейера: файл -> Request -> тексты в каждом формате.

    Args:
        input_path: Путь к входному документу
        output_formats: Целевые форматы
        input_format: Формат входа; если не задан, определяется по расширению
        output_dir: Если задан, каждый результат пишется в <имя>.<расширение>

    Returns:
        ConversionResult: Запрос, тексты и список записанных файлов
    """
    if input_format is None:
        input_format = guess_input_format(input_path)

    text = read_text(input_path)
    result = convert_text(text, output_formats, input_format, source=input_path)

    if output_dir:
        stem = os.path.splitext(os.path.basename(input_path))[0]
        try:
            ensure_dir(output_dir)
            for fmt in output_formats:
                out_path = os.path.join(output_dir, f"{stem}.{fmt.extension}")
                write_text(out_path, result.outputs[fmt.name])
                result.written.append(out_path)
        except OSError as e:
            raise OutputWriteError(f"Не удалось записать результат в {output_dir}: {e}") from e

    return result
