from typing import List, Optional
import argparse
import sys

from tariffconv.convert.pipeline import DEFAULT_OUTPUT_FORMATS, convert_file
from tariffconv.convert.utils import load_config
from tariffconv.data.errors import ConfigError, ConversionError
from tariffconv.data.formats import JSON, get_format, get_formats
from tariffconv.data.schema import Event
from tariffconv.data.validation import decode_event, encode_document


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tariffconv",
        description="Конвертация документа запроса тарифов между JSON, YAML и TOML",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    convert = sub.add_parser("convert", help="Разобрать запрос и вывести его в других форматах")
    convert.add_argument("--input", type=str, help="Путь к входному документу (например, data/request.json)")
    convert.add_argument("--config", type=str, help="Путь к configs/convert_config.yaml")
    convert.add_argument("--input-format", type=str, help="Формат входа: json, yaml или toml")
    convert.add_argument("--formats", nargs="+", help="Выходные форматы (по умолчанию yaml toml)")
    convert.add_argument("--output-dir", type=str, help="Директория для файлов; без неё вывод в stdout")
    convert.add_argument("--show-parsed", action="store_true", help="Напечатать разобранный запрос")

    event = sub.add_parser("event", help="Показать кодирование события с датой")
    event.add_argument("--name", default="Event 1")
    event.add_argument("--date", default="2021-11-14")
    return parser


def run_convert(args: argparse.Namespace) -> None:
    cfg = load_config(args.config) if args.config else {}

    input_path = args.input or cfg.get("input")
    if not input_path:
        raise ConfigError("Не задан входной файл: укажите --input или input в конфиге")

    input_format_name = args.input_format or cfg.get("input_format")
    input_format = get_format(input_format_name) if input_format_name else None
    format_names = args.formats or cfg.get("output_formats", DEFAULT_OUTPUT_FORMATS)
    if isinstance(format_names, str):
        format_names = [format_names]
    output_formats = get_formats(format_names)
    output_dir = args.output_dir or cfg.get("output_dir")

    result = convert_file(input_path, output_formats, input_format, output_dir)

    if args.show_parsed:
        print(repr(result.request))

    if result.written:
        for path in result.written:
            print(f"Записан файл: {path}")
        return

    for name, text in result.outputs.items():
        print(f"\n{name.upper()}\n{text}")


def run_event(args: argparse.Namespace) -> None:
    event = Event(name=args.name, date=args.date)

    text = encode_document(event, JSON)
    print(f"\nJSON\n{text}")

    decoded = decode_event(text)
    print(f"\nDeserialized JSON: \n{decoded!r}\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Точка входа CLI. Возвращает код выхода: 0 - успех, 1 - ошибка конвертации."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "convert":
            run_convert(args)
        else:
            run_event(args)
    except ConversionError as e:
        print(f"Ошибка: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
