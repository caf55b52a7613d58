from typing import Any, Callable, Dict, List
import json
import tomllib

import tomli_w
import yaml

from tariffconv.data.errors import ConfigError


class WireFormat:
    """Текстовый формат документа: имя, расширение файла, разбор и запись.

    Все форматы работают с одним и тем же деревом из dict/list/str/int/bool,
    которое строится из модели через model_dump(mode="json", by_alias=True).
    """

    def __init__(
        self,
        name: str,
        extension: str,
        loads: Callable[[str], Any],
        dumps: Callable[[Any], str],
        syntax_errors: tuple,
    ) -> None:
        self.name = name
        self.extension = extension
        self.loads = loads
        self.dumps = dumps
        self.syntax_errors = syntax_errors

    def __repr__(self) -> str:
        return f"WireFormat({self.name!r})"


def _dump_json(tree: Any) -> str:
    return json.dumps(tree, ensure_ascii=False, indent=2) + "\n"


def _dump_yaml(tree: Any) -> str:
    return yaml.safe_dump(tree, sort_keys=False, allow_unicode=True)


def _dump_toml(tree: Any) -> str:
    return tomli_w.dumps(tree)


# Конструктор YAML на неверных датах и json.loads на слишком длинных числах бросают голый ValueError
JSON = WireFormat("json", "json", json.loads, _dump_json, (ValueError,))
YAML = WireFormat("yaml", "yaml", yaml.safe_load, _dump_yaml, (yaml.YAMLError, ValueError))
TOML = WireFormat("toml", "toml", tomllib.loads, _dump_toml, (tomllib.TOMLDecodeError, ValueError))

FORMATS: Dict[str, WireFormat] = {fmt.name: fmt for fmt in (JSON, YAML, TOML)}

# Синонимы имён форматов, в том числе по расширению файла
_ALIASES: Dict[str, str] = {"yml": "yaml"}


def get_format(name: str) -> WireFormat:
    """Возвращает формат по имени (регистр не важен)."""
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in FORMATS:
        raise ConfigError(f"Неизвестный формат: {name!r}. Доступны: {', '.join(FORMATS)}")
    return FORMATS[key]


def get_formats(names: List[str]) -> List[WireFormat]:
    if not names:
        raise ConfigError("Не задан ни один выходной формат")
    return [get_format(name) for name in names]
