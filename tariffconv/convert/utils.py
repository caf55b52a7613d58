from typing import Any, Dict
import os
import yaml

from tariffconv.data.errors import ConfigError, InputReadError


def ensure_dir(path: str) -> None:
    """Создаёт директорию, если её нет."""
    os.makedirs(path, exist_ok=True)


def read_text(path: str) -> str:
    """Читает входной документ целиком в utf-8."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as e:
        raise InputReadError(f"Не найден входной файл: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(f"Не удалось прочитать входной файл {path}: {e}") from e


def write_text(path: str, text: str) -> None:
    """Сохраняет текст в файл с utf-8."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def load_config(path: str) -> Dict[str, Any]:
    """Загружает YAML-конфиг запуска и возвращает словарь."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Не удалось прочитать конфиг {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Некорректный YAML в конфиге {path}: {e}") from e

    # Пустой файл - это конфиг по умолчанию
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"Конфиг {path} должен быть словарём, получено: {type(cfg).__name__}")
    return cfg
