import copy
import json
import os

import pytest


ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
REQUEST_PATH = os.path.join(ROOT_DIR, "data", "request.json")

with open(REQUEST_PATH, "r", encoding="utf-8") as f:
    _REQUEST_PAYLOAD = json.load(f)


@pytest.fixture
def request_path() -> str:
    return REQUEST_PATH


@pytest.fixture
def request_payload() -> dict:
    """Свежая копия data/request.json, которую тест может портить."""
    return copy.deepcopy(_REQUEST_PAYLOAD)
