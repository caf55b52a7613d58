from datetime import timedelta
from uuid import UUID

import pytest

from tariffconv.convert.pipeline import convert_file
from tariffconv.convert.utils import read_text
from tariffconv.data.codecs import URL_CODEC
from tariffconv.data.formats import TOML, YAML, get_format
from tariffconv.data.validation import decode_request


def check_request(request) -> None:
    assert request.stream.user_id == UUID("8d234120-0bda-49b2-b7e0-fbd3912f6cbf")
    assert request.debug.duration == timedelta(milliseconds=234)
    assert request.stream.shard_url == URL_CODEC.decode("https://n3.example.com/sapi")
    assert len(request.gifts) == 2
    assert request.gifts[0].id == 1
    assert request.gifts[1].id == 2


def test_sample_request(request_path) -> None:
    """Тест на data/request.json: значения ключевых полей после разбора."""
    check_request(decode_request(read_text(request_path)))


@pytest.mark.parametrize("fmt_name", ["yaml", "toml"])
def test_sample_request_survives_conversion(request_path, fmt_name) -> None:
    result = convert_file(request_path, [YAML, TOML])
    check_request(result.request)

    fmt = get_format(fmt_name)
    check_request(decode_request(result.outputs[fmt_name], fmt))
