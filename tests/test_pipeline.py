import json
import os

import pytest

from tariffconv.convert.pipeline import convert_file, convert_text, guess_input_format
from tariffconv.convert.run import main
from tariffconv.convert.utils import load_config
from tariffconv.data.errors import ConfigError, FieldCodecError, InputReadError, OutputWriteError
from tariffconv.data.formats import JSON, TOML, YAML, get_formats


def test_convert_text_builds_every_format(request_payload) -> None:
    result = convert_text(json.dumps(request_payload), [YAML, TOML])
    assert list(result.outputs) == ["yaml", "toml"]
    assert result.request.gifts[0].id == 1
    assert result.written == []


def test_convert_file_writes_outputs(tmp_path, request_path) -> None:
    out_dir = tmp_path / "out"
    result = convert_file(request_path, get_formats(["yaml", "toml"]), output_dir=str(out_dir))

    assert sorted(os.listdir(out_dir)) == ["request.toml", "request.yaml"]
    assert result.written == [str(out_dir / "request.yaml"), str(out_dir / "request.toml")]
    assert (out_dir / "request.yaml").read_text(encoding="utf-8") == result.outputs["yaml"]


def test_convert_file_missing_input(tmp_path) -> None:
    with pytest.raises(InputReadError):
        convert_file(str(tmp_path / "missing.json"), [YAML])


def test_decode_failure_writes_nothing(tmp_path, request_payload) -> None:
    request_payload["stream"]["shard_url"] = "nowhere"
    src = tmp_path / "request.json"
    src.write_text(json.dumps(request_payload), encoding="utf-8")
    out_dir = tmp_path / "out"

    with pytest.raises(FieldCodecError):
        convert_file(str(src), [YAML, TOML], output_dir=str(out_dir))
    assert not out_dir.exists()


def test_guess_input_format() -> None:
    assert guess_input_format("request.json") is JSON
    assert guess_input_format("request.yml") is YAML
    assert guess_input_format("request") is JSON
    with pytest.raises(ConfigError):
        guess_input_format("request.txt")


def test_load_config(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("output_formats: [json]\n", encoding="utf-8")
    assert load_config(str(path)) == {"output_formats": ["json"]}

    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == {}

    path.write_text("- yaml\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(str(path))


def test_cli_convert_prints_formats(capsys, request_path) -> None:
    assert main(["convert", "--input", request_path]) == 0
    out = capsys.readouterr().out
    assert "\nYAML\n" in out
    assert "\nTOML\n" in out
    assert "type: success" in out
    assert "[[gifts]]" in out


def test_cli_convert_with_config(tmp_path, capsys, request_path) -> None:
    config = tmp_path / "convert_config.yaml"
    config.write_text(f"input: {json.dumps(request_path)}\noutput_formats: [json]\n", encoding="utf-8")

    assert main(["convert", "--config", str(config)]) == 0
    out = capsys.readouterr().out
    assert "\nJSON\n" in out
    assert "\"type\": \"success\"" in out
    assert "YAML" not in out


def test_cli_convert_to_directory(tmp_path, capsys, request_path) -> None:
    out_dir = tmp_path / "out"
    code = main(["convert", "--input", request_path, "--formats", "toml", "--output-dir", str(out_dir)])
    assert code == 0
    assert (out_dir / "request.toml").exists()
    assert "request.toml" in capsys.readouterr().out


def test_cli_reports_failures(tmp_path, capsys) -> None:
    assert main(["convert", "--input", str(tmp_path / "missing.json")]) == 1
    assert "Не найден входной файл" in capsys.readouterr().err

    assert main(["convert"]) == 1
    assert main(["convert", "--input", str(tmp_path / "x.json"), "--formats", "xml"]) == 1


def test_cli_reports_field_path(tmp_path, capsys, request_payload) -> None:
    request_payload["debug"]["duration"] = "soon"
    src = tmp_path / "request.json"
    src.write_text(json.dumps(request_payload), encoding="utf-8")

    assert main(["convert", "--input", str(src)]) == 1
    captured = capsys.readouterr()
    assert "debug.duration" in captured.err
    assert captured.out == ""


def test_cli_event(capsys) -> None:
    assert main(["event"]) == 0
    out = capsys.readouterr().out
    assert "\"date\": \"Date: 2021-11-14\"" in out
    assert "date='2021-11-14'" in out


def test_convert_file_output_dir_is_a_file(tmp_path, request_path) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(OutputWriteError):
        convert_file(request_path, [YAML], output_dir=str(blocker))


def test_cli_reports_write_failure(tmp_path, capsys, request_path) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("", encoding="utf-8")
    assert main(["convert", "--input", request_path, "--output-dir", str(blocker)]) == 1
    assert "Не удалось записать результат" in capsys.readouterr().err


def test_cli_reports_timestamp_out_of_range(tmp_path, capsys, request_payload) -> None:
    request_payload["debug"]["at"] = "9999-12-31T23:59:59-01:00"
    src = tmp_path / "request.json"
    src.write_text(json.dumps(request_payload), encoding="utf-8")

    assert main(["convert", "--input", str(src)]) == 1
    assert "debug.at" in capsys.readouterr().err
