from __future__ import annotations

import json
from pathlib import Path

import pytest

from mixdown.cli import parse_args, settings_from_args
from mixdown.config import Settings, load_config
from mixdown.errors import ConfigError


def test_load_config_reads_json_toml_and_yaml(tmp_path: Path) -> None:
    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"narchive": 10}), encoding="utf-8")
    toml_path = tmp_path / "config.toml"
    toml_path.write_text('extname = "htm"\n', encoding="utf-8")
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("use_epochname: true\n", encoding="utf-8")

    assert load_config(json_path) == {"narchive": 10}
    assert load_config(toml_path) == {"extname": "htm"}
    assert load_config(yaml_path) == {"use_epochname": True}


def test_load_config_missing_file_is_empty(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == {}


def test_load_config_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config(path)


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(path)


def test_default_settings_are_valid() -> None:
    settings = Settings()

    settings.validate()

    assert settings.outdir == "docs"
    assert settings.extname == "html"
    assert settings.narchive == 40
    assert settings.use_epochname is False


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"outdir": ".mixdown/out"}, "outdir"),
        ({"outdir": "./.mixdown"}, "outdir"),
        ({"extname": "ht.ml"}, "extname"),
        ({"extname": ""}, "extname"),
        ({"narchive": 0}, "narchive"),
    ],
)
def test_invalid_settings_raise_config_error(overrides: dict, message: str) -> None:
    settings = Settings(**overrides)

    with pytest.raises(ConfigError, match=message):
        settings.validate()


def test_outdir_named_like_mixdown_dir_is_allowed() -> None:
    Settings(outdir=".mixdown-site").validate()


def test_cli_flags_override_config_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"outdir": "public", "narchive": "5", "use_epochname": "yes"}), encoding="utf-8")

    settings = settings_from_args(parse_args(["--config", str(path), "--narchive", "7"]))

    assert settings.outdir == "public"
    assert settings.narchive == 7
    assert settings.use_epochname is True
    assert settings.extname == "html"
