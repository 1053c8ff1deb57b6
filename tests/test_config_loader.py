import json
from pathlib import Path

import pytest

from config.config_loader import DEFAULT_CONFIG, load_config, save_config, validate_config


def write_config(tmp_path: Path, **overrides) -> Path:
    path = tmp_path / "runtime_config.json"
    config = {"output_directory": str(tmp_path / "logs")}
    config.update(overrides)
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def test_load_merges_defaults_and_creates_output_directory(tmp_path: Path) -> None:
    path = write_config(tmp_path, tape_size=16, head_position=8)

    config = load_config(str(path), verbose=False)

    assert config["tape_size"] == 16
    assert config["max_steps"] == DEFAULT_CONFIG["max_steps"]
    assert (tmp_path / "logs").is_dir()


def test_load_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    load_config(str(write_config(tmp_path)), verbose=True)

    assert "tape_size: 512" in capsys.readouterr().out


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.json"))


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"tape_size": "big"}, TypeError),
        ({"max_steps": True}, TypeError),
        ({"compact_fingerprints": 1}, TypeError),
        ({"tape_size": 0}, ValueError),
        ({"tape_size": 8, "head_position": 8}, ValueError),
        ({"step_mode": "turbo"}, ValueError),
        ({"step_delay": -1}, ValueError),
    ],
)
def test_invalid_values_are_rejected(tmp_path: Path, overrides: dict, error: type) -> None:
    with pytest.raises(error):
        load_config(str(write_config(tmp_path, **overrides)), verbose=False)


def test_missing_key_is_rejected() -> None:
    config = dict(DEFAULT_CONFIG)
    del config["max_steps"]

    with pytest.raises(ValueError, match="max_steps"):
        validate_config(config)


def test_integer_delay_is_accepted() -> None:
    config = dict(DEFAULT_CONFIG, step_delay=0)
    validate_config(config)


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "config" / "runtime_config.json"
    config = dict(DEFAULT_CONFIG, output_directory=str(tmp_path / "out"), step_mode="manual")

    save_config(config, str(path))

    assert load_config(str(path), verbose=False)["step_mode"] == "manual"


def test_shipped_runtime_config_is_valid() -> None:
    shipped = Path(__file__).resolve().parents[1] / "config" / "runtime_config.json"

    validate_config(json.loads(shipped.read_text(encoding="utf-8")))
