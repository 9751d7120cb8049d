from __future__ import annotations

from pathlib import Path

import pytest

from people_detection.app.config.settings import AppSettings, load_settings
from people_detection.app.detect import build_arg_parser, resolve_settings
from people_detection.app.errors import ConfigurationError


def test_defaults_match_reference_setup() -> None:
    settings = load_settings()

    assert settings.confidence_threshold == 0.5
    assert settings.nms_threshold == 0.4
    assert (settings.input_width, settings.input_height) == (300, 300)
    assert settings.i2c_device == "/dev/i2c-1"
    assert settings.i2c_address == 0x08
    assert settings.labels_path == Path("coco.names")


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PEOPLE_CONFIDENCE_THRESHOLD", "0.7")
    monkeypatch.setenv("PEOPLE_TRANSPORT", "simulated")
    monkeypatch.setenv("PEOPLE_I2C_ADDRESS", "0x2a")

    settings = AppSettings()

    assert settings.confidence_threshold == 0.7
    assert settings.transport == "simulated"
    assert settings.i2c_address == 0x2A


@pytest.mark.parametrize(
    "overrides",
    [
        {"confidence_threshold": 1.5},
        {"nms_threshold": -0.1},
        {"transport": "spi"},
        {"i2c_address": 0x80},
        {"i2c_address": "not-a-number"},
        {"process_every_n_frames": 0},
    ],
)
def test_invalid_settings_raise_configuration_error(overrides: dict) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(**overrides)


def test_cli_flags_override_settings(tmp_path: Path) -> None:
    args = build_arg_parser().parse_args(
        [
            "--labels",
            str(tmp_path / "labels.names"),
            "--conf",
            "0.6",
            "--nms",
            "0.3",
            "--transport",
            "simulated",
            "--i2c-address",
            "0x10",
            "--no-display",
            "--process-every",
            "2",
        ]
    )

    settings = resolve_settings(args)

    assert settings.labels_path == tmp_path / "labels.names"
    assert settings.confidence_threshold == 0.6
    assert settings.nms_threshold == 0.3
    assert settings.transport == "simulated"
    assert settings.i2c_address == 0x10
    assert settings.display is False
    assert settings.process_every_n_frames == 2
