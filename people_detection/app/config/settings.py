"""Configuration utilities for people detection."""
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigurationError


class AppSettings(BaseSettings):
    """Application configuration sourced from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="PEOPLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        protected_namespaces=(),
    )

    model_config_path: Path = Field(default=Path("deploy.prototxt"), description="Caffe network definition")
    model_weights_path: Path = Field(default=Path("mobilenet_iter_73000.caffemodel"), description="Caffe weights")
    labels_path: Path = Field(default=Path("coco.names"), description="Newline-delimited class names")
    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    nms_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    input_width: int = Field(default=300, gt=0)
    input_height: int = Field(default=300, gt=0)
    person_class_id: int = Field(default=0, ge=0)
    signal_payload: str = Field(default="PERSON_DETECTED", min_length=1)
    transport: Literal["i2c", "simulated"] = Field(default="i2c")
    i2c_device: str = Field(default="/dev/i2c-1")
    i2c_address: int = Field(default=0x08, ge=0, le=0x7F)
    display: bool = Field(default=True, description="Render OpenCV window when true.")
    window_name: str = Field(default="People Detection")
    process_every_n_frames: int = Field(default=1, ge=1)
    log_format: Literal["text", "json"] = Field(default="text")
    overlay_font_scale: float = Field(default=0.5, gt=0.0)

    @field_validator("model_config_path", "model_weights_path", "labels_path", mode="before")
    @classmethod
    def _expand_path(cls, value: str | Path) -> Path:
        return Path(value).expanduser()

    @field_validator("i2c_address", mode="before")
    @classmethod
    def _parse_address(cls, value: object) -> object:
        if isinstance(value, str):
            return int(value, 0)
        return value


def load_settings(**overrides: object) -> AppSettings:
    """Return application settings, applying optional overrides."""

    try:
        return AppSettings(**overrides)
    except (ValidationError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
