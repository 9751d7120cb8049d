"""Video capture utilities."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Iterable, Union

import cv2
import numpy as np

from ..errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


@dataclass
class Frame:
    index: int
    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])


def parse_source(source: str) -> Union[int, str]:
    """Return a device index for numeric sources, the path or URL otherwise."""

    try:
        return int(source)
    except ValueError:
        return source


def open_video_source(source: Union[int, str]) -> cv2.VideoCapture:
    """Open a camera index, file path or stream URL for reading."""

    capture = cv2.VideoCapture(source)
    if not capture.isOpened():
        capture.release()
        raise ConfigurationError(f"Could not open video source: {source}")
    LOGGER.info("Video source %s opened successfully", source)
    return capture


@contextmanager
def managed_capture(source: Union[int, str]) -> Generator[cv2.VideoCapture, None, None]:
    """Context manager ensuring capture release."""

    capture = open_video_source(source)
    try:
        yield capture
    finally:
        LOGGER.info("Releasing video source")
        capture.release()


def iter_frames(capture: cv2.VideoCapture, process_every: int = 1) -> Iterable[Frame]:
    """Yield frames from capture, optionally skipping frames for performance."""

    frame_idx = 0
    processed_idx = 0
    while True:
        success, frame = capture.read()
        if not success or frame is None or frame.size == 0:
            LOGGER.info("End of stream reached after %d frames", frame_idx)
            break
        frame_idx += 1
        if process_every > 1 and frame_idx % process_every != 0:
            continue
        processed_idx += 1
        yield Frame(index=processed_idx, data=frame)
