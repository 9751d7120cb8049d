"""OpenCV DNN inference wrapper for the MobileNet-SSD Caffe model."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

import cv2
import numpy as np

from ..errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


class DnnInference:
    """Runs the forward pass and returns the raw output tensors."""

    SCALE = 1 / 127.5
    MEAN = (127.5, 127.5, 127.5)

    def __init__(self, config_path: Path, weights_path: Path, input_size: Tuple[int, int]) -> None:
        for path in (config_path, weights_path):
            if not path.exists():
                raise ConfigurationError(f"Model file not found: {path}")
        LOGGER.info("Loading Caffe model from %s (%s)", weights_path, config_path)
        self.input_size = input_size
        self._net = cv2.dnn.readNetFromCaffe(str(config_path), str(weights_path))
        self._net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        self._net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        self.output_names: Tuple[str, ...] = tuple(self._net.getUnconnectedOutLayersNames())
        LOGGER.debug("Network output layers: %s", self.output_names)

    def forward(self, frame: np.ndarray) -> List[np.ndarray]:
        blob = cv2.dnn.blobFromImage(frame, self.SCALE, self.input_size, self.MEAN, swapRB=True, crop=False)
        self._net.setInput(blob)
        return list(self._net.forward(list(self.output_names)))

    def last_inference_ms(self) -> float:
        ticks, _ = self._net.getPerfProfile()
        return ticks * 1000.0 / cv2.getTickFrequency()
