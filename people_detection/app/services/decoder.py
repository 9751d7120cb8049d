"""Decode raw network output tensors into candidate detections."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import numpy as np

from ..errors import MalformedOutputError
from ..models import BoundingBox, Detection

LOGGER = logging.getLogger(__name__)

BOX_COLUMNS = 5


def _as_rows(tensor: np.ndarray, num_classes: Optional[int]) -> np.ndarray:
    rows = np.asarray(tensor, dtype=np.float32)
    # Peel leading singleton dimensions (batch-like), e.g. (1, N, C)
    while rows.ndim > 2 and rows.shape[0] == 1:
        rows = rows[0]
    if rows.ndim != 2:
        raise MalformedOutputError(f"Expected a 2D output tensor, got shape {tuple(np.shape(tensor))}")
    columns = rows.shape[1]
    if columns <= BOX_COLUMNS:
        raise MalformedOutputError(f"Output tensor has {columns} columns, no class scores present")
    if num_classes is not None and columns != BOX_COLUMNS + num_classes:
        raise MalformedOutputError(
            f"Output tensor has {columns} columns, expected {BOX_COLUMNS + num_classes} for {num_classes} classes"
        )
    if not np.isfinite(rows).all():
        raise MalformedOutputError("Output tensor contains NaN or infinite values")
    return rows


def decode(
    tensors: Iterable[np.ndarray],
    frame_width: int,
    frame_height: int,
    confidence_threshold: float,
    num_classes: Optional[int] = None,
) -> List[Detection]:
    """Convert per-anchor rows into pixel-space detections above the threshold.

    Each row is ``[cx, cy, w, h, objectness, score_0, ...]`` with the box given
    as fractions of the frame size. The anchor's class is the arg-max of its
    scores and its confidence is that score; anchors at or below
    ``confidence_threshold`` are dropped. Boxes are not clamped to the frame.
    """

    candidates: List[Detection] = []
    for tensor in tensors:
        rows = _as_rows(tensor, num_classes)
        scores = rows[:, BOX_COLUMNS:]
        class_ids = np.argmax(scores, axis=1)
        confidences = scores[np.arange(len(rows)), class_ids]
        for row, class_id, score in zip(rows, class_ids, confidences):
            confidence = float(score)
            if confidence <= confidence_threshold:
                continue
            center_x = int(row[0] * frame_width)
            center_y = int(row[1] * frame_height)
            width = int(row[2] * frame_width)
            height = int(row[3] * frame_height)
            if width <= 0 or height <= 0:
                continue
            box = BoundingBox(left=center_x - width // 2, top=center_y - height // 2, width=width, height=height)
            candidates.append(Detection(class_id=int(class_id), confidence=confidence, box=box))
    LOGGER.debug("Decoded %d candidates", len(candidates))
    return candidates
