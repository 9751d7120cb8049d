"""Geometry helper utilities for bounding boxes."""
from __future__ import annotations

from ..models import BoundingBox


def box_area(box: BoundingBox) -> int:
    """Return the area of a box, zero for degenerate boxes."""

    return max(0, box.width) * max(0, box.height)


def intersection_area(first: BoundingBox, second: BoundingBox) -> int:
    """Return the area shared by two boxes."""

    overlap_w = min(first.right, second.right) - max(first.left, second.left)
    overlap_h = min(first.bottom, second.bottom) - max(first.top, second.top)
    if overlap_w <= 0 or overlap_h <= 0:
        return 0
    return overlap_w * overlap_h


def jaccard(first: BoundingBox, second: BoundingBox) -> float:
    """Return intersection over union of two boxes."""

    inter = intersection_area(first, second)
    union = box_area(first) + box_area(second) - inter
    if union <= 0:
        return 0.0
    return inter / union
