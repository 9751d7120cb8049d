"""Greedy non-maximum suppression over decoded candidates."""
from __future__ import annotations

import logging
from typing import Iterable, List

from ..models import Detection
from ..utils.geometry import jaccard

LOGGER = logging.getLogger(__name__)


def suppress(
    candidates: Iterable[Detection],
    confidence_threshold: float,
    overlap_threshold: float,
) -> List[Detection]:
    """Keep the most confident boxes and drop the ones overlapping them.

    Suppression ignores class ids: a confident box of any class removes
    overlapping boxes of every other class. Survivors are returned in
    selection order, highest confidence first with ties kept in input order.
    """

    remaining = sorted(
        (candidate for candidate in candidates if candidate.confidence > confidence_threshold),
        key=lambda candidate: candidate.confidence,
        reverse=True,
    )
    survivors: List[Detection] = []
    while remaining:
        selected = remaining.pop(0)
        survivors.append(selected)
        remaining = [
            candidate
            for candidate in remaining
            if jaccard(selected.box, candidate.box) <= overlap_threshold
        ]
    LOGGER.debug("Suppression kept %d boxes", len(survivors))
    return survivors
