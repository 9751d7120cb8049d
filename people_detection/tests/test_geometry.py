from __future__ import annotations

import pytest

from people_detection.app.models import BoundingBox
from people_detection.app.utils.geometry import box_area, intersection_area, jaccard


def test_jaccard_identical_boxes() -> None:
    box = BoundingBox(10, 10, 20, 30)
    assert jaccard(box, box) == pytest.approx(1.0)


def test_jaccard_disjoint_and_touching_boxes() -> None:
    first = BoundingBox(0, 0, 10, 10)
    assert jaccard(first, BoundingBox(50, 50, 10, 10)) == 0.0
    assert jaccard(first, BoundingBox(10, 0, 10, 10)) == 0.0


def test_jaccard_partial_overlap() -> None:
    first = BoundingBox(0, 0, 10, 10)
    second = BoundingBox(1, 1, 10, 10)

    assert intersection_area(first, second) == 81
    assert jaccard(first, second) == pytest.approx(81 / 119)


def test_jaccard_contained_box() -> None:
    outer = BoundingBox(0, 0, 10, 10)
    inner = BoundingBox(2, 2, 5, 5)

    assert jaccard(outer, inner) == pytest.approx(25 / 100)


def test_degenerate_boxes_have_no_area() -> None:
    empty = BoundingBox(0, 0, 0, 10)
    assert box_area(empty) == 0
    assert jaccard(empty, empty) == 0.0
