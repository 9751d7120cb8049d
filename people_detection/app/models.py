"""Shared data models for people detection."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in pixel units, top-left corner plus size."""

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


@dataclass(frozen=True)
class Detection:
    """Represents a single detected object."""

    class_id: int
    confidence: float
    box: BoundingBox


@dataclass
class SignalState:
    """Whether the person signal is currently raised on the bus."""

    active: bool = False
