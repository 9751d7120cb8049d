"""Class label table loading."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..errors import ConfigurationError
from ..models import Detection

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassLabelTable:
    """Ordered class names indexed by class id."""

    names: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.names)

    def name_for(self, class_id: int) -> str:
        if 0 <= class_id < len(self.names):
            return self.names[class_id]
        return str(class_id)

    def label_for(self, detection: Detection) -> str:
        """Return the on-screen label, e.g. ``person:0.87``."""

        return f"{self.name_for(detection.class_id)}:{detection.confidence:.2f}"

    @classmethod
    def from_file(cls, path: Path) -> "ClassLabelTable":
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Unable to read class labels from {path}: {exc}") from exc
        names = tuple(line.strip() for line in text.splitlines())
        while names and not names[-1]:
            names = names[:-1]
        if not names:
            raise ConfigurationError(f"Class label file {path} is empty")
        LOGGER.info("Loaded %d class labels from %s", len(names), path)
        return cls(names=names)
