"""Edge-triggered person signal towards the microcontroller."""
from __future__ import annotations

import logging
from typing import Iterable

from ..errors import TransportWriteError
from ..models import Detection, SignalState
from .transport import BusTransport

LOGGER = logging.getLogger(__name__)

DEFAULT_PAYLOAD = b"PERSON_DETECTED"


class SignalDispatcher:
    """Send one bus message each time a person appears after an empty frame."""

    def __init__(
        self,
        transport: BusTransport,
        person_class_id: int = 0,
        payload: bytes = DEFAULT_PAYLOAD,
    ) -> None:
        self.transport = transport
        self.person_class_id = person_class_id
        self.payload = payload

    def dispatch(self, survivors: Iterable[Detection], state: SignalState) -> bool:
        """Update ``state`` for this frame and return True when a message was sent."""

        person_present = any(detection.class_id == self.person_class_id for detection in survivors)
        if not person_present:
            if state.active:
                LOGGER.info("Person no longer detected, signal cleared")
            state.active = False
            return False
        if state.active:
            return False

        try:
            self.transport.write(self.payload)
        except TransportWriteError as exc:
            # State stays inactive so the next frame makes a fresh attempt.
            LOGGER.error("Failed to signal person detection: %s", exc)
            return False
        state.active = True
        LOGGER.info("Person detected, signal sent")
        return True
