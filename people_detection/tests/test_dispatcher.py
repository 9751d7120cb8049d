from __future__ import annotations

import logging
from typing import List

import pytest

from people_detection.app.errors import TransportWriteError
from people_detection.app.models import BoundingBox, Detection, SignalState
from people_detection.app.services.dispatcher import SignalDispatcher
from people_detection.app.services.transport import BusTransport, SimulatedTransport

PERSON = Detection(class_id=0, confidence=0.9, box=BoundingBox(0, 0, 10, 10))
OTHER_PERSON = Detection(class_id=0, confidence=0.8, box=BoundingBox(50, 50, 10, 10))
DOG = Detection(class_id=16, confidence=0.9, box=BoundingBox(20, 20, 10, 10))


class FlakyTransport(BusTransport):
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.sent: List[bytes] = []

    def open(self) -> None:
        return None

    def write(self, payload: bytes) -> int:
        if self.failures > 0:
            self.failures -= 1
            raise TransportWriteError("bus error")
        self.sent.append(payload)
        return len(payload)

    def close(self) -> None:
        return None


@pytest.fixture()
def transport() -> SimulatedTransport:
    return SimulatedTransport()


def run_frames(dispatcher: SignalDispatcher, frames: List[List[Detection]]) -> List[bool]:
    state = SignalState()
    return [dispatcher.dispatch(frame, state) for frame in frames]


def test_rising_edge_sends_once(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)

    emitted = run_frames(dispatcher, [[PERSON]] * 10)

    assert emitted == [True] + [False] * 9
    assert transport.sent == [b"PERSON_DETECTED"]


def test_multiple_person_boxes_send_one_message(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)

    run_frames(dispatcher, [[PERSON, OTHER_PERSON, DOG], [OTHER_PERSON, PERSON]])

    assert len(transport.sent) == 1


def test_gap_frame_rearms_signal(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)

    emitted = run_frames(dispatcher, [[PERSON], [PERSON], [PERSON], [], [PERSON]])

    assert emitted == [True, False, False, False, True]
    assert len(transport.sent) == 2


def test_non_person_classes_do_not_signal(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)
    state = SignalState()

    assert dispatcher.dispatch([DOG], state) is False
    assert state.active is False
    assert transport.sent == []


def test_person_leaving_clears_state_without_message(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)
    state = SignalState()

    dispatcher.dispatch([PERSON], state)
    assert state.active is True
    assert dispatcher.dispatch([DOG], state) is False
    assert state.active is False
    assert len(transport.sent) == 1


def test_empty_frames_never_dispatch(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport)

    assert run_frames(dispatcher, [[], [], []]) == [False, False, False]
    assert transport.sent == []


def test_custom_person_class_and_payload(transport: SimulatedTransport) -> None:
    dispatcher = SignalDispatcher(transport, person_class_id=16, payload=b"DOG")

    run_frames(dispatcher, [[PERSON], [DOG]])

    assert transport.sent == [b"DOG"]


def test_write_failure_is_logged_and_retried_next_frame(caplog: pytest.LogCaptureFixture) -> None:
    transport = FlakyTransport(failures=1)
    dispatcher = SignalDispatcher(transport)
    state = SignalState()

    with caplog.at_level(logging.ERROR):
        assert dispatcher.dispatch([PERSON], state) is False
    assert state.active is False
    assert "Failed to signal person detection" in caplog.text

    assert dispatcher.dispatch([PERSON], state) is True
    assert state.active is True
    assert transport.sent == [b"PERSON_DETECTED"]
