"""Entry point for real-time people detection with bus signaling."""
from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import cv2
import numpy as np

from .config.settings import AppSettings, load_settings
from .errors import ConfigurationError, MalformedOutputError, TransportError
from .models import Detection, SignalState
from .services.decoder import decode
from .services.dispatcher import SignalDispatcher
from .services.inference import DnnInference
from .services.labels import ClassLabelTable
from .services.suppression import suppress
from .services.transport import build_transport
from .utils.video import Frame, iter_frames, managed_capture, parse_source

LOGGER = logging.getLogger(__name__)

BOX_COLOR = (255, 178, 50)
PLATE_COLOR = (255, 255, 255)
TEXT_COLOR = (0, 0, 0)
BANNER_COLOR = (0, 0, 255)
LABEL_FONT_SCALE = 0.75


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="People detection with I2C signaling")
    parser.add_argument("--source", type=str, default="0", help="Video source path or device index")
    parser.add_argument("--labels", type=str, default=None, help="Class names file")
    parser.add_argument("--model-config", type=str, default=None, help="Caffe prototxt path")
    parser.add_argument("--model-weights", type=str, default=None, help="Caffe weights path")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold")
    parser.add_argument("--nms", type=float, default=None, help="Non-maximum suppression threshold")
    parser.add_argument("--transport", choices=["i2c", "simulated"], default=None, help="Bus transport")
    parser.add_argument("--i2c-device", type=str, default=None, help="I2C device path")
    parser.add_argument("--i2c-address", type=str, default=None, help="I2C target address, e.g. 0x08")
    parser.add_argument("--no-display", action="store_true", help="Disable OpenCV window display")
    parser.add_argument("--process-every", type=int, default=None, help="Process only every Nth frame")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Logging format")
    return parser


class JsonFormatter(logging.Formatter):
    """One JSON object per record, safe for quotes in messages."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(settings: AppSettings) -> None:
    formatter: logging.Formatter
    if settings.log_format == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logging.basicConfig(level=logging.INFO, handlers=[handler])


def resolve_settings(args: argparse.Namespace) -> AppSettings:
    overrides = {}
    if args.labels:
        overrides["labels_path"] = args.labels
    if args.model_config:
        overrides["model_config_path"] = args.model_config
    if args.model_weights:
        overrides["model_weights_path"] = args.model_weights
    if args.conf is not None:
        overrides["confidence_threshold"] = args.conf
    if args.nms is not None:
        overrides["nms_threshold"] = args.nms
    if args.transport:
        overrides["transport"] = args.transport
    if args.i2c_device:
        overrides["i2c_device"] = args.i2c_device
    if args.i2c_address:
        overrides["i2c_address"] = args.i2c_address
    if args.no_display:
        overrides["display"] = False
    if args.process_every:
        overrides["process_every_n_frames"] = args.process_every
    if args.log_format:
        overrides["log_format"] = args.log_format

    return load_settings(**overrides)


@dataclass
class FrameResult:
    survivors: List[Detection] = field(default_factory=list)
    signal_sent: bool = False
    latency_ms: float = 0.0


def detect_people(
    outputs: Sequence[np.ndarray],
    frame_width: int,
    frame_height: int,
    settings: AppSettings,
) -> List[Detection]:
    """Decode and suppress one frame's outputs, empty on malformed tensors."""

    try:
        candidates = decode(outputs, frame_width, frame_height, settings.confidence_threshold)
    except MalformedOutputError as exc:
        LOGGER.warning("Skipping detections for this frame: %s", exc)
        return []
    return suppress(candidates, settings.confidence_threshold, settings.nms_threshold)


def process_frame(
    frame: Frame,
    inference: DnnInference,
    dispatcher: SignalDispatcher,
    state: SignalState,
    settings: AppSettings,
) -> FrameResult:
    loop_start = time.perf_counter()
    outputs = inference.forward(frame.data)
    survivors = detect_people(outputs, frame.width, frame.height, settings)
    signal_sent = dispatcher.dispatch(survivors, state)
    latency_ms = (time.perf_counter() - loop_start) * 1000
    return FrameResult(survivors=survivors, signal_sent=signal_sent, latency_ms=latency_ms)


def _draw_prediction(frame: np.ndarray, detection: Detection, label: str, settings: AppSettings) -> None:
    box = detection.box
    cv2.rectangle(frame, (box.left, box.top), (box.right, box.bottom), BOX_COLOR, 3)

    (label_w, label_h), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, settings.overlay_font_scale, 1)
    top = max(box.top, label_h)
    cv2.rectangle(
        frame,
        (box.left, top - round(1.5 * label_h)),
        (box.left + round(1.5 * label_w), top + baseline),
        PLATE_COLOR,
        cv2.FILLED,
    )
    cv2.putText(frame, label, (box.left, top), cv2.FONT_HERSHEY_SIMPLEX, LABEL_FONT_SCALE, TEXT_COLOR, 1)


def annotate_frame(
    frame: np.ndarray,
    survivors: Sequence[Detection],
    labels: ClassLabelTable,
    settings: AppSettings,
    inference_ms: Optional[float] = None,
) -> np.ndarray:
    """Draw person boxes with their labels and the inference time banner."""

    output = frame.copy()
    for detection in survivors:
        if detection.class_id != settings.person_class_id:
            continue
        _draw_prediction(output, detection, labels.label_for(detection), settings)

    if inference_ms is not None:
        cv2.putText(
            output,
            f"Inference time: {inference_ms:.2f} ms",
            (0, 15),
            cv2.FONT_HERSHEY_SIMPLEX,
            settings.overlay_font_scale,
            BANNER_COLOR,
        )
    return output


def process_video_stream(
    video_source: Union[int, str],
    settings: AppSettings,
    inference: DnnInference,
    dispatcher: SignalDispatcher,
    labels: ClassLabelTable,
) -> None:
    state = SignalState()
    with managed_capture(video_source) as capture:
        for frame in iter_frames(capture, process_every=settings.process_every_n_frames):
            result = process_frame(frame, inference, dispatcher, state, settings)
            persons = sum(1 for d in result.survivors if d.class_id == settings.person_class_id)
            LOGGER.info(
                "Frame %d | detections=%d | persons=%d | signal_active=%s | latency_ms=%.2f",
                frame.index,
                len(result.survivors),
                persons,
                state.active,
                result.latency_ms,
            )

            if settings.display:
                annotated = annotate_frame(
                    frame.data, result.survivors, labels, settings, inference.last_inference_ms()
                )
                cv2.imshow(settings.window_name, annotated)
                key = cv2.waitKey(1) & 0xFF
                if key in (ord("q"), 27):
                    LOGGER.info("Quit signal received from keyboard")
                    break
                if key == ord("p"):
                    LOGGER.info("Paused. Press any key to resume.")
                    cv2.waitKey(0)


def run_detection(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
    except ConfigurationError as exc:
        LOGGER.critical("%s", exc)
        return 1
    setup_logging(settings)

    LOGGER.info("Starting people detection pipeline (OpenCV %s)", cv2.__version__)

    try:
        labels = ClassLabelTable.from_file(settings.labels_path)
        inference = DnnInference(
            settings.model_config_path,
            settings.model_weights_path,
            (settings.input_width, settings.input_height),
        )
        transport = build_transport(settings.transport, settings.i2c_device, settings.i2c_address)
    except ConfigurationError as exc:
        LOGGER.critical("%s", exc)
        return 1

    try:
        transport.open()
    except TransportError as exc:
        LOGGER.critical("%s", exc)
        return 1

    dispatcher = SignalDispatcher(
        transport,
        person_class_id=settings.person_class_id,
        payload=settings.signal_payload.encode("utf-8"),
    )
    try:
        process_video_stream(parse_source(args.source), settings, inference, dispatcher, labels)
    except ConfigurationError as exc:
        LOGGER.critical("%s", exc)
        return 1
    finally:
        transport.close()
        if settings.display:
            cv2.destroyAllWindows()
    LOGGER.info("People detection completed")
    return 0


def main() -> None:
    parser = build_arg_parser()
    args = parser.parse_args()

    def handle_interrupt(signum: int, frame: Optional[object]) -> None:  # pragma: no cover - signal handling
        LOGGER.warning("Received interrupt signal (%d), shutting down", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_interrupt)
    sys.exit(run_detection(args))


if __name__ == "__main__":  # pragma: no cover
    main()
