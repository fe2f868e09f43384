from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cv2

from .capture import DeviceCameraSource, FrameSource
from .config import DemoConfig
from .detect import Detection, MarkerDetector, MarkerStatus
from .keys import KeyEvent, is_char
from .lifecycle import InputRouter, ProcessLifecycle, RawTerminal
from .overlay import draw_detections, draw_status, put_outlined_text, status_text
from .stats import FpsStats

DOWNSCALE_STEPS = (1.0, 0.75, 0.5, 0.25)
FRAME_SKIP_STEPS = (1, 2, 3, 4)
MESSAGE_FRAMES = 45


@dataclass
class SessionSummary:
    frames_processed: int
    detections: int
    avg_fps: float
    exit_reason: str
    snapshots: int


def _next_in_cycle(steps, current):
    try:
        i = steps.index(current)
    except ValueError:
        return steps[0]
    return steps[(i + 1) % len(steps)]


class DetectionDemo:
    def __init__(
        self,
        config: DemoConfig,
        logger=None,
        source: Optional[FrameSource] = None,
        detector: Optional[MarkerDetector] = None,
        lifecycle: Optional[ProcessLifecycle] = None,
        terminal: Optional[RawTerminal] = None,
    ):
        self.config = config
        self.logger = logger or logging.getLogger("aruco_demo.detect")
        self.source = source
        self.detector = detector or MarkerDetector(
            primary=config.aruco_dict,
            target_ids=config.target_ids,
            detect_all=config.detect_all,
            single_dict=config.single_dict,
            downscale=config.downscale,
            keep_candidates=config.show_rejected,
        )
        self.lifecycle = lifecycle or ProcessLifecycle()
        self.terminal = terminal or RawTerminal()
        self.stats = FpsStats()
        self.frame_skip = max(1, int(config.frame_skip))
        self.snapshots = 0
        self._message: Optional[str] = None
        self._message_ttl = 0
        self._last_frame = None

    def _build_source(self) -> FrameSource:
        if self.source is not None:
            return self.source
        return DeviceCameraSource(self.config.device, self.config.width, self.config.height)

    def _flash(self, text: str) -> None:
        self._message = text
        self._message_ttl = MESSAGE_FRAMES
        self.logger.info(text)

    def save_snapshot(self, frame) -> Optional[Path]:
        out_dir = Path(self.config.snapshot_dir)
        path = out_dir / time.strftime("snapshot_%Y%m%d_%H%M%S.png")
        n = 1
        while path.exists():
            path = out_dir / time.strftime(f"snapshot_%Y%m%d_%H%M%S_{n}.png")
            n += 1
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            ok = cv2.imwrite(str(path), frame)
        except (OSError, cv2.error) as exc:
            self.logger.error("snapshot failed: %s", exc)
            self._flash("Snapshot failed")
            return None
        if not ok:
            self.logger.error("snapshot failed: could not write %s", path)
            self._flash("Snapshot failed")
            return None
        self.snapshots += 1
        self._flash(f"Saved: {path}")
        return path

    def handle_hotkey(self, event: KeyEvent) -> None:
        det = self.detector
        if is_char(event, "a", "A"):
            det.detect_all = not det.detect_all
            self._flash(f"detect all dictionaries: {'on' if det.detect_all else 'off'}")
        elif is_char(event, "z", "Z"):
            det.downscale = _next_in_cycle(DOWNSCALE_STEPS, det.downscale)
            self._flash(f"downscale: {det.downscale:g}")
        elif is_char(event, "f", "F"):
            self.frame_skip = _next_in_cycle(FRAME_SKIP_STEPS, self.frame_skip)
            self._flash(f"frame skip: {self.frame_skip}")
        elif is_char(event, "1"):
            det.single_dict = not det.single_dict
            self._flash(f"single dictionary: {'on' if det.single_dict else 'off'}")
        elif is_char(event, "r", "R"):
            det.keep_candidates = not det.keep_candidates
            self._flash(f"rejected candidates: {'shown' if det.keep_candidates else 'hidden'}")
        elif is_char(event, "p", "P"):
            if self._last_frame is not None:
                self.save_snapshot(self._last_frame)

    def _compose(self, frame, dets: list[Detection]) -> None:
        draw_detections(frame, dets)
        text = status_text(
            self.stats,
            sum(1 for d in dets if d.status is not MarkerStatus.CANDIDATE),
            self.detector.mode_label(),
            self.detector.downscale,
            self.frame_skip,
        )
        draw_status(frame, text)
        if self._message_ttl > 0:
            h = frame.shape[0]
            put_outlined_text(frame, self._message, (10, h - 12), (0, 255, 255), 0.6, 1)
            self._message_ttl -= 1

    def run(self) -> SessionSummary:
        """Capture, detect, draw and display until a quit key, signal or end of stream.

        Raises CameraOpenError before any window is created when the
        camera cannot be opened.
        """
        source = self._build_source()
        source.start()
        self.stats.restart_clock()

        frames = 0
        total_dets = 0
        dets: list[Detection] = []
        exit_reason = "end of stream"
        t0 = time.time()
        window = self.config.window_name

        try:
            cv2.namedWindow(window, cv2.WINDOW_AUTOSIZE)
            with self.lifecycle, self.terminal:
                router = InputRouter(self.lifecycle, self.terminal)
                self.logger.info(
                    "started: dicts=%s",
                    [d.name for d in self.detector.active_dictionaries()],
                )
                while True:
                    if self.lifecycle.exit_requested:
                        exit_reason = "signal"
                        break
                    if self.config.max_frames and frames >= self.config.max_frames:
                        exit_reason = "max frames"
                        break

                    item = source.read()
                    if item is None:
                        break
                    frame, frame_id = item

                    t_start = time.perf_counter()
                    if frames % self.frame_skip == 0:
                        dets = self.detector.detect(frame)
                        ids = [d.marker_id for d in dets if d.marker_id is not None]
                        if ids:
                            self.logger.debug("frame=%d ids=%s", frame_id, ids)
                        total_dets += len(ids)
                    self.stats.update_avg_ms((time.perf_counter() - t_start) * 1000.0)
                    self.stats.tick_fps()

                    self._compose(frame, dets)
                    self._last_frame = frame
                    cv2.imshow(window, frame)
                    frames += 1

                    events = router.poll(cv2.waitKeyEx(1))
                    if router.exit_requested(events):
                        exit_reason = "signal" if self.lifecycle.exit_requested else "key"
                        break
                    for event in events:
                        self.handle_hotkey(event)
        finally:
            source.stop()
            cv2.destroyAllWindows()

        elapsed = max(1e-6, time.time() - t0)
        avg = frames / elapsed
        self.logger.info(
            "summary frames=%d avg_fps=%.2f exit=%s", frames, avg, exit_reason
        )
        return SessionSummary(frames, total_dets, avg, exit_reason, self.snapshots)
