from __future__ import annotations

import argparse
import logging
import os
import platform
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from gesture_overlay import (  # noqa: E402
    CountPolicy,
    FrameProcessor,
    HandLandmarkDetector,
    LiveStreamLandmarkSource,
    ProcessorConfig,
    RememberingLandmarkSource,
    ThreadedLandmarkSource,
)
from gesture_overlay.overlay import draw_gesture, draw_skeleton, draw_status, draw_tally  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Webcam hand gesture classifier demo.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode)",
    )
    ap.add_argument("--smooth", type=int, default=0, help="Majority-vote window in frames (0 = off)")
    ap.add_argument(
        "--count-policy",
        choices=[p.value for p in CountPolicy],
        default=CountPolicy.ON_TRANSITION.value,
        help="When the gesture counters increment",
    )
    ap.add_argument("--timeout", type=float, default=2.0, help="Abandon a stalled detector call after N seconds")
    ap.add_argument("--live-stream", action="store_true", help="Use the MediaPipe Tasks LIVE_STREAM backend")
    ap.add_argument("--model", default="models/hand_landmarker.task", help="Path to hand_landmarker.task")
    ap.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(args.camera, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {args.camera}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal/Cursor."
        )

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, args.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, args.height)

    def make_source():
        if args.live_stream:
            source = LiveStreamLandmarkSource(tasks_model_path=args.model)
        else:
            source = ThreadedLandmarkSource(HandLandmarkDetector(tasks_model_path=args.model))
        return RememberingLandmarkSource(source)

    config = ProcessorConfig(
        detector_timeout_s=args.timeout,
        smoothing_window=args.smooth,
        count_policy=CountPolicy(args.count_policy),
    )

    with FrameProcessor(make_source, config=config) as processor:
        init_thread = processor.initialize_in_background()
        started = False

        while True:
            ok, frame = cap.read()
            if not ok:
                break

            if not args.no_mirror:
                frame = cv2.flip(frame, 1)

            if not started and not init_thread.is_alive() and processor.ready:
                started = processor.start()

            processor.tick(frame.copy())

            if processor.streaming:
                draw_skeleton(frame, processor.source.skeleton)
            draw_gesture(frame, processor.gesture.result)
            draw_tally(frame, processor.tally)
            draw_status(frame, processor.ready)

            cv2.imshow("gesture overlay - press q to quit", frame)
            key = cv2.waitKey(1) & 0xFF
            if key in (ord("q"), 27):
                break

    cap.release()
    cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
