from __future__ import annotations

import argparse
import logging
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from gesture_overlay import GestureClassifier, HandLandmarkDetector  # noqa: E402
from gesture_overlay.overlay import draw_gesture, draw_skeleton  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Classify the hand gesture in a single image.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--model", default="models/hand_landmarker.task", help="Path to hand_landmarker.task")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    with HandLandmarkDetector(static_image_mode=True, tasks_model_path=args.model) as detector:
        skeleton = detector.detect(frame)

    result = GestureClassifier().classify(skeleton)
    out = draw_skeleton(frame, skeleton)
    out = draw_gesture(out, result)

    ok = cv2.imwrite(args.out, out)
    if not ok:
        raise RuntimeError(f"Could not write output image: {args.out}")

    print(f"hand: {'yes' if skeleton else 'no'}")
    print(f"gesture: {result.label.value} confidence={result.confidence:.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
