from __future__ import annotations

import logging
import os
import ssl
import subprocess
import urllib.request
from typing import Optional


logger = logging.getLogger(__name__)

HAND_LANDMARKER_TASK_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/latest/hand_landmarker.task"
)


def _ssl_context() -> ssl.SSLContext:
    # python.org macOS builds may lack root certificates; certifi ships its own bundle.
    try:
        import certifi  # type: ignore
    except ImportError:
        return ssl.create_default_context()
    return ssl.create_default_context(cafile=certifi.where())


def _remove_partial(path: str) -> None:
    if os.path.exists(path):
        os.remove(path)


def _download_urllib(url: str, model_path: str, timeout_s: int) -> None:
    with urllib.request.urlopen(url, context=_ssl_context(), timeout=timeout_s) as r, open(model_path, "wb") as f:
        f.write(r.read())


def _download_curl(url: str, model_path: str) -> Optional[str]:
    """Returns curl's stderr on failure, None on success."""
    try:
        proc = subprocess.run(
            ["curl", "-L", "-o", model_path, url],
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except OSError as e:
        return str(e)
    if proc.returncode == 0 and os.path.exists(model_path) and os.path.getsize(model_path) > 0:
        return None
    return proc.stderr.strip()


def ensure_hand_landmarker_task(model_path: str, *, url: str = HAND_LANDMARKER_TASK_URL, timeout_s: int = 30) -> str:
    """
    Ensure the `hand_landmarker.task` model exists at `model_path`, downloading it if missing.

    Tries urllib first and falls back to `curl`, which often works when Python's
    certificate store is misconfigured.
    """

    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("Downloading hand landmarker model to %s", model_path)

    try:
        _download_urllib(url, model_path, timeout_s)
        return model_path
    except (OSError, ssl.SSLError) as e:
        urllib_error = e
        logger.warning("urllib download failed (%s), retrying with curl", e)
        _remove_partial(model_path)

    curl_error = _download_curl(url, model_path)
    if curl_error is None:
        return model_path
    _remove_partial(model_path)

    raise RuntimeError(
        "Missing MediaPipe Tasks model file and auto-download failed.\n\n"
        f"Expected model at: {model_path}\n"
        f"URL: {url}\n\n"
        "Download it manually:\n"
        f'  mkdir -p "{os.path.dirname(model_path) or "."}"\n'
        f'  curl -L -o "{model_path}" "{url}"\n\n'
        f"curl error: {curl_error}"
    ) from urllib_error
