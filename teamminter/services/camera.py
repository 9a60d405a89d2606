"""Camera capture via OpenCV.

The device is held only inside :func:`open_camera`; leaving the ``with``
block releases it whether the capture succeeded, failed or was abandoned.
"""
from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import Iterator

import cv2
from PIL import Image

from teamminter.models import ImageAsset

logger = logging.getLogger(__name__)


class CameraError(RuntimeError):
    """Raised when the camera cannot be opened or returns no frame."""


class Camera:  # pylint: disable=too-few-public-methods
    def __init__(self, capture: "cv2.VideoCapture", index: int = 0) -> None:
        self._capture = capture
        self.index = index

    def read_frame(self, *, filename: str = "photo.jpg") -> ImageAsset:
        """Grab one frame and return it as a lossless PNG asset."""

        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraError("Camera returned no frame")
        img = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        logger.debug("Captured %dx%d frame from camera %d", img.width, img.height, self.index)
        return ImageAsset(
            data=buffer.getvalue(),
            mime_type="image/png",
            width=img.width,
            height=img.height,
            filename=filename,
        )


@contextmanager
def open_camera(index: int = 0, *, width: int = 1920, height: int = 1080) -> Iterator[Camera]:
    capture = cv2.VideoCapture(index)
    try:
        if not capture.isOpened():
            raise CameraError("Camera access denied. Please enable camera permissions.")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        yield Camera(capture, index)
    finally:
        capture.release()
        logger.debug("Camera %d released", index)
