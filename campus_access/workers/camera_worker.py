# =======================================================================================
# campus_access/workers/camera_worker.py - Live Camera Barcode Decoder
# =======================================================================================
import asyncio
import logging
import os
import sys
import threading
import time
from typing import Optional
from ..config import config
from ..models.enums import DecoderFailure
from ..scanner.decoder import DetectionCallback, ErrorCallback
from ..utils.exceptions import DecoderUnavailable

try:
    import cv2
except ImportError:
    cv2 = None

logger = logging.getLogger("campus_access.camera")


def classify_open_failure(camera_index: int, platform: str = sys.platform) -> DecoderFailure:
    """
    OpenCV only says "not opened"; on Linux the device node tells us why.
    """
    if platform.startswith("linux"):
        device = f"/dev/video{camera_index}"
        if not os.path.exists(device):
            return DecoderFailure.NO_DEVICE
        if not os.access(device, os.R_OK | os.W_OK):
            return DecoderFailure.PERMISSION_DENIED
        return DecoderFailure.DEVICE_BUSY
    return DecoderFailure.NO_DEVICE


def _release_late_capture(opener: asyncio.Future) -> None:
    if opener.cancelled() or opener.exception() is not None:
        return
    opener.result().release()
    logger.debug("[camera] Released a capture opened after the timeout")


class CameraBarcodeDecoder:
    """
    OpenCV-backed live decoder.

    Frames are read in a daemon thread because VideoCapture blocks; every
    decoded value is handed to the event loop with call_soon_threadsafe.
    """

    def __init__(
        self,
        camera_index: int = config.CAMERA_INDEX,
        open_timeout: float = config.CAMERA_PERMISSION_TIMEOUT,
        frame_width: int = 640,
        frame_height: int = 480,
    ):
        self.camera_index = camera_index
        self.open_timeout = open_timeout
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.running = False
        self._thread: Optional[threading.Thread] = None
        self._opener: Optional[asyncio.Future] = None

    # ------------------------------------------------------------------
    # Start / Stop
    # ------------------------------------------------------------------
    async def start(self, on_detect: DetectionCallback, on_error: ErrorCallback) -> None:
        if self.running:
            return
        if cv2 is None:
            raise DecoderUnavailable(DecoderFailure.LIBRARY_MISSING)

        # A previous session may still be releasing the device.
        if self._thread is not None and self._thread.is_alive():
            await asyncio.to_thread(self._thread.join, 2.0)

        if self._opener is not None and not self._opener.done():
            raise DecoderUnavailable(DecoderFailure.DEVICE_BUSY, "previous open still pending")

        self._opener = asyncio.ensure_future(asyncio.to_thread(self._open_capture))
        try:
            capture = await asyncio.wait_for(asyncio.shield(self._opener), timeout=self.open_timeout)
        except asyncio.TimeoutError:
            # The opener thread cannot be interrupted; free the device if it opens late.
            self._opener.add_done_callback(_release_late_capture)
            raise DecoderUnavailable(
                DecoderFailure.TIMEOUT, f"no answer from camera {self.camera_index} in {self.open_timeout:g}s"
            )

        loop = asyncio.get_running_loop()
        self.running = True
        self._thread = threading.Thread(
            target=self._run_loop, args=(capture, loop, on_detect, on_error), daemon=True
        )
        self._thread.start()
        logger.debug("[camera] Worker started on index %s", self.camera_index)

    def stop(self) -> None:
        """Signal the reader thread; it releases the device on its way out."""
        if self.running:
            logger.debug("[camera] Stopping")
        self.running = False

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------
    def _open_capture(self):
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            reason = classify_open_failure(self.camera_index)
            raise DecoderUnavailable(reason, f"camera index {self.camera_index}")

        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)

        ok, _ = capture.read()
        if not ok:
            capture.release()
            raise DecoderUnavailable(DecoderFailure.DEVICE_BUSY, "could not read a frame")
        return capture

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def _run_loop(self, capture, loop, on_detect: DetectionCallback, on_error: ErrorCallback) -> None:
        detector = cv2.barcode.BarcodeDetector()
        try:
            while self.running:
                ok, frame = capture.read()
                if not ok:
                    self.running = False
                    loop.call_soon_threadsafe(
                        on_error,
                        DecoderUnavailable(DecoderFailure.DEVICE_BUSY, "video stream interrupted"),
                    )
                    break

                found, decoded, _types, _points = detector.detectAndDecodeWithType(frame)
                if not found:
                    continue

                detected_at = time.monotonic() * 1000.0
                for code in decoded:
                    code = str(code).strip()
                    if code and self.running:
                        loop.call_soon_threadsafe(on_detect, code, detected_at)
        finally:
            capture.release()
            logger.debug("[camera] Device released")
