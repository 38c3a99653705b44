# =======================================================================================
# campus_access/scanner/decoder.py - Decoder Capability
# =======================================================================================
from typing import Callable, Protocol
from ..utils.exceptions import CampusAccessError

# (raw_code, detected_at_ms)
DetectionCallback = Callable[[str, float], None]
ErrorCallback = Callable[[CampusAccessError], None]


class Decoder(Protocol):
    """
    What the scan coordinator needs from a live barcode decoder.

    ``start`` raises DecoderUnavailable when the camera or library cannot be
    initialized. Callbacks must be delivered on the event loop thread.
    """

    async def start(self, on_detect: DetectionCallback, on_error: ErrorCallback) -> None:
        ...

    def stop(self) -> None:
        ...
