# =======================================================================================
# campus_access/scanner/coordinator.py - Scan Coordinator
# =======================================================================================
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional
from ..config import config
from ..models.enums import EVENT_KINDS, ScanPhase, ScanResult
from ..models.schemas import UserOut
from ..client.gateway import ApiGateway
from ..utils.exceptions import CampusAccessError, NotFoundError, ValidationError
from .decoder import Decoder
from .state import ScanState, accept_detection, arm, begin_submission, disarm, finish

logger = logging.getLogger("campus_access.scanner")


@dataclass(frozen=True)
class ScanOutcome:
    result: ScanResult
    code: str
    message: str
    event_kind: Optional[str] = None
    user: Optional[UserOut] = None
    error: Optional[CampusAccessError] = None

    @property
    def ok(self) -> bool:
        return self.result is ScanResult.RECORDED


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ScanCoordinator:
    """
    Owns one scan session: arm the decoder, debounce detections, resolve the
    code to a user, record the access event and report the outcome.

    Scanning is single-shot: an accepted detection disarms the decoder and
    ``start()`` must be called again for the next badge.
    """

    def __init__(
        self,
        gateway: ApiGateway,
        decoder: Decoder,
        *,
        on_outcome: Optional[Callable[[ScanOutcome], None]] = None,
        on_progress: Optional[Callable[[str], None]] = None,
        on_failure: Optional[Callable[[CampusAccessError], None]] = None,
        debounce_ms: float = config.SCAN_DEBOUNCE_MS,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.gateway = gateway
        self.decoder = decoder
        self.on_outcome = on_outcome
        self.on_progress = on_progress
        self.on_failure = on_failure
        self.debounce_ms = debounce_ms
        self.clock = clock
        self.event_kind: Optional[str] = None
        self.state = ScanState()
        self._pending: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # UI-facing controls
    # ------------------------------------------------------------------
    def select_kind(self, kind: Optional[str]) -> None:
        if kind is not None and kind not in EVENT_KINDS:
            raise ValueError(f"Event kind must be one of {EVENT_KINDS}, got {kind!r}")
        self.event_kind = kind

    async def start(self) -> None:
        """Arm the decoder. Raises DecoderUnavailable when the camera cannot start."""
        if self.state.armed:
            return
        if self.state.in_flight:
            logger.debug("Start ignored while %s", self.state.phase.value)
            return

        await self.decoder.start(self.on_detection, self._on_decoder_error)
        self.state = arm(self.state)
        self._progress("Scanner active. Looking for a code...")

    def stop(self) -> None:
        """Disarm the decoder. An in-flight submission still completes."""
        was_armed = self.state.armed
        self.decoder.stop()
        self.state = disarm(self.state)
        if was_armed:
            self._progress("Scanner stopped.")

    async def wait_idle(self) -> Optional[ScanOutcome]:
        """Wait for the pending resolution/submission, if any."""
        task = self._pending
        if task is None:
            return None
        return await task

    # ------------------------------------------------------------------
    # Decoder callbacks
    # ------------------------------------------------------------------
    def on_detection(self, raw_code: str, detected_at: Optional[float] = None) -> Optional[asyncio.Task]:
        """Called for every raw decode; returns the processing task when accepted."""
        code = (raw_code or "").strip()
        when = self.clock() if detected_at is None else detected_at

        self.state, accepted = accept_detection(self.state, code, when, self.debounce_ms)
        if not accepted:
            logger.debug("Ignored detection %r (phase=%s)", code, self.state.phase.value)
            return None

        self.decoder.stop()
        self._progress(f"Code detected: {code}")
        self._pending = asyncio.get_running_loop().create_task(self._resolve_and_submit(code))
        return self._pending

    def _on_decoder_error(self, error: CampusAccessError) -> None:
        logger.warning("Decoder failed: %s", error)
        self.state = disarm(self.state)
        self._progress(str(error))
        if self.on_failure:
            self.on_failure(error)

    # ------------------------------------------------------------------
    # Resolution and submission
    # ------------------------------------------------------------------
    async def _resolve_and_submit(self, code: str) -> ScanOutcome:
        try:
            outcome = await self._process(code)
        finally:
            self.state = finish(self.state)

        log = logger.info if outcome.ok else logger.warning
        log("Scan %s: %s", code, outcome.message)
        if self.on_outcome:
            self.on_outcome(outcome)
        return outcome

    async def _process(self, code: str) -> ScanOutcome:
        kind = self.event_kind
        if kind is None:
            return ScanOutcome(
                ScanResult.NO_KIND_SELECTED, code, "Select the event type (entry/exit).",
                error=ValidationError("Event type not selected", status=400),
            )

        self._progress("Processing...")
        try:
            user = await self.gateway.get_user_by_code(code)
        except NotFoundError as e:
            return ScanOutcome(
                ScanResult.UNKNOWN_CODE, code, f"Unknown code: no user with code {code}.",
                event_kind=kind, error=e,
            )
        except CampusAccessError as e:
            return ScanOutcome(
                ScanResult.LOOKUP_FAILED, code,
                f"Could not verify user: {str(e) or 'service unavailable'}.",
                event_kind=kind, error=e,
            )

        self.state = begin_submission(self.state)
        try:
            await self.gateway.record_access(code, kind)
        except CampusAccessError as e:
            return ScanOutcome(
                ScanResult.RECORD_FAILED, code, str(e), event_kind=kind, user=user, error=e,
            )

        return ScanOutcome(
            ScanResult.RECORDED, code,
            f"{kind.capitalize()} recorded for {user.nombre}.",
            event_kind=kind, user=user,
        )

    def _progress(self, message: str) -> None:
        if self.on_progress:
            self.on_progress(message)

    @property
    def phase(self) -> ScanPhase:
        return self.state.phase
