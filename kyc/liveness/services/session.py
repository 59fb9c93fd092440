"""
Session de capture : canal de résultat asynchrone entre le SDK de capture et le backend.

Le SDK livre ses événements par callbacks (début, indice de détection, photo,
bundle, erreur). La session les traduit en un Future unique avec trois états
terminaux : succès (LivenessOutcome), erreur (exception), annulation.
Les indices de détection passent par une file (`hints`).
"""
import logging
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Optional

from .config import CaptureConfig
from .errors import CaptureError, LicenseError
from .liveness_service import LivenessService, RequestIdentity

logger = logging.getLogger("livecheck.liveness.session")

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor(max_workers: int = 4) -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="liveness")
        return _executor


class SessionState(str, Enum):
    IDLE = "idle"
    FACE_DETECTION = "face_detection"
    PHOTO_PROCESSING = "photo_processing"
    VERIFYING = "verifying"
    DONE = "done"


class CaptureSession:
    """
    Le Future `result` appartient à la session et non à l'executor : il existe avant
    l'arrivée du bundle (erreur SDK, licence ou annulation peuvent le terminer sans
    requête). `_verify` le passe lui-même en RUNNING, comme le ferait un executor.
    """
    def __init__(self, identity: RequestIdentity, config: CaptureConfig,
                 service: Optional[LivenessService] = None,
                 executor: Optional[ThreadPoolExecutor] = None) -> None:
        self.identity = identity
        self.config = config
        self.service = service or LivenessService.from_config(config)
        self.executor = executor or get_executor()
        self.result: Future = Future()
        self.hints: "queue.Queue[str]" = queue.Queue()
        self.state = SessionState.IDLE
        self._image: Optional[bytes] = None
        self._lock = threading.Lock()

    @property
    def done(self) -> bool:
        return self.result.done()

    # --- callbacks SDK -------------------------------------------------------

    def start(self) -> None:
        if self.done:
            return
        if self.config.license_error:
            self._finish(exc=LicenseError(self.config.license_error))
            return
        self.state = SessionState.FACE_DETECTION

    def on_face_hint(self, hint: str) -> None:
        if not self.done:
            self.hints.put(hint)

    def on_photo(self, jpeg: bytes) -> None:
        if self.done:
            return
        self._image = jpeg
        self.state = SessionState.PHOTO_PROCESSING

    def on_bundle(self, bundle: bytes) -> Future:
        """Soumet la vérification en arrière-plan ; un seul envoi par session."""
        if self.config.license_error:
            self._finish(exc=LicenseError(self.config.license_error))
            return self.result
        with self._lock:
            if self.done or self.state == SessionState.VERIFYING:
                return self.result
            self.state = SessionState.VERIFYING
        self.executor.submit(self._verify, bundle)
        return self.result

    def on_error(self, message: Optional[str]) -> None:
        self._finish(exc=CaptureError(message or "An unknown error occurred"))

    def cancel(self) -> bool:
        with self._lock:
            cancelled = self.result.cancel()
            if cancelled:
                self.state = SessionState.DONE
        return cancelled

    # --- interne -------------------------------------------------------------

    def _verify(self, bundle: bytes) -> None:
        with self._lock:
            if self.result.cancelled():
                self.result.set_running_or_notify_cancel()
                return
            if self.result.done():
                return
            self.result.set_running_or_notify_cancel()

        try:
            outcome = self.service.verify(bundle=bundle, image=self._image, identity=self.identity)
        except Exception as e:
            logger.info("Liveness verification %s failed: %s", self.identity.verification_id, e)
            self._finish(exc=e)
        else:
            logger.info("Liveness verification %s: %s (p=%.3f)",
                        self.identity.verification_id, outcome.status, outcome.probability)
            self._finish(outcome=outcome)

    def _finish(self, outcome=None, exc: Optional[BaseException] = None) -> None:
        with self._lock:
            if self.result.done():
                return
            if exc is not None:
                self.result.set_exception(exc)
            else:
                self.result.set_result(outcome)
            self.state = SessionState.DONE
