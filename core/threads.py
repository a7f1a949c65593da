# core/threads.py
import logging
from collections import Counter
from typing import Dict, Iterable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from app.errors import GenerationError

log = logging.getLogger(__name__)


class GenerationWorkerSignals(QObject):
    completed = Signal(int, str)  # request id, text
    failed = Signal(int, str)     # request id, reason


class GenerationWorker(QRunnable):
    """Calls the text source off the event-loop thread; reports back via signals."""

    def __init__(self, request_id: int, source, context: str, error_chars, error_words, timeout: Optional[float]):
        super().__init__()
        self.request_id = request_id
        self.source = source
        self.context = context
        self.error_chars = list(error_chars)
        self.error_words = list(error_words)
        self.timeout = timeout
        self.signals = GenerationWorkerSignals()

    def run(self):
        try:
            text = self.source.get_continuation(
                self.context, self.error_chars, self.error_words, timeout=self.timeout
            )
        except (GenerationError, NotImplementedError) as e:
            self.signals.failed.emit(self.request_id, str(e) or type(e).__name__)
            return
        except Exception as e:
            log.exception("unexpected error in generation worker")
            self.signals.failed.emit(self.request_id, f"{type(e).__name__}: {e}")
            return
        self.signals.completed.emit(self.request_id, text)


class Workers:
    pool = QThreadPool.globalInstance()


class TextGenerationAdapter(QObject):
    """
    Runs one continuation request at a time in the global pool.

    Results are re-emitted on the adapter's own thread (the event loop the
    session lives on). Results of a cancelled or superseded request are
    dropped.
    """

    continuationReady = Signal(str)
    continuationFailed = Signal(str)

    def __init__(self, source, timeout: Optional[float] = None, pool: Optional[QThreadPool] = None, parent=None):
        super().__init__(parent)
        self.source = source
        self.timeout = timeout
        self.pool = pool or Workers.pool
        self._current_id = 0
        self._in_flight: Optional[int] = None
        # keeps each worker (and its signals object) alive until it reports back
        self._workers: Dict[int, GenerationWorker] = {}

    @property
    def busy(self) -> bool:
        return self._in_flight is not None

    def request_continuation(self, context: str, error_chars: Counter, error_words: Iterable[str]) -> int:
        self._current_id += 1
        request_id = self._current_id
        # most frequent mistakes first, so a prompt cut short keeps the useful part
        chars = [ch for ch, _ in sorted(Counter(error_chars).items(), key=lambda x: (-x[1], x[0]))]
        worker = GenerationWorker(request_id, self.source, context, chars, error_words, self.timeout)
        worker.signals.completed.connect(self._on_completed)
        worker.signals.failed.connect(self._on_failed)
        self._in_flight = request_id
        self._workers[request_id] = worker
        log.debug("starting continuation request %d", request_id)
        self.pool.start(worker)
        return request_id

    def cancel(self):
        if self._in_flight is not None:
            log.debug("cancelling continuation request %d", self._in_flight)
        self._in_flight = None

    def _on_completed(self, request_id: int, text: str):
        self._workers.pop(request_id, None)
        if request_id != self._in_flight:
            return
        self._in_flight = None
        self.continuationReady.emit(text)

    def _on_failed(self, request_id: int, reason: str):
        self._workers.pop(request_id, None)
        if request_id != self._in_flight:
            return
        self._in_flight = None
        self.continuationFailed.emit(reason)
