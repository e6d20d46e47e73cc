"""
Batch Processing Module
=======================

Runs the inference engine over several images. Every image gets its own,
fully independent resolve call (its own attempt log, its own sequential
fallback walk); only the read-only constraints, credentials and attempt plan
are shared. A bounded thread pool lets a few images be analyzed at the same
time.

Threading Model:
- Caller thread: UI or CLI
- Background thread: batch job (created by BatchProcessor.start())
- Pool threads: one resolve call each
- ``stop_event`` is passed to every resolve call as its cancel signal, so an
  abort abandons the attempt each pipeline has in flight and skips the rest

Workflow per image:
1. Load and validate the image file
2. Resolve metadata through the fallback engine
3. Record an ImageResult and report progress
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from . import config
from .credentials import CredentialSet
from .engine import InferenceEngine
from .errors import SEOEngineError
from .image_processing import ImageValidationError, load_image
from .models import GenerationConstraints, Resolution

STATUS_COMPLETED = "completed"
STATUS_ERROR = "error"


@dataclass
class ImageResult:
    """Outcome for one image in a batch."""
    path: Path
    status: str
    resolution: Optional[Resolution] = None
    error: Optional[str] = None

    @property
    def metadata(self):
        return self.resolution.metadata if self.resolution else None


def _noop_log(message: str) -> None:
    pass


def _noop_progress(percent: float, done: int, total: int) -> None:
    pass


class BatchProcessor:
    """
    Analyze a list of images with the fallback engine.

    Attributes:
        engine: InferenceEngine used for every image
        constraints: Output shape shared by all images
        credentials: Keys shared (read-only) by all images
        log: Callback receiving human readable status lines
        progress: Callback receiving (percentage, done, total)
        stop_event: Set by abort(); cancels remaining attempts
        results: ImageResult per input path, in input order

    Example:
        >>> processor = BatchProcessor(engine, constraints, creds)
        >>> results = processor.run([Path("a.jpg"), Path("b.png")])
    """

    def __init__(
        self,
        engine: InferenceEngine,
        constraints: GenerationConstraints,
        credentials: CredentialSet,
        attempt_plan: Optional[Iterable] = None,
        log_callback: Optional[Callable[[str], None]] = None,
        progress_callback: Optional[Callable[[float, int, int], None]] = None,
        max_workers: int = config.BATCH_MAX_WORKERS,
    ):
        self.engine = engine
        self.constraints = constraints
        self.credentials = credentials
        self.attempt_plan = attempt_plan
        self.log = log_callback or _noop_log
        self.progress = progress_callback or _noop_progress
        self.max_workers = max(1, max_workers)
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None
        self.results: List[ImageResult] = []
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._done = 0

    def start(self, paths: Iterable) -> None:
        """Run the batch in a daemon background thread."""
        paths = [Path(p) for p in paths]
        self.logger.info(f"Starting batch job: {len(paths)} image(s), {self.max_workers} worker(s)")
        self.stop_event.clear()
        self.thread = threading.Thread(target=self.run, args=(paths,), daemon=True)
        self.thread.start()

    def abort(self) -> None:
        """Request cancellation; in-flight attempts are abandoned, no new attempts start."""
        if self.stop_event.is_set():
            return
        self.logger.warning("Batch job abort requested")
        self.stop_event.set()
        self.log("Stopping job... please wait.")

    def join(self, timeout: Optional[float] = None) -> None:
        if self.thread is not None:
            self.thread.join(timeout=timeout)

    def run(self, paths: Iterable) -> List[ImageResult]:
        """
        Process every image and return the results in input order.

        Failures of individual images are recorded, never raised. An interrupt
        (KeyboardInterrupt) aborts the batch, drops queued images and is re-raised.
        """
        paths = [Path(p) for p in paths]
        total = len(paths)
        self._done = 0
        self.results = []
        self.log("Job started.")

        if total == 0:
            self.log("No images to process.")
            return self.results

        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="SEOWorker")
        try:
            futures = [pool.submit(self._process_single_image, path, total) for path in paths]
            self.results = [f.result() for f in futures]
        except BaseException:
            # KeyboardInterrupt included: stop running pipelines, drop queued images
            self.abort()
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        pool.shutdown()

        failed = sum(1 for r in self.results if r.status == STATUS_ERROR)
        self.logger.info(f"Batch job finished: {total - failed} completed, {failed} failed")
        self.log(f"Job finished. Completed: {total - failed}, Failed: {failed}")
        return self.results

    def _process_single_image(self, path: Path, total: int) -> ImageResult:
        if self.stop_event.is_set():
            result = ImageResult(path=path, status=STATUS_ERROR, error="Aborted")
            self._report(result, total)
            return result

        self.log(f"Processing: {path.name}...")
        try:
            image_bytes, mime_type = load_image(path)
            resolution = self.engine.resolve_detailed(
                image_bytes,
                mime_type,
                self.constraints,
                attempt_plan=self.attempt_plan,
                credentials=self.credentials,
                cancel_event=self.stop_event,
            )
            result = ImageResult(path=path, status=STATUS_COMPLETED, resolution=resolution)
            self.log(f"{path.name}: done via {resolution.provider} [{resolution.model}]")
        except (ImageValidationError, SEOEngineError) as e:
            self.logger.error(f"Failed to process {path}: {e}")
            result = ImageResult(path=path, status=STATUS_ERROR, error=str(e))
            self.log(f"{path.name}: {e}")

        self._report(result, total)
        return result

    def _report(self, result: ImageResult, total: int) -> None:
        with self._lock:
            self._done += 1
            done = self._done
        self.progress(done / total * 100.0, done, total)
