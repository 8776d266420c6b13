"""Periodic execution of a reporter on a background thread."""

import logging
import threading
from types import TracebackType

from cloudwatchpy.core.reporter import CloudWatchReporter, ReportResult

logger = logging.getLogger(__name__)


class ScheduledReporter:
    """Runs ``reporter.report()`` every ``period`` seconds.

    Cycles run one after another on a single daemon thread, so they never
    overlap. A failing cycle is logged and the next one runs on schedule.

    Example:
        ```python
        with ScheduledReporter(reporter, period=60.0):
            serve_forever()
        ```
    """

    def __init__(self, reporter: CloudWatchReporter, period: float) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self.reporter = reporter
        self.period = period
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> ReportResult | None:
        """Run one cycle, logging instead of raising on failure."""
        try:
            return self.reporter.report()
        except Exception:
            logger.exception("CloudWatch reporting cycle failed")
            return None

    def _run(self) -> None:
        while not self._stop_event.wait(self.period):
            self.run_once()

    def start(self) -> None:
        """Start the background thread. Does nothing if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="cloudwatch-reporter", daemon=True
        )
        self._thread.start()
        logger.info(
            "Reporting to CloudWatch namespace %s every %ss",
            self.reporter.config.namespace,
            self.period,
        )

    def stop(self, report: bool = True) -> None:
        """Stop the background thread.

        Args:
            report: Run one last cycle after stopping, so recent values
                are not lost.
        """
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join()
        self._thread = None
        logger.info("Stopped reporting to CloudWatch")
        if report:
            self.run_once()

    def __enter__(self) -> "ScheduledReporter":
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.stop()


def enable(reporter: CloudWatchReporter, period: float) -> ScheduledReporter | None:
    """Start reporting periodically.

    Returns:
        The running ScheduledReporter, or None if it could not be started.
    """
    try:
        scheduled = ScheduledReporter(reporter, period)
        scheduled.start()
    except Exception:
        logger.exception("Error creating/starting CloudWatch reporter")
        return None
    return scheduled
