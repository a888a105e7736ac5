"""Fail-fast gate in front of the OCR engine."""

import logging
import threading
import time
from typing import Callable, Optional

from ingredient_ocr.ocr.config import RecoveryConfig

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Count consecutive OCR failures and reject work while too many have occurred.

    The breaker is open once ``circuit_breaker_threshold`` failures have been
    recorded and ``circuit_breaker_reset_secs`` have not yet passed since the
    last one. There is no half-open state: the first :meth:`is_open` call after
    the window has elapsed clears the counters and lets the next call through.

    Callers check :meth:`is_open` before an attempt and then call exactly one
    of :meth:`record_success` or :meth:`record_failure`.

    Args:
        config: Threshold and reset window.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        config: Optional[RecoveryConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config if config is not None else RecoveryConfig()
        self._clock = clock
        self._lock = threading.Lock()
        self._failure_count = 0
        self._last_failure_time: Optional[float] = None

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    @property
    def last_failure_time(self) -> Optional[float]:
        with self._lock:
            return self._last_failure_time

    def is_open(self) -> bool:
        with self._lock:
            if self._failure_count < self.config.circuit_breaker_threshold:
                return False

            if self._last_failure_time is not None:
                elapsed = self._clock() - self._last_failure_time
                if elapsed < self.config.circuit_breaker_reset_secs:
                    return True

            logger.info(
                "Circuit breaker reset after %d failures", self._failure_count
            )
            self._failure_count = 0
            self._last_failure_time = None
            return False

    def record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = self._clock()
            count = self._failure_count

        if count == self.config.circuit_breaker_threshold:
            logger.warning(
                "Circuit breaker opened after %d consecutive failures; "
                "rejecting OCR requests for %ds",
                count,
                self.config.circuit_breaker_reset_secs,
            )
        else:
            logger.debug("Circuit breaker recorded failure %d", count)

    def record_success(self) -> None:
        with self._lock:
            self._failure_count = 0
            self._last_failure_time = None
