"""Pool of OCR engines shared across threads, one per language configuration."""

import logging
import threading
from typing import Callable, Dict, Optional

from ingredient_ocr.ocr.config import OcrConfig
from ingredient_ocr.ocr.engine import OcrEngine, TesseractEngine
from ingredient_ocr.ocr.errors import InitializationError

logger = logging.getLogger(__name__)

EngineFactory = Callable[[str], OcrEngine]


class OcrInstanceManager:
    """Create OCR engines lazily and hand out the same engine for the same languages.

    Engine start-up is slow, so each language key is initialised once and the
    engine is kept until it is evicted. The pool lock is only held for
    dictionary access; initialisation runs under a lock of its own per key, so
    one slow language never blocks another.

    Args:
        engine_factory: Builds an engine from a language string. Defaults to
            :class:`TesseractEngine`.

    Examples:
        >>> manager = OcrInstanceManager(engine_factory=lambda langs: object())
        >>> manager.get_instance(OcrConfig()) is manager.get_instance(OcrConfig())
        True
    """

    def __init__(self, engine_factory: Optional[EngineFactory] = None):
        self._engine_factory = engine_factory or TesseractEngine
        self._instances: Dict[str, OcrEngine] = {}
        self._init_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_instance(self, config: OcrConfig) -> OcrEngine:
        """Return the pooled engine for ``config.languages``, creating it on first use.

        Raises:
            InitializationError: If the engine cannot be created. Nothing is
                stored, so a later call tries again.
        """
        key = config.languages

        with self._lock:
            instance = self._instances.get(key)
            if instance is not None:
                return instance
            init_lock = self._init_locks.setdefault(key, threading.Lock())

        with init_lock:
            # Another thread may have finished initialising while we waited
            with self._lock:
                instance = self._instances.get(key)
            if instance is not None:
                return instance

            logger.info("Creating new OCR instance for languages: %s", key)
            try:
                instance = self._engine_factory(key)
            except InitializationError:
                raise
            except Exception as e:
                raise InitializationError(
                    f"Failed to initialize OCR engine: {e}", languages=key
                ) from e

            with self._lock:
                self._instances[key] = instance
            return instance

    def remove_instance(self, languages: str) -> None:
        with self._lock:
            removed = self._instances.pop(languages, None)
        if removed is not None:
            logger.info("Removed OCR instance for languages: %s", languages)

    def clear_all_instances(self) -> None:
        with self._lock:
            count = len(self._instances)
            self._instances.clear()
        if count > 0:
            logger.info("Cleared %d OCR instances", count)

    def instance_count(self) -> int:
        with self._lock:
            return len(self._instances)

    def __contains__(self, languages: str) -> bool:
        with self._lock:
            return languages in self._instances
