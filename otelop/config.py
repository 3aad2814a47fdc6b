"""The operator's runtime configuration."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from typing import Protocol

from otelop.autodetect import Platform
from otelop.version import Version, get as get_version

DEFAULT_AUTO_DETECT_FREQUENCY = 5.0
DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY = "collector.yaml"

_log = logging.getLogger("config")


class _PlatformDetector(Protocol):
    def platform(self) -> Platform: ...


class Config:
    """Configuration of the operator, refreshed by periodic auto-detection."""

    def __init__(
        self,
        *,
        detector: _PlatformDetector | None = None,
        auto_detect_frequency: float = DEFAULT_AUTO_DETECT_FREQUENCY,
        collector_image: str | None = None,
        collector_config_map_entry: str = DEFAULT_COLLECTOR_CONFIG_MAP_ENTRY,
        on_change: Iterable[Callable[[], None]] = (),
        platform: Platform = Platform.UNKNOWN,
        version: Version | None = None,
    ) -> None:
        self.detector = detector
        self.auto_detect_frequency = auto_detect_frequency
        self.version = version if version is not None else get_version()
        self.collector_image = (
            collector_image
            or f"otel/opentelemetry-collector:{self.version.opentelemetry_collector}"
        )
        self._collector_config_map_entry = collector_config_map_entry
        self.on_change = list(on_change)
        self.platform = platform

        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def collector_config_map_entry(self) -> str:
        """File name of the collector configuration inside its config map."""
        return self._collector_config_map_entry

    def start_auto_detect(self) -> None:
        """Detect once, then keep detecting in the background.

        The background routine is started even when the first run fails; the
        failure of the first run is then raised.
        """
        error: Exception | None = None
        try:
            self.auto_detect()
        except Exception as exc:
            error = exc

        if self._thread is None:
            self._stopped.clear()
            self._thread = threading.Thread(
                target=self._periodic_auto_detect, name="auto-detect", daemon=True
            )
            self._thread.start()

        if error is not None:
            raise error

    def stop(self) -> None:
        """Stop the background auto-detection, if it runs."""
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> Config:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _periodic_auto_detect(self) -> None:
        while not self._stopped.wait(self.auto_detect_frequency):
            try:
                self.auto_detect()
            except Exception as exc:
                _log.info("auto-detection failed: %s", exc)

    def auto_detect(self) -> None:
        """Detect the platform; call the change callbacks if it changed."""
        _log.debug("auto-detecting the configuration based on the environment")
        changed = False
        with self._lock:
            if self.platform is Platform.UNKNOWN:
                if self.detector is None:
                    raise RuntimeError("no auto-detection routine is configured")
                detected = self.detector.platform()
                if detected is not self.platform:
                    _log.debug("platform detected: %s", detected.value)
                    self.platform = detected
                    changed = True

        if changed:
            for callback in self.on_change:
                try:
                    callback()
                except Exception:
                    # the detection itself worked, so a failing callback is not fatal
                    _log.exception("configuration change notification failed for callback")