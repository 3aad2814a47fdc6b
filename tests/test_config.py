import threading

import pytest

from otelop.autodetect import Platform
from otelop.config import Config
from otelop.version import Version


class _MockDetector:
    def __init__(self, result=Platform.UNKNOWN, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def platform(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def test_new_config():
    cfg = Config(
        collector_image="some-image",
        collector_config_map_entry="some-config.yaml",
        platform=Platform.KUBERNETES,
    )

    assert cfg.collector_image == "some-image"
    assert cfg.collector_config_map_entry == "some-config.yaml"
    assert cfg.platform is Platform.KUBERNETES


def test_defaults():
    cfg = Config(version=Version(opentelemetry_collector="1.2.3"))

    assert cfg.collector_image == "otel/opentelemetry-collector:1.2.3"
    assert cfg.collector_config_map_entry == "collector.yaml"
    assert cfg.platform is Platform.UNKNOWN
    assert cfg.auto_detect_frequency == 5.0


def test_override_version():
    cfg = Config(version=Version(opentelemetry_collector="the-version"))

    assert "the-version" in cfg.collector_image


def test_callback_on_changes():
    called = []
    cfg = Config(
        detector=_MockDetector(Platform.OPENSHIFT),
        on_change=[lambda: called.append(True)],
    )
    assert cfg.platform is Platform.UNKNOWN

    cfg.auto_detect()

    assert cfg.platform is Platform.OPENSHIFT
    assert called == [True]


def test_no_callback_without_change():
    called = []
    detector = _MockDetector(Platform.UNKNOWN)
    cfg = Config(detector=detector, on_change=[lambda: called.append(True)])

    cfg.auto_detect()

    assert called == []
    assert detector.calls == 1


def test_known_platform_is_not_detected_again():
    detector = _MockDetector(Platform.OPENSHIFT)
    cfg = Config(detector=detector, platform=Platform.KUBERNETES)

    cfg.auto_detect()

    assert detector.calls == 0
    assert cfg.platform is Platform.KUBERNETES


def test_failing_callback_does_not_fail_detection():
    called = []

    def failing():
        raise RuntimeError("callback failed")

    cfg = Config(
        detector=_MockDetector(Platform.KUBERNETES),
        on_change=[failing, lambda: called.append(True)],
    )

    cfg.auto_detect()

    assert cfg.platform is Platform.KUBERNETES
    assert called == [True]


def test_detection_error_is_raised():
    cfg = Config(detector=_MockDetector(error=OSError("unreachable")))

    with pytest.raises(OSError, match="unreachable"):
        cfg.auto_detect()
    assert cfg.platform is Platform.UNKNOWN


def test_auto_detect_in_background():
    reached = threading.Event()

    class CountingDetector:
        def __init__(self):
            self.calls = 0

        def platform(self):
            self.calls += 1
            if self.calls >= 2:
                reached.set()
            # unknown keeps the detection going
            return Platform.UNKNOWN

    detector = CountingDetector()
    with Config(detector=detector, auto_detect_frequency=0.05) as cfg:
        assert cfg.platform is Platform.UNKNOWN
        cfg.start_auto_detect()
        assert reached.wait(timeout=5)
    assert detector.calls >= 2


def test_start_auto_detect_raises_first_error_but_keeps_running():
    detector = _MockDetector(error=OSError("first failure"))
    cfg = Config(detector=detector, auto_detect_frequency=0.05)
    try:
        with pytest.raises(OSError, match="first failure"):
            cfg.start_auto_detect()
        detector.error = None
        detector.result = Platform.OPENSHIFT
        for _ in range(100):
            if cfg.platform is Platform.OPENSHIFT:
                break
            threading.Event().wait(0.05)
        assert cfg.platform is Platform.OPENSHIFT
    finally:
        cfg.stop()