"""Labels and annotations shared by the objects of a managed collector."""

from __future__ import annotations

import hashlib

from otelop.api import OpenTelemetryCollector


def labels(instance: OpenTelemetryCollector) -> dict[str, str]:
    """Return the common labels of every object belonging to the collector."""
    base = dict(instance.labels or {})
    base["app.kubernetes.io/managed-by"] = "opentelemetry-operator"
    base["app.kubernetes.io/instance"] = f"{instance.namespace}.{instance.name}"
    base["app.kubernetes.io/part-of"] = "opentelemetry"
    base["app.kubernetes.io/component"] = "opentelemetry-collector"
    return base


def annotations(instance: OpenTelemetryCollector) -> dict[str, str]:
    """Return the annotations for the collector's pods."""
    result = {
        "prometheus.io/scrape": "true",
        "prometheus.io/port": "8888",
        "prometheus.io/path": "/metrics",
    }
    result.update(instance.annotations or {})
    result["opentelemetry-operator-config/sha256"] = _config_sha(instance.spec.config)
    return result


def _config_sha(config: str) -> str:
    return hashlib.sha256(config.encode("utf-8")).hexdigest()