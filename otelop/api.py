"""Schema of the OpenTelemetryCollector custom resource and its admission rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

GROUP = "opentelemetry.io"
VERSION = "v1alpha1"
GROUP_VERSION = f"{GROUP}/{VERSION}"

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"
MANAGED_BY_VALUE = "opentelemetry-operator"

_log = logging.getLogger("opentelemetrycollector-resource")


class Mode(str, Enum):
    """How the collector is deployed."""

    DAEMON_SET = "daemonset"
    DEPLOYMENT = "deployment"
    SIDECAR = "sidecar"
    STATEFUL_SET = "statefulset"


class ValidationError(ValueError):
    """Raised when a collector's spec holds attributes its mode does not support."""


@dataclass
class OpenTelemetryCollectorSpec:
    """Desired state of an OpenTelemetryCollector."""

    config: str = ""
    args: dict[str, str] | None = None
    replicas: int | None = None
    image: str = ""
    mode: Mode | None = None
    service_account: str = ""
    security_context: dict[str, Any] | None = None
    volume_claim_templates: list[Any] = field(default_factory=list)
    volume_mounts: list[Any] = field(default_factory=list)
    volumes: list[Any] = field(default_factory=list)
    ports: list[Any] = field(default_factory=list)
    env: list[Any] | None = None
    resources: dict[str, Any] = field(default_factory=dict)
    tolerations: list[Any] = field(default_factory=list)


@dataclass
class OpenTelemetryCollectorStatus:
    """Observed state of an OpenTelemetryCollector."""

    replicas: int = 0
    version: str = ""
    messages: list[str] = field(default_factory=list)


def _mode_text(mode: Mode | None) -> str:
    return mode.value if mode is not None else ""


@dataclass
class OpenTelemetryCollector:
    """An OpenTelemetryCollector resource."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    spec: OpenTelemetryCollectorSpec = field(default_factory=OpenTelemetryCollectorSpec)
    status: OpenTelemetryCollectorStatus = field(default_factory=OpenTelemetryCollectorStatus)

    def default(self) -> None:
        """Fill in the mode and the managed-by label when they are missing."""
        if not self.spec.mode:
            self.spec.mode = Mode.DEPLOYMENT
        if self.labels is None:
            self.labels = {}
        if not self.labels.get(MANAGED_BY_LABEL):
            self.labels[MANAGED_BY_LABEL] = MANAGED_BY_VALUE
        _log.info("default name=%s", self.name)

    def validate_create(self) -> None:
        """Check the resource on creation; raise ValidationError if invalid."""
        _log.info("validate create name=%s", self.name)
        self._validate_spec()

    def validate_update(self, old: OpenTelemetryCollector | None) -> None:
        """Check the resource on update; raise ValidationError if invalid."""
        _log.info("validate update name=%s", self.name)
        self._validate_spec()

    def validate_delete(self) -> bool:
        """Check the resource on deletion; deletion is always allowed, so True."""
        _log.info("validate delete name=%s", self.name)
        return True

    def _validate_spec(self) -> None:
        spec = self.spec
        mode = _mode_text(spec.mode)
        if spec.mode is not Mode.STATEFUL_SET and spec.volume_claim_templates:
            raise ValidationError(
                f"the OpenTelemetry Collector mode is set to {mode}, "
                "which does not support the attribute 'volumeClaimTemplates'"
            )
        if spec.mode in (Mode.SIDECAR, Mode.DAEMON_SET) and spec.replicas is not None:
            raise ValidationError(
                f"the OpenTelemetry Collector mode is set to {mode}, "
                "which does not support the attribute 'replicas'"
            )
        if spec.mode is Mode.SIDECAR and spec.tolerations:
            raise ValidationError(
                f"the OpenTelemetry Collector mode is set to {mode}, "
                "which does not support the attribute 'tolerations'"
            )


@dataclass
class OpenTelemetryCollectorList:
    """A list of OpenTelemetryCollector resources."""

    items: list[OpenTelemetryCollector] = field(default_factory=list)