"""Detection of traits of the cluster the operator runs on."""

from __future__ import annotations

import json
import urllib.request
from enum import Enum

_OPENSHIFT_ROUTE_GROUP = "route.openshift.io"
_TIMEOUT_SECONDS = 10.0


class Platform(str, Enum):
    """The kind of platform the operator is running on."""

    UNKNOWN = "Unknown"
    KUBERNETES = "Kubernetes"
    OPENSHIFT = "OpenShift"


class AutoDetect:
    """Detects the platform by asking the cluster's API server for its API groups."""

    def __init__(self, host: str) -> None:
        self.host = host.rstrip("/")

    def _server_groups(self) -> list[str]:
        request = urllib.request.Request(
            f"{self.host}/apis", headers={"Accept": "application/json"}
        )
        with urllib.request.urlopen(request, timeout=_TIMEOUT_SECONDS) as response:
            document = json.load(response)
        groups = document.get("groups") if isinstance(document, dict) else None
        return [group.get("name", "") for group in groups or [] if isinstance(group, dict)]

    def platform(self) -> Platform:
        """Return OpenShift or Kubernetes; raise OSError or ValueError when the query fails."""
        if _OPENSHIFT_ROUTE_GROUP in self._server_groups():
            return Platform.OPENSHIFT
        return Platform.KUBERNETES