"""Reconciliation of OpenTelemetryCollector resources through a list of tasks."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from otelop.api import OpenTelemetryCollector
from otelop.config import Config

_log = logging.getLogger("controllers.OpenTelemetryCollector")


class NotFoundError(LookupError):
    """The requested resource does not exist."""


class _CollectorGetter(Protocol):
    def get(self, namespace: str, name: str) -> OpenTelemetryCollector: ...


@dataclass
class TaskParams:
    """What every reconciliation task is given."""

    config: Config | None = None
    client: Any = None
    instance: OpenTelemetryCollector | None = None


@dataclass
class Task:
    """One reconciliation step."""

    name: str
    do: Callable[[TaskParams], None]
    bail_on_error: bool = False


class Reconciler:
    """Brings the managed objects of a collector to their desired state."""

    def __init__(
        self,
        tasks: Iterable[Task],
        client: _CollectorGetter | None = None,
        config: Config | None = None,
    ) -> None:
        self.tasks = list(tasks)
        self.client = client
        self.config = config

    def reconcile(self, namespace: str, name: str) -> None:
        """Reconcile the named collector; a collector that no longer exists is skipped."""
        if self.client is None:
            raise RuntimeError("the reconciler has no client")
        try:
            instance = self.client.get(namespace, name)
        except NotFoundError:
            # cannot be fixed by an immediate retry; a new notification will come
            return
        except Exception:
            _log.exception("unable to fetch OpenTelemetryCollector %s/%s", namespace, name)
            raise

        params = TaskParams(config=self.config, client=self.client, instance=instance)
        self.run_tasks(params)

    def run_tasks(self, params: TaskParams) -> None:
        """Run every task in order, stopping at a failing task that bails on error."""
        for task in self.tasks:
            try:
                task.do(params)
            except Exception:
                _log.exception("failed to reconcile %s", task.name)
                if task.bail_on_error:
                    raise