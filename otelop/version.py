"""Versions of the operator and of the components it manages."""

from __future__ import annotations

import platform
from dataclasses import dataclass

# Set at build time; left empty in development.
OPERATOR_VERSION = ""
BUILD_DATE = ""
OTELCOL_VERSION = ""

_FALLBACK_OTELCOL_VERSION = "0.0.0"


@dataclass(frozen=True)
class Version:
    """The operator's version and the versions of some components it uses."""

    operator: str = ""
    build_date: str = ""
    opentelemetry_collector: str = ""
    python: str = ""

    def __str__(self) -> str:
        return (
            f"Version(Operator='{self.operator}', BuildDate='{self.build_date}', "
            f"OpenTelemetryCollector='{self.opentelemetry_collector}', Python='{self.python}')"
        )


def opentelemetry_collector() -> str:
    """Default collector version, falling back to 0.0.0 when none was set at build."""
    return OTELCOL_VERSION or _FALLBACK_OTELCOL_VERSION


def get() -> Version:
    """Return the current version information."""
    return Version(
        operator=OPERATOR_VERSION,
        build_date=BUILD_DATE,
        opentelemetry_collector=opentelemetry_collector(),
        python=platform.python_version(),
    )