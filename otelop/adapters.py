"""Conversion of a collector's configuration into the service ports it needs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import yaml

from otelop.parser import ServicePort, parser_for

_log = logging.getLogger(__name__)


class InvalidYAMLError(ValueError):
    """The collector configuration is not a valid YAML mapping."""

    def __init__(self, message: str = "couldn't parse the opentelemetry-collector configuration") -> None:
        super().__init__(message)


class NoReceiversError(ValueError):
    """The configuration holds no receivers."""

    def __init__(self, message: str = "no receivers available as part of the configuration") -> None:
        super().__init__(message)


class ReceiversNotAMapError(ValueError):
    """The receivers property is not a mapping of receivers."""

    def __init__(
        self,
        message: str = "receivers property in the configuration doesn't contain valid receivers",
    ) -> None:
        super().__init__(message)


def config_from_string(config_str: str) -> dict[Any, Any]:
    """Parse a collector configuration; raise InvalidYAMLError if it isn't a YAML mapping."""
    try:
        loaded = yaml.safe_load(config_str)
    except yaml.YAMLError as exc:
        raise InvalidYAMLError() from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise InvalidYAMLError()
    return loaded


def config_to_receiver_ports(config: Mapping[Any, Any]) -> list[ServicePort]:
    """Collect the service ports required by every receiver in the configuration.

    A receiver whose parser fails is logged and skipped, so that the other
    receivers still contribute their ports.
    """
    if "receivers" not in config:
        raise NoReceiversError()
    receivers = config["receivers"]
    if not isinstance(receivers, Mapping):
        raise ReceiversNotAMapError()

    ports: list[ServicePort] = []
    for key, value in receivers.items():
        receiver_name = str(key)
        if isinstance(value, Mapping):
            receiver = value
        else:
            _log.info("receiver %s doesn't seem to be a map of properties", receiver_name)
            receiver = {}

        receiver_parser = parser_for(receiver_name, receiver)
        try:
            receiver_ports = receiver_parser.ports()
        except Exception:
            _log.exception("parser for '%s' has returned an error", receiver_name)
            continue
        ports.extend(receiver_ports or [])
    return ports