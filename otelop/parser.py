"""Parsers that work out the service ports a collector's receivers need."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

_log = logging.getLogger(__name__)

# DNS_LABEL constraints for port names.
_DNS_LABEL = re.compile(r"(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_MAX_PORT_NAME_LENGTH = 63

PARSER_NAME_GENERIC = "__generic"
PARSER_NAME_JAEGER = "__jaeger"
PARSER_NAME_OTLP = "__otlp"
PARSER_NAME_CARBON = "__carbon"
PARSER_NAME_COLLECTD = "__collectd"
PARSER_NAME_FLUENT_FORWARD = "__fluentforward"
PARSER_NAME_OPENCENSUS = "__opencensus"
PARSER_NAME_SAPM = "__sapm"
PARSER_NAME_SIGNALFX = "__signalfx"
PARSER_NAME_WAVEFRONT = "__wavefront"
PARSER_NAME_ZIPKIN_SCRIBE = "__zipkinscribe"
PARSER_NAME_ZIPKIN = "__zipkin"


class Protocol(str, Enum):
    """Transport protocol of a service port."""

    TCP = "TCP"
    UDP = "UDP"


@dataclass(frozen=True)
class ServicePort:
    """A port to be exposed by the collector's service."""

    name: str
    port: int
    protocol: Protocol | None = None
    target_port: int | None = None


class ReceiverParser(ABC):
    """Works out the service ports for one receiver's configuration."""

    @abstractmethod
    def ports(self) -> list[ServicePort]:
        """Return the service ports based on the receiver's configuration."""

    @abstractmethod
    def parser_name(self) -> str:
        """Return the name of this parser."""


Builder = Callable[[str, Mapping[Any, Any]], ReceiverParser]

_registry: dict[str, Builder] = {}


def register(name: str, builder: Builder) -> None:
    """Add a parser builder for the given receiver type."""
    _registry[name] = builder


def is_registered(name: str) -> bool:
    """Tell whether a parser is registered under the given name."""
    return name in _registry


def builder_for(name: str) -> Builder:
    """Return the builder for a receiver name, falling back to the generic one."""
    return _registry.get(receiver_type(name)) or new_generic_receiver_parser


def parser_for(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for the given receiver name and configuration."""
    return builder_for(name)(name, config)


def receiver_type(name: str) -> str:
    """Strip the qualifier from a receiver name such as 'myreceiver/custom'."""
    return name.partition("/")[0]


def port_name(receiver_name: str, port: int) -> str:
    """Derive a DNS-label port name from a receiver name, or fall back to 'port-N'."""
    fallback = f"port-{port}"
    if len(receiver_name.encode("utf-8")) > _MAX_PORT_NAME_LENGTH:
        return fallback
    candidate = receiver_name.replace("/", "-").replace("_", "-")
    if not _DNS_LABEL.fullmatch(candidate):
        return fallback
    return candidate


def port_from_endpoint(endpoint: str) -> int:
    """Parse the port after the last ':' of an endpoint; raise ValueError if invalid."""
    part = endpoint[endpoint.rfind(":") + 1 :]
    if not _INTEGER.fullmatch(part):
        raise ValueError(f"invalid port {part!r} in endpoint {endpoint!r}")
    port = int(part)
    if not _INT32_MIN <= port <= _INT32_MAX:
        raise ValueError(f"port {part!r} in endpoint {endpoint!r} is out of range")
    return port


def single_port_from_config_endpoint(name: str, config: Mapping[Any, Any]) -> ServicePort | None:
    """Build a service port from the config's 'endpoint', or None if there is none usable."""
    if "endpoint" not in config:
        _log.debug("receiver %s doesn't have an endpoint", name)
        return None
    endpoint = config["endpoint"]
    if not isinstance(endpoint, str):
        _log.info("receiver %s's endpoint isn't a string", name)
        return None
    try:
        port = port_from_endpoint(endpoint)
    except ValueError:
        _log.info("couldn't parse the endpoint's port: %s", endpoint)
        return None
    return ServicePort(name=port_name(name, port), port=port)


class GenericReceiver(ReceiverParser):
    """Parser for receivers with a single endpoint and an optional default port."""

    def __init__(
        self,
        name: str,
        config: Mapping[Any, Any],
        default_port: int = 0,
        parser_name: str = PARSER_NAME_GENERIC,
    ) -> None:
        self.name = name
        self.config = config
        self.default_port = default_port
        self._parser_name = parser_name

    def ports(self) -> list[ServicePort]:
        port = single_port_from_config_endpoint(self.name, self.config)
        if port is not None:
            return [port]
        if self.default_port > 0:
            return [ServicePort(name=port_name(self.name, self.default_port), port=self.default_port)]
        return []

    def parser_name(self) -> str:
        return self._parser_name


def _protocols_of(config: Mapping[Any, Any]) -> Mapping[Any, Any]:
    protocols = config.get("protocols") if isinstance(config, Mapping) else None
    return protocols if isinstance(protocols, Mapping) else {}


_JAEGER_PROTOCOLS: tuple[tuple[str, int, Protocol], ...] = (
    ("grpc", 14250, Protocol.TCP),
    ("thrift_http", 14268, Protocol.TCP),
    ("thrift_compact", 6831, Protocol.UDP),
    ("thrift_binary", 6832, Protocol.UDP),
)


class JaegerReceiverParser(ReceiverParser):
    """Parser for Jaeger receivers, one port per configured protocol."""

    def __init__(self, name: str, config: Mapping[Any, Any]) -> None:
        self.name = name
        self.config = _protocols_of(config)

    def ports(self) -> list[ServicePort]:
        result = []
        for protocol, default_port, transport in _JAEGER_PROTOCOLS:
            if protocol not in self.config:
                continue
            name_with_protocol = f"{self.name}-{protocol}"
            settings = self.config[protocol]
            port = None
            if isinstance(settings, Mapping):
                port = single_port_from_config_endpoint(name_with_protocol, settings)
            if port is None:
                port = ServicePort(name=port_name(name_with_protocol, default_port), port=default_port)
            result.append(replace(port, protocol=transport))
        return result

    def parser_name(self) -> str:
        return PARSER_NAME_JAEGER


_OTLP_GRPC_PORT = 4317
_OTLP_HTTP_PORT = 4318
_OTLP_HTTP_LEGACY_PORT = 55681


class OTLPReceiverParser(ReceiverParser):
    """Parser for OTLP receivers, with gRPC and HTTP protocols."""

    def __init__(self, name: str, config: Mapping[Any, Any]) -> None:
        self.name = name
        self.config = _protocols_of(config)

    def _default_ports(self) -> dict[str, list[ServicePort]]:
        return {
            "grpc": [
                ServicePort(
                    name=port_name(f"{self.name}-grpc", _OTLP_GRPC_PORT),
                    port=_OTLP_GRPC_PORT,
                    target_port=_OTLP_GRPC_PORT,
                )
            ],
            "http": [
                ServicePort(
                    name=port_name(f"{self.name}-http", _OTLP_HTTP_PORT),
                    port=_OTLP_HTTP_PORT,
                    target_port=_OTLP_HTTP_PORT,
                ),
                # the legacy port targets the official one
                ServicePort(
                    name=port_name(f"{self.name}-http-legacy", _OTLP_HTTP_LEGACY_PORT),
                    port=_OTLP_HTTP_LEGACY_PORT,
                    target_port=_OTLP_HTTP_PORT,
                ),
            ],
        }

    def ports(self) -> list[ServicePort]:
        result: list[ServicePort] = []
        for protocol, defaults in self._default_ports().items():
            if protocol not in self.config:
                continue
            settings = self.config[protocol]
            port = None
            if isinstance(settings, Mapping):
                port = single_port_from_config_endpoint(f"{self.name}-{protocol}", settings)
            if port is None:
                result.extend(defaults)
            else:
                result.append(port)
        return result

    def parser_name(self) -> str:
        return PARSER_NAME_OTLP


def new_generic_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for receivers no specific parser knows about."""
    return GenericReceiver(name, config)


def new_jaeger_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Jaeger receivers."""
    return JaegerReceiverParser(name, config)


def new_otlp_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for OTLP receivers."""
    return OTLPReceiverParser(name, config)


def new_carbon_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Carbon receivers."""
    return GenericReceiver(name, config, 2003, PARSER_NAME_CARBON)


def new_collectd_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Collectd receivers."""
    return GenericReceiver(name, config, 8081, PARSER_NAME_COLLECTD)


def new_fluent_forward_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for FluentForward receivers."""
    return GenericReceiver(name, config, 8006, PARSER_NAME_FLUENT_FORWARD)


def new_opencensus_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for OpenCensus receivers."""
    return GenericReceiver(name, config, 55678, PARSER_NAME_OPENCENSUS)


def new_sapm_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for SAPM receivers."""
    return GenericReceiver(name, config, 7276, PARSER_NAME_SAPM)


def new_signalfx_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for SignalFx receivers."""
    return GenericReceiver(name, config, 9943, PARSER_NAME_SIGNALFX)


def new_wavefront_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Wavefront receivers."""
    return GenericReceiver(name, config, 2003, PARSER_NAME_WAVEFRONT)


def new_zipkin_scribe_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for ZipkinScribe receivers."""
    return GenericReceiver(name, config, 9410, PARSER_NAME_ZIPKIN_SCRIBE)


def new_zipkin_receiver_parser(name: str, config: Mapping[Any, Any]) -> ReceiverParser:
    """Build a parser for Zipkin receivers."""
    return GenericReceiver(name, config, 9411, PARSER_NAME_ZIPKIN)


register("jaeger", new_jaeger_receiver_parser)
register("otlp", new_otlp_receiver_parser)
register("carbon", new_carbon_receiver_parser)
register("collectd", new_collectd_receiver_parser)
register("fluentforward", new_fluent_forward_receiver_parser)
register("opencensus", new_opencensus_receiver_parser)
register("sapm", new_sapm_receiver_parser)
register("signalfx", new_signalfx_receiver_parser)
register("wavefront", new_wavefront_receiver_parser)
register("zipkin-scribe", new_zipkin_scribe_receiver_parser)
register("zipkin", new_zipkin_receiver_parser)