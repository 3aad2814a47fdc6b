# otelop

Building blocks for managing OpenTelemetry Collector instances. The package has
the following parts:

- The collector resource model, with its defaulting and validation rules.
- The labels and annotations placed on managed objects.
- Discovery of the service ports that a collector configuration needs.
- Platform detection against a cluster API server.
- A reconciler that runs a list of tasks.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `otelop.api`

- `OpenTelemetryCollector` is the resource. It has `name`, `namespace`, `labels`,
  `annotations`, `spec` and `status`.
- `OpenTelemetryCollectorSpec`, `OpenTelemetryCollectorStatus` and
  `OpenTelemetryCollectorList` are the spec, status and list types.
- `Mode` is the deployment mode: `DAEMON_SET`, `DEPLOYMENT`, `SIDECAR` or
  `STATEFUL_SET`.
- `default()` does two things:
  - It sets the mode to `Mode.DEPLOYMENT` when no mode is set.
  - It adds the label `app.kubernetes.io/managed-by: opentelemetry-operator`
    when that label is missing.
- `validate_create()` and `validate_update(old)` raise `ValidationError` in
  these cases:
  - `volume_claim_templates` is set and the mode is not stateful set.
  - `replicas` is set and the mode is sidecar or daemon set.
  - `tolerations` is set and the mode is sidecar.
- `validate_delete()` always returns `True`.

### `otelop.version`

- `get()` returns a `Version` with four fields: `operator`, `build_date`,
  `opentelemetry_collector` and `python`.
- `opentelemetry_collector()` returns the default collector version. It is
  `"0.0.0"` when none was set at build time.

### `otelop.collector`

- `labels(instance)` returns the common labels for objects that belong to a
  collector. These are managed-by, instance (`<namespace>.<name>`), part-of and
  component. They are merged over the instance's own labels.
- `annotations(instance)` returns three default Prometheus scrape annotations.
  The instance's own annotations override them. It also adds the SHA-256 of the
  collector configuration under `opentelemetry-operator-config/sha256`.

### `otelop.parser`

Receiver parsers turn a receiver's configuration into a list of `ServicePort`
entries. Each entry has `name`, `port`, an optional `protocol` and an optional
`target_port`.

- `parser_for(name, config)` picks the parser registered for the receiver type.
  The receiver type is the part of the name before any `/`.
- Parsers are registered for these receiver types: `jaeger`, `otlp`, `zipkin`,
  `zipkin-scribe`, `opencensus`, `carbon`, `collectd`, `fluentforward`, `sapm`,
  `signalfx` and `wavefront`.
- Any other receiver type gets the generic parser.
- `register(name, builder)` adds a parser, and `is_registered(name)` checks
  whether one exists.
- Helper functions:
  - `port_name()` builds a DNS-label port name. It falls back to `port-<N>`.
  - `port_from_endpoint()` reads the port from an endpoint and raises
    `ValueError` if the port is invalid.
  - `receiver_type()` returns the receiver type of a name.

### `otelop.adapters`

- `config_from_string()` parses a collector's YAML configuration into a dict.
  It raises `InvalidYAMLError` if the text is not a YAML mapping.
- `config_to_receiver_ports()` gathers the ports of all receivers.
  - It raises `NoReceiversError` when the configuration has no `receivers` key.
  - It raises `ReceiversNotAMapError` when `receivers` is not a mapping.
  - If one receiver's parser fails, the error is logged and that receiver is
    skipped.

### `otelop.autodetect`

- `AutoDetect(host).platform()` requests `<host>/apis` from a cluster API
  server.
  - It returns `Platform.OPENSHIFT` when the `route.openshift.io` group is
    present.
  - Otherwise it returns `Platform.KUBERNETES`.
  - Request errors are raised to the caller.

### `otelop.config`

- `Config` holds the runtime configuration:
  - `collector_image`, whose default is
    `otel/opentelemetry-collector:<collector version>`.
  - `collector_config_map_entry`, whose default is `collector.yaml`.
  - `platform` and `version`.
- `auto_detect()` asks the detector for the platform while the platform is
  still `Platform.UNKNOWN`. When the platform changes, it calls the `on_change`
  callbacks.
- `start_auto_detect()` runs one detection. It then keeps detecting in a
  background thread every `auto_detect_frequency` seconds.
- `stop()` ends the background thread. `Config` also works as a context manager
  that stops the thread on exit.

### `otelop.controller`

- `Reconciler(tasks, client, config)` fetches a collector with
  `client.get(namespace, name)` and runs each `Task` in order.
- A task that raises is logged.
  - If the task has `bail_on_error` set, the error stops the run and is raised
    again.
  - Otherwise the run continues with the next task.
- A collector for which the client raises `NotFoundError` is skipped.

## Example

```python
from otelop.adapters import config_from_string, config_to_receiver_ports

config = config_from_string("""
receivers:
  otlp:
    protocols:
      grpc:
  jaeger:
    protocols:
      thrift_compact:
""")

for port in config_to_receiver_ports(config):
    print(port.name, port.port, port.protocol)
```

## What this package does not do

- It has no command, no long-running manager process and no admission webhook
  server.
- It contains no Kubernetes client. The reconciler works with any object that
  has a `get(namespace, name)` method.
- It ships no reconciliation tasks. It does not create or update config maps,
  service accounts, services, deployments, daemon sets or stateful sets, and it
  does not inject sidecars into pods. You supply the tasks that the
  `Reconciler` runs.