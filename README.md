# stdkit

Small building blocks for long-running services, written on the standard
library alone.

## What is in it

- **`stdkit.futures`**: the `Future` interface, with `SyncFuture`, which is
  complete when it is created, and `AsyncFuture`, which runs a closure on a
  background thread. A `get` call on an `AsyncFuture` can be given a
  cancellation signal, which is any object with `is_set()`, such as a
  `threading.Event`. If the signal fires first, `get` raises
  `AsyncFutureCanceled` and the closure's token is cancelled too.
- **`stdkit.ioutils`**: `new_bytes_read_closer(data)` returns a closeable
  in-memory stream. `read_all(reader, timer)` reads a stream to its end and
  then stops the timer.
- **`stdkit.sets`**: `GenericSet` holds `SetObject`s keyed by their
  `get_id()`. It has `insert`, `delete`, `has`, `has_all`, `has_any`,
  `union`, `intersection`, `difference`, `is_superset`, equality,
  `sorted_keys`/`sorted_items`, `unsorted_keys`/`unsorted_items` and
  `pop_any`. `pop_any` raises `KeyError` when the set is empty.
- **`stdkit.weighted_random`**: `WeightedRandomList` picks among `Entry`
  items with weights between 0 and 1. Items are ordered with `<`. Entries
  with zero weight are never picked, unless every weight is zero, in which
  case all items are equally likely. `get_with_seed` gives the same item for
  the same seed. An invalid weight or a `None` item raises `ValueError`.
- **`stdkit.parsers`**: `must_parse_url` and `must_compile_regexp` raise on
  invalid input.
- **`stdkit.promutils.metrics`**: an in-process metrics registry. It has
  `Counter`, `Gauge`, `Summary` and `Histogram`, their labelled vectors
  (`CounterVec`, `GaugeVec`, `SummaryVec`, `HistogramVec`) and a `Registry`.
  `Registry.expose()` renders every metric in the text exposition format.
  Registering a second metric under a name already in use raises
  `DuplicateMetricError`.
- **`stdkit.promutils.scope`**: `Scope` prefixes metric names and registers
  the metrics it creates. `StopWatch`/`StopWatchVec` record durations into
  summaries at a chosen scale. The module also has `sanitize_metric_name`,
  `duration_to_string` and `new_test_scope`.
- **`stdkit.promutils.workqueue`**: `PrometheusMetricsProvider` creates the
  depth, adds, latency, work-duration, retries and processor-time metrics of
  a named work queue.
- **`stdkit.promutils.labeled`**: `Counter`, `Gauge`, `Summary` and
  `StopWatch` whose label values are taken from a context mapping. Declare
  the keys once with `keys.set_metric_keys`. The options
  `EmitUnlabeledMetricOption` and `AdditionalLabelsOption` are in
  `labeled.options`.
- **`stdkit.logger.config`**: the process-wide logger `Config` (level, mute,
  source locations, formatter type), with `set_config`, `get_config` and
  `subscribe`. `Config.get_flag_set()` returns an `argparse` parser with one
  flag per setting.
- **`stdkit.logger.gcp_formatter`**: `GcpFormatter`, a `logging.Formatter`
  that writes single-line JSON in the shape Google Cloud logging expects.

## Installation

```
pip install stdkit
```

## Examples

Generic sets:

```python
from stdkit.sets import GenericSet, SetObject

class Name(SetObject):
    def __init__(self, value):
        self.value = value

    def get_id(self):
        return self.value

left = GenericSet(Name("a"), Name("b"))
right = GenericSet(Name("a"), Name("b"), Name("c"))

right.difference(left).sorted_keys()   # ["c"]
left.union(right).sorted_keys()        # ["a", "b", "c"]
right.is_superset(left)                # True
```

Futures:

```python
import threading
from stdkit.futures import AsyncFuture, AsyncFutureCanceled, SyncFuture

SyncFuture("value", None).get()        # "value"

future = AsyncFuture(lambda token: 42)
future.get()                           # 42

slow = AsyncFuture(lambda token: token.wait(5))
stop = threading.Event()
stop.set()
try:
    slow.get(stop)
except AsyncFutureCanceled:
    pass
```

Weighted random choice:

```python
from stdkit.weighted_random import Entry, WeightedRandomList

choices = WeightedRandomList([Entry("a", 0.4), Entry("b", 0.6)])
choices.get_with_seed(10)              # the same item every time for seed 10
choices.items()                        # ["a", "b"]
```

Metric scopes and stopwatches:

```python
from datetime import timedelta
from stdkit.promutils.scope import Scope, sanitize_metric_name

scope = Scope("test")
scope.current_scope()                        # "test:"
scope.new_sub_scope("hello").current_scope() # "test:hello:"
scope.new_scoped_metric_name("timer_x")      # "test:timer_x"
sanitize_metric_name("k8s-array")            # "k8s_array"

watch = scope.new_stop_watch("request", "request time", timedelta(milliseconds=1))
with watch.start():                          # recorded as test:request_ms
    pass
print(scope.registry.expose())
```

Labelled metrics:

```python
from stdkit.promutils.labeled.keys import set_metric_keys
from stdkit.promutils.labeled.gauge import Gauge
from stdkit.promutils.scope import Scope

set_metric_keys("project", "domain")
gauge = Gauge("queue_size", "items waiting", Scope("service"))
gauge.set({"project": "flyte", "domain": "dev"}, 42)
```

Logging in Google Cloud's format with the standard `logging` module:

```python
import logging
from stdkit.logger.gcp_formatter import GcpFormatter

handler = logging.StreamHandler()
handler.setFormatter(GcpFormatter())
log = logging.getLogger("service")
log.addHandler(handler)
log.warning("disk almost full", extra={"data": {"src": "disk.py"}})
```

## What it does not do

- The `stdkit.logger` sub-package holds only configuration and a formatter.
  It has no logging functions of its own and does not wire `Config` into the
  `logging` module. Subscribe to config changes with `subscribe` and apply
  them to your handlers yourself.
- Metrics are kept in memory only. No HTTP endpoint serves them, and there is
  no health-check or version server. Call `Registry.expose()` and serve the
  text however your application serves HTTP.

## Running the tests

```
pip install -e ".[test]"
pytest
```