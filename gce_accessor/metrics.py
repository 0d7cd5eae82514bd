# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Api call metrics.

Every accessor call creates a :class:`MetricContext` on entry and
observes it exactly once on exit, producing one :class:`Observation`
for the configured metrics output (success / failure count and call
latency, tagged by resource kind, request, region and api version).

Outputs are selected by name from ``metrics_outputs``, see
:meth:`MetricsRegistry.select`.
"""
import bisect
import logging
import threading
import time
from collections import namedtuple

from prometheus_client import CollectorRegistry, Counter, Histogram

from gce_accessor.exceptions import classify_error
from gce_accessor.registry import PluginRegistry


log = logging.getLogger('gce_accessor.metrics')

SUCCESS = 'success'
FAILURE = 'failure'

UNUSED_LABEL = ''

Observation = namedtuple(
    'Observation',
    ('resource', 'request', 'region', 'version', 'outcome', 'error', 'duration'))

# counter keys of the memory sink
TAG_FIELDS = Observation._fields[:4]
FAILURE_FIELDS = TAG_FIELDS + ('error',)


class MetricContext:
    """Tags and start time of a single api call."""

    def __init__(self, resource, request, region, version, sink, clock=time.monotonic):
        self.resource = resource
        self.request = "%s_%s" % (request, resource)
        self.region = region or UNUSED_LABEL
        self.version = version
        self.sink = sink
        self.clock = clock
        self.start = clock()
        self.observed = False

    def observe(self, err=None):
        """Record the outcome of the call, returns ``err`` untouched."""
        if self.observed:
            raise RuntimeError("metric context already observed %s" % self.request)
        self.observed = True
        self.sink.observe(Observation(
            self.resource,
            self.request,
            self.region,
            self.version,
            FAILURE if err is not None else SUCCESS,
            classify_error(err),
            self.clock() - self.start))
        return err


class MetricsRegistry(PluginRegistry):

    def select(self, selector, config=None):
        if isinstance(selector, Metrics):
            return selector
        # Compatibility for boolean configuration
        if isinstance(selector, bool):
            selector = selector and 'default' or 'null'
        if not selector:
            selector = 'null'
        if selector not in self:
            raise ValueError("Invalid %s: %s" % (self.plugin_type, selector))
        return self[selector](config)


metrics_outputs = MetricsRegistry('gce_accessor.metrics')


class Metrics:
    """Metrics output, implementations must be safe for concurrent use."""

    def __init__(self, config=None):
        self.config = config or {}

    def observe(self, observation):
        raise NotImplementedError("subclass responsibility")


@metrics_outputs.register('null')
class NullMetrics(Metrics):

    def observe(self, observation):
        pass


@metrics_outputs.register('default', aliases=('log',))
class LogMetrics(Metrics):
    """Default metrics collection.

    logs observations, default handler should send to stderr
    """

    def observe(self, observation):
        log.debug(self.render_metric(observation))

    def render_metric(self, o):
        label = "metric:%s %s:%0.4fs" % (o.request, o.outcome, o.duration)
        for k in ('resource', 'region', 'version', 'error'):
            v = getattr(o, k)
            if v:
                label += " %s:%s" % (k, v)
        return label


# seconds, roughly the prometheus client defaults stretched out to
# the one hour call bound.
LATENCY_BUCKETS = (
    0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0,
    10.0, 30.0, 60.0, 300.0, 900.0, 3600.0)


@metrics_outputs.register('memory')
class MemoryMetrics(Metrics):
    """Aggregate observations in process.

    Counters and histogram buckets are keyed by
    (resource, request, region, version), failures additionally
    by error class.
    """

    def __init__(self, config=None):
        super(MemoryMetrics, self).__init__(config)
        self._lock = threading.Lock()
        self.observations = []
        self.successes = {}
        self.failures = {}
        self.latency = {}

    def observe(self, observation):
        tags = observation[:4]
        idx = bisect.bisect_left(LATENCY_BUCKETS, observation.duration)
        with self._lock:
            self.observations.append(observation)
            if observation.outcome == SUCCESS:
                self.successes[tags] = self.successes.get(tags, 0) + 1
            else:
                fkey = tags + (observation.error,)
                self.failures[fkey] = self.failures.get(fkey, 0) + 1
            buckets = self.latency.setdefault(tags, [0] * (len(LATENCY_BUCKETS) + 1))
            buckets[idx] += 1

    def __len__(self):
        with self._lock:
            return len(self.observations)

    def snapshot(self):
        with self._lock:
            return list(self.observations)

    def success_count(self, **tags):
        return self._count(self.successes, TAG_FIELDS, tags)

    def failure_count(self, **tags):
        return self._count(self.failures, FAILURE_FIELDS, tags)

    def _count(self, counters, fields, tags):
        unknown = set(tags).difference(fields)
        if unknown:
            raise ValueError(
                "unknown tags:%s valid:%s" % (sorted(unknown), list(fields)))
        positions = [(fields.index(t), tv) for t, tv in tags.items()]
        with self._lock:
            return sum(
                v for k, v in counters.items()
                if all(k[i] == tv for i, tv in positions))


@metrics_outputs.register('prometheus')
class PrometheusMetrics(Metrics):
    """Export observations through prometheus client collectors.

    Collectors are bound to ``config['registry']`` when given, otherwise
    to a private registry exposed as :attr:`registry`.
    """

    namespace = 'gce_accessor'
    labels = ('resource', 'request', 'region', 'version')

    def __init__(self, config=None):
        super(PrometheusMetrics, self).__init__(config)
        self.registry = self.config.get('registry') or CollectorRegistry()
        self.requests = Counter(
            'api_requests', 'Compute api calls by outcome',
            self.labels + ('outcome',),
            namespace=self.namespace, registry=self.registry)
        self.errors = Counter(
            'api_request_errors', 'Compute api call failures by error class',
            self.labels + ('error',),
            namespace=self.namespace, registry=self.registry)
        self.latency = Histogram(
            'api_request_duration_seconds', 'Compute api call latency',
            self.labels,
            buckets=LATENCY_BUCKETS,
            namespace=self.namespace, registry=self.registry)

    def observe(self, observation):
        tags = dict(zip(self.labels, observation[:4]))
        self.requests.labels(outcome=observation.outcome, **tags).inc()
        if observation.outcome == FAILURE:
            self.errors.labels(error=observation.error, **tags).inc()
        self.latency.labels(**tags).observe(observation.duration)
