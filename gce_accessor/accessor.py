# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Resource accessors.

Each resource kind is a :class:`ResourceAccessor` subclass carrying a
``resource_type`` description, the operations themselves are generic
over the kind and the api version::

    buckets = BackendBucket(session_factory, metrics=metrics)
    buckets.get('static-assets')
    buckets.beta.create({'name': 'static-assets', 'bucketName': 'assets'})

Every call runs in its own call scope, records exactly one metric
observation and returns the remote result or re-raises the original
error.
"""
import logging

from gce_accessor import filters
from gce_accessor.config import Config
from gce_accessor.exceptions import TRANSIENT, UNKNOWN, InvalidArgument, classify_error
from gce_accessor.key import SCOPE_TYPES, build_key
from gce_accessor.metrics import MetricContext, metrics_outputs
from gce_accessor.scope import call_scope
from gce_accessor.selector import ClientSelector
from gce_accessor.versions import API_VERSIONS, ALPHA, BETA, STABLE, normalize_version


log = logging.getLogger('gce_accessor.accessor')


class TypeMeta(type):

    def __repr__(cls):
        return "<TypeInfo service:%s component:%s scope:%s versions:%s>" % (
            cls.service,
            cls.component,
            cls.scope,
            ",".join(cls.versions))


class TypeInfo(metaclass=TypeMeta):

    # api client construction information
    service = 'compute'
    component = None
    versions = API_VERSIONS

    # global, region or zone
    scope = 'global'
    # request parameter naming the resource, ie. backendBucket
    key_param = None

    # resource enumeration parameters
    enum_spec = ('list', 'items[]', None)
    default_filter = filters.NONE

    # mutations return compute operations, wait for them to complete
    wait_for_operations = True

    id = name = 'name'

    @classmethod
    def key_type(cls):
        return SCOPE_TYPES[cls.scope]


class ResourceAccessor:

    resource_type = None

    def __init__(self, session_factory=None, metrics=None, config=None,
                 selector=None, scope_factory=call_scope):
        self.config = config or Config.empty()
        self.session_factory = session_factory
        self.selector = selector or ClientSelector(session_factory, self.resource_type)
        self.metrics = metrics_outputs.select(
            metrics if metrics is not None else self.config.get('metrics'), self.config)
        self.scope_factory = scope_factory

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.resource_type)

    @property
    def kind(self):
        return getattr(self, 'type', None) or self.__class__.__name__.lower()

    def location_of(self, region=None, zone=None):
        scope = self.resource_type.scope
        if scope == 'region':
            return region
        elif scope == 'zone':
            return zone
        return None

    def invoke(self, op, version, location, call):
        """Run ``call(client, scope)`` for one operation.

        The scope is released and exactly one observation recorded on
        every exit path, errors are re-raised unmodified.
        """
        version = normalize_version(version or self.config.get('api_version'))
        with self.scope_factory(self.config.get('call_timeout')) as scope:
            mc = MetricContext(self.kind, op, location, version, self.metrics)
            try:
                scope.check()
                client = self.selector.client(version)
                result = call(client, scope)
            except Exception as e:
                mc.observe(e)
                if classify_error(e) in (TRANSIENT, UNKNOWN):
                    log.warning("%s %s version:%s failed: %s", op, self.kind, version, e)
                else:
                    log.debug("%s %s version:%s failed: %s", op, self.kind, version, e)
                raise
            mc.observe()
            return result

    def key(self, name, location=None):
        return build_key(self.resource_type.scope, name, location)

    def get(self, name, version=None, region=None, zone=None):
        location = self.location_of(region, zone)
        return self.invoke(
            'get', version, location,
            lambda client, scope: client.get(scope, self.key(name, location)))

    def list(self, filter=None, version=None, region=None, zone=None):
        location = self.location_of(region, zone)
        if filter is None:
            filter = self.resource_type.default_filter
        return self.invoke(
            'list', version, location,
            lambda client, scope: client.list(
                scope, filter, self.list_location(location)))

    def list_location(self, location):
        scope = self.resource_type.scope
        if scope != 'global' and (not location or not isinstance(location, str)):
            raise InvalidArgument("invalid %s: %r" % (scope, location))
        return location

    def create(self, body, version=None, region=None, zone=None):
        location = self.location_of(region, zone)
        return self.invoke(
            'create', version, location,
            lambda client, scope: client.insert(
                scope, self.key(body.get('name'), location), body))

    def update(self, body, version=None, region=None, zone=None):
        location = self.location_of(region, zone)
        return self.invoke(
            'update', version, location,
            lambda client, scope: client.update(
                scope, self.key(body.get('name'), location), body))

    def delete(self, name, version=None, region=None, zone=None):
        location = self.location_of(region, zone)
        return self.invoke(
            'delete', version, location,
            lambda client, scope: client.delete(scope, self.key(name, location)))

    def at(self, version):
        return VersionView(self, version)

    @property
    def stable(self):
        return VersionView(self, STABLE)

    @property
    def beta(self):
        return VersionView(self, BETA)

    @property
    def alpha(self):
        return VersionView(self, ALPHA)


class VersionView:
    """Accessor operations bound to one api version."""

    def __init__(self, accessor, version):
        self.accessor = accessor
        self.version = version

    def __repr__(self):
        return "<VersionView %s %s>" % (self.version, self.accessor.kind)

    def get(self, name, **kw):
        return self.accessor.get(name, version=self.version, **kw)

    def list(self, filter=None, **kw):
        return self.accessor.list(filter, version=self.version, **kw)

    def create(self, body, **kw):
        return self.accessor.create(body, version=self.version, **kw)

    def update(self, body, **kw):
        return self.accessor.update(body, version=self.version, **kw)

    def delete(self, name, **kw):
        return self.accessor.delete(name, version=self.version, **kw)
