# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
from concurrent.futures import ThreadPoolExecutor

from googleapiclient.errors import HttpError

from gce_accessor import filters
from gce_accessor.accessor import ResourceAccessor, TypeInfo
from gce_accessor.exceptions import (
    Cancelled, DeadlineExceeded, InvalidArgument, UnsupportedVersion,
    is_not_found)
from gce_accessor.key import global_key, regional_key, zonal_key
from gce_accessor.metrics import FAILURE, SUCCESS
from gce_accessor.resources.compute import Instance
from gce_accessor.resources.loadbalancer import BackendBucket, RegionBackendService
from gce_accessor.scope import CallScope
from gce_accessor.testing import (
    MemoryResourceClient, StaticSelector, expired_scope, http_error)

from .common import BaseTest


BUCKET = {'name': 'static-assets', 'bucketName': 'assets-bucket', 'enableCdn': False}


class AccessorGetTest(BaseTest):

    def test_get_stable(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        self.assertEqual(buckets.get('static-assets'), BUCKET)
        self.assertEqual(clients['v1'].calls, [('get', global_key('static-assets'))])
        self.assertEqual(clients['beta'].calls, [])
        [o] = metrics.snapshot()
        self.assertEqual(o.outcome, SUCCESS)
        self.assertEqual(o.version, 'v1')
        self.assertEqual(o.request, 'get_backendbucket')
        self.assertEqual(o.resource, 'backendbucket')
        self.assertEqual(o.region, '')
        self.assertIsNone(o.error)
        self.assertTrue(o.duration >= 0)

    def test_get_each_version(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        for version, view in (('v1', buckets.stable),
                              ('beta', buckets.beta),
                              ('alpha', buckets.alpha)):
            self.assertEqual(view.get('static-assets'), BUCKET)
            self.assertEqual(len(clients[version].calls), 1)
        self.assertEqual(
            [o.version for o in metrics.snapshot()], ['v1', 'beta', 'alpha'])
        self.assertEqual(metrics.success_count(version='beta'), 1)

    def test_get_version_alias(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        buckets.get('static-assets', version='ga')
        buckets.at('stable').get('static-assets')
        self.assertEqual(len(clients['v1'].calls), 2)
        self.assertEqual(metrics.success_count(version='v1'), 2)

    def test_get_not_found_unchanged(self):
        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        with self.assertRaises(HttpError) as ctx:
            buckets.get('missing')
        self.assertTrue(is_not_found(ctx.exception))
        self.assertEqual(ctx.exception.resp.status, 404)
        [o] = metrics.snapshot()
        self.assertEqual(o.outcome, FAILURE)
        self.assertEqual(o.error, 'not_found')
        self.assertEqual(metrics.failure_count(error='not_found'), 1)

    def test_remote_error_is_same_object(self):
        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        err = http_error(503, 'backendError', 'try again')
        clients['v1'].errors['get'] = err
        log_output = self.capture_logging('gce_accessor.accessor')
        with self.assertRaises(HttpError) as ctx:
            buckets.get('static-assets')
        self.assertIs(ctx.exception, err)
        self.assertEqual(metrics.failure_count(error='transient'), 1)
        self.assertIn('get backendbucket version:v1 failed', log_output.getvalue())

    def test_default_version_from_config(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        buckets.config['api_version'] = 'beta'
        buckets.get('static-assets')
        self.assertEqual(len(clients['beta'].calls), 1)
        self.assertEqual(len(clients['v1'].calls), 0)


class AccessorScopeTest(BaseTest):

    def test_expired_scope_skips_remote(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, scope_factory=expired_scope,
            items=[(global_key('static-assets'), BUCKET)])
        with self.assertRaises(DeadlineExceeded):
            buckets.get('static-assets')
        for client in clients.values():
            self.assertEqual(client.calls, [])
        self.assertEqual(buckets.selector.selected, [])
        self.assertEqual(metrics.failure_count(error='deadline_exceeded'), 1)
        self.assertEqual(metrics.success_count(), 0)

    def test_scope_released_on_success_and_failure(self):
        scopes = []

        def factory(timeout):
            scope = CallScope(timeout)
            scopes.append(scope)
            return scope

        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, scope_factory=factory,
            items=[(global_key('static-assets'), BUCKET)])
        buckets.get('static-assets')
        self.assertRaises(HttpError, buckets.get, 'missing')
        self.assertRaises(InvalidArgument, buckets.get, '')
        self.assertEqual(len(scopes), 3)
        self.assertTrue(all(s.released for s in scopes))
        self.assertEqual(scopes[0].timeout, 3600)

    def test_scope_passed_to_remote(self):
        seen = []

        class Recording(MemoryResourceClient):
            def get(self, scope, key):
                seen.append(scope)
                return super(Recording, self).get(scope, key)

        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        clients['v1'] = Recording('v1', [(global_key('static-assets'), BUCKET)])
        buckets.selector.clients['v1'] = clients['v1']
        buckets.config['call_timeout'] = 30
        buckets.get('static-assets')
        [scope] = seen
        self.assertEqual(scope.timeout, 30)
        self.assertTrue(scope.released)

    def test_cancelled_during_call(self):

        class Cancelling(MemoryResourceClient):
            def get(self, scope, key):
                scope.cancel()
                return super(Cancelling, self).get(scope, key)

        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        buckets.selector.clients['v1'] = Cancelling('v1')
        self.assertRaises(Cancelled, buckets.get, 'static-assets')
        self.assertEqual(metrics.failure_count(error='cancelled'), 1)


class AccessorVersionTest(BaseTest):

    def test_unsupported_version(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        with self.assertRaises(UnsupportedVersion) as ctx:
            buckets.get('static-assets', version='gamma')
        self.assertEqual(ctx.exception.version, 'gamma')
        for client in clients.values():
            self.assertEqual(client.calls, [])
        self.assertEqual(metrics.success_count(), 0)
        [o] = metrics.snapshot()
        self.assertEqual(o.error, 'unsupported_version')
        self.assertEqual(o.version, 'gamma')

    def test_version_not_registered_for_kind(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, versions=('v1',))
        self.assertRaises(UnsupportedVersion, buckets.alpha.list)
        self.assertEqual(metrics.failure_count(version='alpha'), 1)


class AccessorMutationTest(BaseTest):

    def test_create_update_delete(self):
        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        body = dict(BUCKET)
        op = buckets.beta.create(body)
        self.assertEqual(op['status'], 'DONE')
        self.assertEqual(body, BUCKET)
        self.assertEqual(clients['beta'].objects[global_key('static-assets')], BUCKET)

        updated = dict(BUCKET, enableCdn=True)
        buckets.beta.update(updated)
        self.assertEqual(buckets.beta.get('static-assets')['enableCdn'], True)

        buckets.beta.delete('static-assets')
        self.assertEqual(clients['beta'].objects, {})
        self.assertEqual(
            [o.request for o in metrics.snapshot()],
            ['create_backendbucket', 'update_backendbucket',
             'get_backendbucket', 'delete_backendbucket'])
        self.assertEqual(metrics.success_count(), 4)

    def test_create_conflict(self):
        buckets, clients, metrics = self.memory_accessor(
            BackendBucket, items=[(global_key('static-assets'), BUCKET)])
        with self.assertRaises(HttpError) as ctx:
            buckets.create(BUCKET)
        self.assertEqual(ctx.exception.resp.status, 409)
        self.assertEqual(metrics.failure_count(error='conflict'), 1)

    def test_create_without_name(self):
        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        self.assertRaises(InvalidArgument, buckets.create, {'bucketName': 'x'})
        self.assertEqual(clients['v1'].calls, [])
        self.assertEqual(metrics.failure_count(error='invalid_argument'), 1)

    def test_delete_missing(self):
        buckets, clients, metrics = self.memory_accessor(BackendBucket)
        self.assertRaises(HttpError, buckets.alpha.delete, 'nope')
        self.assertEqual(metrics.failure_count(version='alpha', error='not_found'), 1)


class AccessorListTest(BaseTest):

    def test_list_match_all(self):
        items = [(global_key('b%d' % i), {'name': 'b%d' % i}) for i in range(3)]
        buckets, clients, metrics = self.memory_accessor(BackendBucket, items=items)
        self.assertEqual([b['name'] for b in buckets.list()], ['b0', 'b1', 'b2'])
        self.assertEqual(metrics.success_count(request='list_backendbucket'), 1)

    def test_list_injected_filter(self):
        items = [
            (global_key('web'), {'name': 'web', 'enableCdn': True}),
            (global_key('api'), {'name': 'api', 'enableCdn': False})]
        buckets, clients, metrics = self.memory_accessor(BackendBucket, items=items)
        self.assertEqual(
            [b['name'] for b in buckets.list(filters.equal_bool('enableCdn', True))],
            ['web'])
        self.assertEqual(
            [b['name'] for b in buckets.list(filter=filters.regexp('name', 'a.*'))],
            ['api'])

    def test_list_kind_default_filter(self):
        items = [
            (zonal_key('vm-1', 'us-east1-b'), {'name': 'vm-1', 'status': 'RUNNING'}),
            (zonal_key('vm-2', 'us-east1-b'), {'name': 'vm-2', 'status': 'TERMINATED'}),
            (zonal_key('vm-3', 'us-west1-a'), {'name': 'vm-3', 'status': 'RUNNING'})]
        instances, clients, metrics = self.memory_accessor(Instance, items=items)
        self.assertEqual(
            [i['name'] for i in instances.list(zone='us-east1-b')], ['vm-1'])
        self.assertEqual(
            [i['name'] for i in instances.list(filters.NONE, zone='us-east1-b')],
            ['vm-1', 'vm-2'])
        self.assertEqual(metrics.success_count(region='us-east1-b'), 2)


class AccessorScopeTypeTest(BaseTest):

    def test_regional(self):
        key = regional_key('internal-lb', 'us-central1')
        services, clients, metrics = self.memory_accessor(
            RegionBackendService, items=[(key, {'name': 'internal-lb'})])
        self.assertEqual(
            services.get('internal-lb', region='us-central1'), {'name': 'internal-lb'})
        self.assertEqual(clients['v1'].calls, [('get', key)])
        [o] = metrics.snapshot()
        self.assertEqual(o.region, 'us-central1')
        self.assertEqual(o.request, 'get_region-backendservice')

    def test_regional_requires_region(self):
        services, clients, metrics = self.memory_accessor(RegionBackendService)
        self.assertRaises(InvalidArgument, services.get, 'internal-lb')
        self.assertEqual(clients['v1'].calls, [])

    def test_list_requires_location(self):
        services, clients, metrics = self.memory_accessor(RegionBackendService)
        self.assertRaises(InvalidArgument, services.list)
        instances, instance_clients, instance_metrics = self.memory_accessor(Instance)
        self.assertRaises(InvalidArgument, instances.beta.list, zone='')
        self.assertEqual(clients['v1'].calls, [])
        self.assertEqual(instance_clients['beta'].calls, [])
        self.assertEqual(metrics.failure_count(
            request='list_region-backendservice', error='invalid_argument'), 1)
        self.assertEqual(instance_metrics.failure_count(error='invalid_argument'), 1)

    def test_zonal(self):
        key = zonal_key('vm-1', 'us-east1-b')
        instances, clients, metrics = self.memory_accessor(
            Instance, items=[(key, {'name': 'vm-1'})])
        instances.alpha.update({'name': 'vm-1', 'labels': {'env': 'dev'}}, zone='us-east1-b')
        self.assertEqual(clients['alpha'].objects[key]['labels'], {'env': 'dev'})
        self.assertEqual(metrics.success_count(region='us-east1-b', version='alpha'), 1)

    def test_unregistered_kind_uses_class_name(self):

        class Widget(ResourceAccessor):
            class resource_type(TypeInfo):
                component = 'widgets'
                key_param = 'widget'

        widgets, clients, metrics = self.memory_accessor(
            Widget, items=[(global_key('w'), {'name': 'w'})])
        widgets.get('w')
        self.assertEqual(metrics.snapshot()[0].request, 'get_widget')


class AccessorConcurrencyTest(BaseTest):

    def test_concurrent_gets(self):
        items = [(global_key('b%d' % i), {'name': 'b%d' % i}) for i in range(10)]
        buckets, clients, metrics = self.memory_accessor(BackendBucket, items=items)

        def get(i):
            if i % 10 == 9:
                try:
                    buckets.get('missing-%d' % i)
                except HttpError:
                    return None
            return buckets.get('b%d' % (i % 10))

        with ThreadPoolExecutor(max_workers=25) as w:
            results = list(w.map(get, range(100)))

        self.assertEqual(len(results), 100)
        self.assertEqual(len(metrics), 100)
        self.assertEqual(len(clients['v1'].calls), 100)
        self.assertEqual(metrics.success_count(), 90)
        self.assertEqual(metrics.failure_count(), 10)
        self.assertEqual(sum(sum(b) for b in metrics.latency.values()), 100)


def test_health_check_versions(metrics):
    from gce_accessor.resources.loadbalancer import HealthCheck
    clients = {v: MemoryResourceClient(v) for v in ('v1', 'beta', 'alpha')}
    checks = HealthCheck(selector=StaticSelector(clients), metrics=metrics)
    for view in (checks.stable, checks.beta, checks.alpha):
        view.create({'name': 'hc', 'checkIntervalSec': 5})
    assert all(len(c.objects) == 1 for c in clients.values())
    assert metrics.success_count(request='create_healthcheck') == 3
    assert len(metrics) == 3
