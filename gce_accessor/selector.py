# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Versioned client selection.

Resource kinds are exposed identically by the stable, beta and alpha
compute apis. :class:`ClientSelector` maps an api version to a
:class:`ResourceClient` bound to that version's component for the kind,
so accessors never branch on the version themselves.
"""
import logging

import jmespath

from gce_accessor import filters
from gce_accessor.exceptions import OperationError
from gce_accessor.key import GLOBAL, REGIONAL, ZONAL
from gce_accessor.utils import local_session
from gce_accessor.versions import resolve_version


log = logging.getLogger('gce_accessor.selector')

OPERATION_COMPONENTS = {
    GLOBAL: 'globalOperations',
    REGIONAL: 'regionOperations',
    ZONAL: 'zoneOperations',
}


class ResourceClient:
    """Get, list, insert, update and delete one resource kind.

    Every method takes the call scope first, it is passed through to
    each request the method makes. Mutations wait on the resulting
    compute operation and return it once done.
    """

    def __init__(self, session, resource_type, version):
        self.session = session
        self.resource_type = resource_type
        self.version = version
        self.project = session.get_default_project()
        self.service = session.client(
            resource_type.service, version, resource_type.component)

    def __repr__(self):
        return "<ResourceClient %s:%s %s>" % (
            self.resource_type.service, self.version, self.resource_type.component)

    def _location_params(self, key_type, location):
        params = {'project': self.project}
        if key_type == REGIONAL:
            params['region'] = location
        elif key_type == ZONAL:
            params['zone'] = location
        return params

    def _key_params(self, key):
        params = self._location_params(key.key_type(), key.location)
        params[self.resource_type.key_param] = key.name
        return params

    def get(self, scope, key):
        return self.service.execute_command('get', self._key_params(key), scope)

    def list(self, scope, flt=filters.NONE, location=None):
        enum_op, path, extra_args = self.resource_type.enum_spec
        params = self._location_params(self.resource_type.key_type(), location)
        if extra_args:
            params.update(extra_args)
        if flt:
            params['filter'] = str(flt)
        results = []
        for page in self.service.execute_paged_query(enum_op, params, scope):
            page_items = jmespath.search(path, page)
            if page_items:
                results.extend(page_items)
        return results

    def insert(self, scope, key, body):
        params = self._location_params(key.key_type(), key.location)
        params['body'] = body
        return self.wait(scope, key, self.service.execute_command('insert', params, scope))

    def update(self, scope, key, body):
        params = self._key_params(key)
        params['body'] = body
        return self.wait(scope, key, self.service.execute_command('update', params, scope))

    def delete(self, scope, key):
        return self.wait(
            scope, key, self.service.execute_command('delete', self._key_params(key), scope))

    def wait(self, scope, key, operation):
        """Wait for a compute operation to complete within the scope."""
        if not self.resource_type.wait_for_operations:
            return operation
        key_type = key.key_type()
        ops = None
        while operation.get('status') != 'DONE':
            if ops is None:
                ops = self.session.client(
                    self.resource_type.service, self.version,
                    OPERATION_COMPONENTS[key_type])
            params = self._location_params(key_type, key.location)
            params['operation'] = operation['name']
            log.debug("waiting on operation %s for %s", operation['name'], key)
            operation = ops.execute_command('wait', params, scope)
        if operation.get('error'):
            raise OperationError(operation)
        return operation


class ClientSelector:
    """Select the versioned client for a resource kind.

    Selection is a pure mapping, sessions come from the thread local
    session cache and discovery services are cached by the session.
    """

    def __init__(self, session_factory, resource_type):
        self.session_factory = session_factory
        self.resource_type = resource_type

    def client(self, version):
        version = resolve_version(version, self.resource_type.versions)
        return ResourceClient(
            local_session(self.session_factory), self.resource_type, version)
