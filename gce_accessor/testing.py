# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
In-memory stand-ins for the compute api, for use in tests.

:class:`MemoryResourceClient` implements the resource client surface
against a dict, raising the same ``HttpError`` responses the api does,
and :class:`StaticSelector` hands out one client per api version.
"""
import copy
import json
import threading
import uuid

import httplib2
from googleapiclient.errors import HttpError

from gce_accessor import filters
from gce_accessor.scope import CallScope
from gce_accessor.versions import resolve_version


def http_error(status, reason='', message='', uri=None):
    """Build an ``HttpError`` shaped like a compute api error response."""
    resp = httplib2.Response({'status': status})
    resp.reason = message or reason
    content = json.dumps({'error': {
        'code': status,
        'message': message,
        'errors': [{'reason': reason, 'message': message}]}}).encode('utf8')
    return HttpError(resp, content, uri=uri)


def not_found(name):
    return http_error(
        404, 'notFound', "The resource '%s' was not found" % name)


def already_exists(name):
    return http_error(
        409, 'alreadyExists', "The resource '%s' already exists" % name)


class MemoryResourceClient:
    """Thread safe in-memory resource client.

    ``calls`` records (method, key) for every invocation. ``errors``
    maps a method name to an exception raised on its next call.
    """

    def __init__(self, version='v1', items=()):
        self.version = version
        self.lock = threading.Lock()
        self.objects = {}
        self.calls = []
        self.errors = {}
        for key, obj in items:
            self.objects[key] = copy.deepcopy(obj)

    def _record(self, method, scope, key=None):
        with self.lock:
            self.calls.append((method, key))
            err = self.errors.pop(method, None)
        scope.check()
        if err is not None:
            raise err

    def _operation(self, op_type, key):
        return {
            'kind': 'compute#operation',
            'name': 'operation-%s' % uuid.uuid4().hex,
            'operationType': op_type,
            'targetId': key.name,
            'status': 'DONE',
        }

    def get(self, scope, key):
        self._record('get', scope, key)
        with self.lock:
            if key not in self.objects:
                raise not_found(key.name)
            return copy.deepcopy(self.objects[key])

    def list(self, scope, flt=filters.NONE, location=None):
        self._record('list', scope)
        with self.lock:
            return [
                copy.deepcopy(obj) for key, obj in sorted(
                    self.objects.items(), key=lambda i: (i[0].location, i[0].name))
                if key.location == (location or '') and flt.match(obj)]

    def insert(self, scope, key, body):
        self._record('insert', scope, key)
        with self.lock:
            if key in self.objects:
                raise already_exists(key.name)
            self.objects[key] = copy.deepcopy(body)
        return self._operation('insert', key)

    def update(self, scope, key, body):
        self._record('update', scope, key)
        with self.lock:
            if key not in self.objects:
                raise not_found(key.name)
            self.objects[key] = copy.deepcopy(body)
        return self._operation('update', key)

    def delete(self, scope, key):
        self._record('delete', scope, key)
        with self.lock:
            if self.objects.pop(key, None) is None:
                raise not_found(key.name)
        return self._operation('delete', key)


class StaticSelector:
    """Selector over a fixed mapping of api version to client."""

    def __init__(self, clients):
        self.clients = dict(clients)
        self.selected = []

    def client(self, version):
        version = resolve_version(version, tuple(self.clients))
        self.selected.append(version)
        return self.clients[version]


class ExpiredScope(CallScope):
    """A call scope whose deadline has already passed."""

    def __init__(self, timeout=None):
        super(ExpiredScope, self).__init__(1, clock=lambda: 0)
        self.deadline = 0


def expired_scope(timeout=None):
    return ExpiredScope(timeout)
