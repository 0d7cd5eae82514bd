# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Compute api transport.

A :class:`Session` holds credentials and builds discovery based service
objects, one per api version, which :class:`ServiceClient` wraps for a
single component (ie. ``backendBuckets``) of the service.

Every request honors an optional call scope, the scope is checked
before each request is sent and the socket wait is bounded by its
remaining time. Retries are left to the discovery client's transport
and are disabled here by default.
"""
import logging
import threading

import google.auth
import google_auth_httplib2
import httplib2
from googleapiclient import discovery

from gce_accessor.config import Config
from gce_accessor.versions import STABLE


log = logging.getLogger('gce_accessor.client')

CLOUD_SCOPES = frozenset(['https://www.googleapis.com/auth/cloud-platform'])


class Session:
    """Base class for api repository for a specified Cloud API."""

    def __init__(self, credentials=None, project_id=None, http=None, config=None):
        self.config = config or Config.empty()
        self._credentials = credentials
        self._http = http
        self.project_id = project_id or self.config.get('project_id')
        self._services = {}
        self._lock = threading.Lock()

    def __repr__(self):
        return "<gce-session: http=%s project=%s>" % (self._http, self.project_id)

    def get_credentials(self):
        if self._credentials is None:
            self._credentials, project_id = google.auth.default(
                scopes=sorted(CLOUD_SCOPES))
            if self.project_id is None:
                self.project_id = project_id
        return self._credentials

    def get_default_project(self):
        if self.project_id:
            return self.project_id
        self.get_credentials()
        if not self.project_id:
            raise ValueError(
                "no project id configured, set GOOGLE_CLOUD_PROJECT or project_id")
        return self.project_id

    def _build_http(self):
        if self._http is not None:
            return self._http
        return google_auth_httplib2.AuthorizedHttp(
            self.get_credentials(),
            http=httplib2.Http(timeout=self.config.get('call_timeout')))

    def get_service(self, service_name, version=STABLE):
        """Discovery service object for ``service_name`` at ``version``.

        Service objects are built once per session.
        """
        key = (service_name, version)
        with self._lock:
            service = self._services.get(key)
            if service is None:
                log.debug("building discovery service %s:%s", service_name, version)
                service = discovery.build(
                    service_name, version,
                    http=self._build_http(),
                    cache_discovery=bool(self.config.get('discovery_cache')))
                self._services[key] = service
        return service

    def client(self, service_name, version, component, **kw):
        """Safely initialize a repository class to a property.

        Returns a :class:`ServiceClient` bound to ``component``.
        """
        return ServiceClient(
            self.get_service(service_name, version), component,
            service_name=service_name, version=version, **kw)


class ServiceClient:
    """Invoke methods of one component of a discovery service."""

    def __init__(self, service, component, service_name=None, version=None,
                 num_retries=0):
        self.service = service
        self.component = component
        self.service_name = service_name
        self.version = version
        self.num_retries = num_retries
        self._component = self._resolve_component(service, component)

    def __repr__(self):
        return "<ServiceClient %s:%s %s>" % (
            self.service_name, self.version, self.component)

    @staticmethod
    def _resolve_component(service, component):
        # dotted components address nested collections
        resource = service
        for part in component.split('.'):
            resource = getattr(resource, part)()
        return resource

    def supports_pagination(self, verb):
        return getattr(self._component, verb + '_next', None) is not None

    def _build_request(self, verb, verb_arguments):
        method = getattr(self._component, verb)
        return method(**verb_arguments)

    def _build_next_request(self, verb, prior_request, prior_response):
        method = getattr(self._component, verb + '_next')
        return method(prior_request, prior_response)

    def execute_command(self, verb, verb_arguments, scope=None):
        """Execute a single request of the component."""
        request = self._build_request(verb, verb_arguments)
        return self._execute(request, scope)

    def execute_paged_query(self, verb, verb_arguments, scope=None):
        """Yield each page of a paged list request."""
        if not self.supports_pagination(verb):
            yield self.execute_command(verb, verb_arguments, scope)
            return
        request = self._build_request(verb, verb_arguments)
        while request is not None:
            response = self._execute(request, scope)
            yield response
            request = self._build_next_request(verb, request, response)

    def _execute(self, request, scope=None):
        if scope is not None:
            scope.check()
            bound_socket_timeout(getattr(request, 'http', None), scope.remaining())
        log.debug("executing %s %s", request.method, request.uri)
        return request.execute(num_retries=self.num_retries)


def bound_socket_timeout(http, seconds):
    # sessions are cached thread local so the http object is not shared
    # between concurrent calls.
    seconds = max(seconds, 0.001)
    while http is not None:
        if isinstance(http, httplib2.Http):
            http.timeout = seconds
            # httplib2 copies the timeout into a connection only when
            # opening it, reused connections keep their own.
            for conn in http.connections.values():
                conn.timeout = seconds
                if getattr(conn, 'sock', None) is not None:
                    conn.sock.settimeout(seconds)
            return
        http = getattr(http, 'http', None)
