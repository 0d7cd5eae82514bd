# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Error taxonomy for resource accessors.

Local failures (bad keys, unknown api versions, expired call scopes) are
raised as :class:`AccessorError` subclasses. Remote failures keep the
type the transport raised them with (``googleapiclient.errors.HttpError``),
they are only classified for metric tagging and never wrapped.
"""
import json
import socket

import jmespath

from googleapiclient.errors import HttpError


NOT_FOUND = 'not_found'
CONFLICT = 'conflict'
TRANSIENT = 'transient'
UNKNOWN = 'unknown'
INVALID_ARGUMENT = 'invalid_argument'
UNSUPPORTED_VERSION = 'unsupported_version'
DEADLINE_EXCEEDED = 'deadline_exceeded'
CANCELLED = 'cancelled'

TRANSIENT_STATUS = (429, 500, 502, 503, 504)
TRANSIENT_REASONS = (
    'backendError', 'internalError', 'rateLimitExceeded',
    'userRateLimitExceeded', 'quotaExceeded')
CONFLICT_STATUS = (409, 412)


class AccessorError(Exception):
    """Accessor Exception Base Class
    """
    kind = UNKNOWN


class InvalidArgument(AccessorError, ValueError):
    """Malformed resource name or key
    """
    kind = INVALID_ARGUMENT


class UnsupportedVersion(AccessorError):
    """Api version not registered for a resource kind
    """
    kind = UNSUPPORTED_VERSION

    def __init__(self, version, supported=()):
        super(UnsupportedVersion, self).__init__(
            "unsupported api version:%s supported:%s" % (
                version, ", ".join(supported)))
        self.version = version
        self.supported = tuple(supported)


class DeadlineExceeded(AccessorError):
    """The call scope's deadline passed before the call completed
    """
    kind = DEADLINE_EXCEEDED


class Cancelled(AccessorError):
    """The call scope was cancelled
    """
    kind = CANCELLED


ERROR_REASON = jmespath.compile('error.errors[0].reason')
ERROR_CODE = jmespath.compile('error.code')
ERROR_MESSAGE = jmespath.compile('error.message')


def extract_errors(e):
    try:
        content = e.content
        if isinstance(content, bytes):
            content = content.decode('utf8')
        edata = json.loads(content)
    except Exception:
        edata = None

    return ERROR_REASON.search(edata), ERROR_CODE.search(edata), ERROR_MESSAGE.search(edata)


def http_status(e):
    try:
        return int(e.resp.status)
    except (AttributeError, TypeError, ValueError):
        return None


def classify_error(e):
    """Map an error to the class used to tag failure observations."""
    if e is None:
        return None
    if isinstance(e, AccessorError):
        return e.kind
    if isinstance(e, HttpError):
        status = http_status(e)
        reason, code, _ = extract_errors(e)
        if status is None:
            status = code
        if status == 404:
            return NOT_FOUND
        if status in CONFLICT_STATUS:
            return CONFLICT
        if status in TRANSIENT_STATUS or reason in TRANSIENT_REASONS:
            return TRANSIENT
        if status == 400:
            return INVALID_ARGUMENT
        return UNKNOWN
    if isinstance(e, socket.timeout):
        return DEADLINE_EXCEEDED
    return UNKNOWN


def is_not_found(e):
    return classify_error(e) == NOT_FOUND


def is_conflict(e):
    return classify_error(e) == CONFLICT


def is_transient(e):
    return classify_error(e) == TRANSIENT


# compute operation error codes
OPERATION_ERROR_KINDS = {
    'RESOURCE_NOT_FOUND': NOT_FOUND,
    'ALREADY_EXISTS': CONFLICT,
    'RESOURCE_IN_USE_BY_ANOTHER_RESOURCE': CONFLICT,
    'RESOURCE_NOT_READY': TRANSIENT,
    'QUOTA_EXCEEDED': TRANSIENT,
    'INVALID_FIELD_VALUE': INVALID_ARGUMENT,
}


class OperationError(AccessorError):
    """A compute long running operation completed with errors

    The remote accepted the request, the failure is reported on the
    operation resource instead of the http response.
    """

    def __init__(self, operation):
        self.operation = operation
        self.errors = (operation.get('error') or {}).get('errors') or []
        self.code = self.errors and self.errors[0].get('code') or None
        super(OperationError, self).__init__(
            "operation %s failed: %s" % (
                operation.get('name'),
                "; ".join("%s: %s" % (e.get('code'), e.get('message'))
                          for e in self.errors)))

    @property
    def kind(self):
        return OPERATION_ERROR_KINDS.get(self.code, UNKNOWN)
