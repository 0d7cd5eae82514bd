# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Call scopes.

A call scope bounds a single remote call in time and lets its owner
cancel it. The transport checks the scope before sending a request and
between pages, and bounds socket waits by :meth:`CallScope.remaining`.

Usage::

    with call_scope(timeout=30) as scope:
        client.get(scope, key)
"""
import threading
import time

from gce_accessor.exceptions import Cancelled, DeadlineExceeded


# one hour, matching the compute api's long running call bound
DEFAULT_CALL_TIMEOUT = 60 * 60


class CallScope:

    def __init__(self, timeout=DEFAULT_CALL_TIMEOUT, clock=time.monotonic):
        if timeout is None or timeout <= 0:
            raise ValueError("call scope timeout must be positive: %r" % (timeout,))
        self.timeout = timeout
        self.clock = clock
        self.deadline = clock() + timeout
        self._done = threading.Event()
        self._reason = None
        self.released = False

    def remaining(self):
        return max(0.0, self.deadline - self.clock())

    @property
    def expired(self):
        return self.clock() >= self.deadline

    @property
    def cancelled(self):
        return self._reason is Cancelled

    def done(self):
        return self._done.is_set() or self.expired

    def cancel(self):
        if not self._done.is_set():
            self._reason = Cancelled
            self._done.set()

    def wait(self, timeout=None):
        """Block until the scope is cancelled or its deadline passes.

        Returns True if the scope is done.
        """
        bound = self.remaining()
        if timeout is not None:
            bound = min(bound, timeout)
        self._done.wait(bound)
        return self.done()

    def check(self):
        """Raise if the scope can no longer be used for remote work."""
        if self._reason is Cancelled:
            raise Cancelled("call scope cancelled")
        if self.expired:
            raise DeadlineExceeded(
                "call deadline of %ss exceeded" % (self.timeout,))

    def release(self):
        # wake anything still waiting on the scope, a released scope
        # reads as cancelled unless it already expired.
        if self.released:
            return
        self.released = True
        if not self.expired:
            self.cancel()

    def __enter__(self):
        return self

    def __exit__(self, exc_type=None, exc_value=None, exc_traceback=None):
        self.release()

    def __repr__(self):
        return "<CallScope timeout:%s remaining:%0.3f released:%s>" % (
            self.timeout, self.remaining(), self.released)


def call_scope(timeout=None):
    """Default call scope provider."""
    return CallScope(timeout or DEFAULT_CALL_TIMEOUT)
