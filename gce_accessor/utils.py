# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
import json
import logging
import os
import threading
import time

import yaml

try:
    from yaml import CSafeLoader as SafeLoader
except ImportError:  # pragma: no cover
    from yaml import SafeLoader


log = logging.getLogger('gce_accessor.utils')


def load_file(path, format=None):
    if format is None:
        format = 'yaml'
        _, ext = os.path.splitext(path)
        if ext[1:] == 'json':
            format = 'json'

    with open(path) as fh:
        contents = fh.read()

    if format == 'yaml':
        return yaml_load(contents)
    elif format == 'json':
        return json.loads(contents)
    raise ValueError("unknown file format %s" % format)


def yaml_load(value):
    return yaml.load(value, Loader=SafeLoader)


CONN_CACHE = threading.local()

# sessions hold credentials, refresh well before typical token expiry
SESSION_TTL = 60 * 45


def local_session(factory):
    """Cache a session thread local for up to 45m"""
    s = getattr(CONN_CACHE, 'session', None)
    t = getattr(CONN_CACHE, 'time', None)
    f = getattr(CONN_CACHE, 'factory', None)

    n = time.time()
    if s is not None and f is factory and t + SESSION_TTL > n:
        return s
    s = factory()

    CONN_CACHE.session = s
    CONN_CACHE.factory = factory
    CONN_CACHE.time = n
    return s


def reset_session_cache():
    for k in [k for k in dir(CONN_CACHE) if not k.startswith('_')]:
        setattr(CONN_CACHE, k, None)
