# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
import os
import logging

from gce_accessor.scope import DEFAULT_CALL_TIMEOUT
from gce_accessor.utils import load_file
from gce_accessor.versions import STABLE

log = logging.getLogger('gce_accessor.config')


class Bag(dict):
    def __getattr__(self, k):
        try:
            return self[k]
        except KeyError:
            raise AttributeError(k)

    def __setattr__(self, k, v):
        self[k] = v


class Config(Bag):

    def copy(self, **kw):
        d = {}
        d.update(self)
        d.update(**kw)
        return Config(d)

    @classmethod
    def empty(cls, **kw):
        d = {}
        d.update({
            'project_id': os.environ.get('GOOGLE_CLOUD_PROJECT'),
            'call_timeout': float(os.environ.get(
                'GCE_CALL_TIMEOUT', DEFAULT_CALL_TIMEOUT)),
            'api_version': STABLE,
            'metrics': 'default',
            'discovery_cache': False})
        d.update(kw)
        return cls(d)

    @classmethod
    def load(cls, path, **kw):
        """Overlay a yaml or json config file on the defaults."""
        data = load_file(path) or {}
        if not isinstance(data, dict):
            raise ValueError("invalid config file %s, expected a mapping" % path)
        log.debug("loaded config from %s keys:%s", path, ", ".join(sorted(data)))
        data.update(kw)
        return cls.empty(**data)
