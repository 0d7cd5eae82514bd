# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
import importlib
import logging
from functools import partial

from gce_accessor.client import Session
from gce_accessor.config import Config
from gce_accessor.metrics import metrics_outputs
from gce_accessor.registry import PluginRegistry
from gce_accessor.resources.resource_map import ResourceMap


log = logging.getLogger('gce_accessor.provider')

# squelch inconsiderate logging
logging.getLogger('googleapiclient.discovery').setLevel(logging.WARNING)


class GoogleCompute:
    """Entry point handing out resource accessors by kind name.

    Accessors created by one provider share its config, session
    factory and metrics output.
    """

    display_name = 'GCE'
    resource_prefix = 'gce'
    resources = PluginRegistry('%s.resources' % resource_prefix)
    resource_map = ResourceMap

    def __init__(self, config=None, session_factory=None, metrics=None):
        self.config = config or Config.empty()
        self.session_factory = session_factory or self.get_session_factory(self.config)
        self.metrics = metrics_outputs.select(
            metrics if metrics is not None else self.config.get('metrics'), self.config)

    def get_session_factory(self, config):
        """Get a credential/session factory for api usage."""
        return partial(Session, project_id=config.get('project_id'), config=config)

    @classmethod
    def get_resource_types(cls, resource_types):
        """Return the resource classes for the given type names"""
        return import_resource_classes(cls.resource_map, resource_types)

    @classmethod
    def get_resource_class(cls, name):
        if name in cls.resources:
            return cls.resources[name]
        qualified = name
        if not qualified.startswith(cls.resource_prefix + '.'):
            qualified = '%s.%s' % (cls.resource_prefix, name)
        found, _ = cls.get_resource_types((qualified,))
        if not found:
            # registered aliases are only known once their module loads
            cls.get_resource_types(('*',))
            found = [cls.resources.get(name)] if name in cls.resources else []
        if not found:
            raise KeyError("unknown resource kind %s" % name)
        return found[0]

    def accessor(self, name, **kw):
        klass = self.get_resource_class(name)
        kw.setdefault('metrics', self.metrics)
        kw.setdefault('config', self.config)
        return klass(self.session_factory, **kw)


def import_resource_classes(resource_map, resource_types):
    if '*' in resource_types:
        resource_types = list(resource_map)

    found = []
    not_found = []

    for rtype in resource_types:
        if rtype not in resource_map:
            not_found.append(rtype)
            continue
        rmodule, rclass = resource_map[rtype].rsplit('.', 1)
        r = getattr(importlib.import_module(rmodule), rclass, None)
        if r is None:
            not_found.append(rtype)
        else:
            found.append(r)
    return found, not_found


resources = GoogleCompute.resources
