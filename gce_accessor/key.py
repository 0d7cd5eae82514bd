# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""
Resource keys.

A key addresses one resource of a kind, the scope of the key (global,
regional or zonal) picks the path used against the compute api. Keys
are hashable and compare by value so they can be used as map keys.
"""
from collections import namedtuple
from urllib.parse import urlparse

from gce_accessor.exceptions import InvalidArgument


GLOBAL = 'global'
REGIONAL = 'regional'
ZONAL = 'zonal'

# scope names as used by resource type configuration
SCOPE_TYPES = {
    'global': GLOBAL,
    'region': REGIONAL,
    'zone': ZONAL,
}


class ResourceKey(namedtuple('ResourceKey', ('name', 'region', 'zone'))):

    __slots__ = ()

    def key_type(self):
        if self.zone and self.region:
            return None
        if self.zone:
            return ZONAL
        if self.region:
            return REGIONAL
        return GLOBAL

    def valid(self):
        return bool(self.name) and self.key_type() is not None

    @property
    def location(self):
        return self.zone or self.region or ''

    def self_link(self, project, collection):
        """Relative resource path for the key within ``project``."""
        kt = self.key_type()
        if kt == ZONAL:
            return 'projects/%s/zones/%s/%s/%s' % (
                project, self.zone, collection, self.name)
        if kt == REGIONAL:
            return 'projects/%s/regions/%s/%s/%s' % (
                project, self.region, collection, self.name)
        return 'projects/%s/global/%s/%s' % (project, collection, self.name)

    def __str__(self):
        kt = self.key_type()
        if kt == ZONAL:
            return 'Key{%r, zone: %r}' % (self.name, self.zone)
        if kt == REGIONAL:
            return 'Key{%r, region: %r}' % (self.name, self.region)
        return 'Key{%r}' % (self.name,)


def _require(value, what):
    if not value or not isinstance(value, str):
        raise InvalidArgument("invalid %s: %r" % (what, value))
    return value


def global_key(name):
    return ResourceKey(_require(name, 'name'), None, None)


def regional_key(name, region):
    return ResourceKey(_require(name, 'name'), _require(region, 'region'), None)


def zonal_key(name, zone):
    return ResourceKey(_require(name, 'name'), None, _require(zone, 'zone'))


def build_key(scope, name, location=None):
    """Build a key for a resource type scope (global, region, zone)."""
    kt = SCOPE_TYPES.get(scope)
    if kt == GLOBAL:
        return global_key(name)
    elif kt == REGIONAL:
        return regional_key(name, location)
    elif kt == ZONAL:
        return zonal_key(name, location)
    raise InvalidArgument("invalid key scope: %r" % (scope,))


def parse_self_link(link):
    """Parse a full or relative self link.

    Returns a tuple of (project, collection, key).

    >>> parse_self_link('projects/p/global/backendBuckets/b')
    ('p', 'backendBuckets', ResourceKey(name='b', region=None, zone=None))
    """
    if not link:
        raise InvalidArgument("invalid self link: %r" % (link,))
    path = urlparse(link).path if '://' in link else link
    parts = [p for p in path.split('/') if p]
    try:
        idx = parts.index('projects')
    except ValueError:
        raise InvalidArgument("invalid self link: %r" % (link,))
    parts = parts[idx:]
    if len(parts) == 5 and parts[2] == 'global':
        return parts[1], parts[3], global_key(parts[4])
    if len(parts) == 6 and parts[2] == 'regions':
        return parts[1], parts[4], regional_key(parts[5], parts[3])
    if len(parts) == 6 and parts[2] == 'zones':
        return parts[1], parts[4], zonal_key(parts[5], parts[3])
    raise InvalidArgument("invalid self link: %r" % (link,))
