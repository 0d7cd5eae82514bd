# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
"""Compute api surfaces."""
from gce_accessor.exceptions import UnsupportedVersion


STABLE = 'v1'
BETA = 'beta'
ALPHA = 'alpha'

API_VERSIONS = (STABLE, BETA, ALPHA)

ALIASES = {
    'stable': STABLE,
    'ga': STABLE,
    'v0.beta': BETA,
    'v0.alpha': ALPHA,
}


def normalize_version(version):
    if version is None:
        return STABLE
    if isinstance(version, str):
        version = version.lower()
        return ALIASES.get(version, version)
    return version


def resolve_version(version, supported=API_VERSIONS):
    """Resolve a version name or alias to one of ``supported``.

    Raises :class:`UnsupportedVersion` for anything else.
    """
    version = normalize_version(version)
    if version not in supported:
        raise UnsupportedVersion(version, supported)
    return version
