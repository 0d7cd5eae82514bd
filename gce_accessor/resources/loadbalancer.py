# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
from gce_accessor.accessor import ResourceAccessor, TypeInfo
from gce_accessor.provider import resources


@resources.register('backendbucket', aliases=('backend-bucket',))
class BackendBucket(ResourceAccessor):
    """GCE resource: https://cloud.google.com/compute/docs/reference/rest/v1/backendBuckets
    """
    class resource_type(TypeInfo):
        component = 'backendBuckets'
        scope = 'global'
        key_param = 'backendBucket'


@resources.register('backendservice', aliases=('backend-service',))
class BackendService(ResourceAccessor):
    """GCE resource: https://cloud.google.com/compute/docs/reference/rest/v1/backendServices
    """
    class resource_type(TypeInfo):
        component = 'backendServices'
        scope = 'global'
        key_param = 'backendService'


@resources.register('region-backendservice')
class RegionBackendService(ResourceAccessor):
    """GCE resource: https://cloud.google.com/compute/docs/reference/rest/v1/regionBackendServices
    """
    class resource_type(TypeInfo):
        component = 'regionBackendServices'
        scope = 'region'
        key_param = 'backendService'


@resources.register('healthcheck', aliases=('health-check',))
class HealthCheck(ResourceAccessor):
    """GCE resource: https://cloud.google.com/compute/docs/reference/rest/v1/healthChecks
    """
    class resource_type(TypeInfo):
        component = 'healthChecks'
        scope = 'global'
        key_param = 'healthCheck'
