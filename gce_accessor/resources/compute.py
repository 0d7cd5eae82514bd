# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
from gce_accessor import filters
from gce_accessor.accessor import ResourceAccessor, TypeInfo
from gce_accessor.provider import resources


@resources.register('instance')
class Instance(ResourceAccessor):
    """GCE resource: https://cloud.google.com/compute/docs/reference/rest/v1/instances

    Listing skips terminated and stopping instances unless a filter is given.
    """
    class resource_type(TypeInfo):
        component = 'instances'
        scope = 'zone'
        key_param = 'instance'
        default_filter = filters.not_regexp('status', 'TERMINATED|STOPPING')
