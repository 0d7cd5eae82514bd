# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0

ResourceMap = {
    "gce.backendbucket": "gce_accessor.resources.loadbalancer.BackendBucket",
    "gce.backendservice": "gce_accessor.resources.loadbalancer.BackendService",
    "gce.healthcheck": "gce_accessor.resources.loadbalancer.HealthCheck",
    "gce.instance": "gce_accessor.resources.compute.Instance",
    "gce.region-backendservice": "gce_accessor.resources.loadbalancer.RegionBackendService",
}
