# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
import pytest

from gce_accessor.metrics import MemoryMetrics
from gce_accessor.utils import reset_session_cache


@pytest.fixture(scope='function')
def metrics():
    return MemoryMetrics()


@pytest.fixture(autouse=True)
def session_cache():
    yield
    reset_session_cache()
