# Copyright The Cloud Custodian Authors.
# SPDX-License-Identifier: Apache-2.0
import io
import json
import logging
import os
import shutil
import tempfile
import unittest
from functools import partial

from googleapiclient.http import HttpMockSequence

from gce_accessor.client import Session
from gce_accessor.config import Config
from gce_accessor.metrics import MemoryMetrics
from gce_accessor.testing import MemoryResourceClient, StaticSelector
from gce_accessor.utils import reset_session_cache
from gce_accessor.versions import API_VERSIONS


PROJECT_ID = 'cloud-custodian'


def json_response(data, status=200):
    return ({'status': str(status)}, json.dumps(data).encode('utf8'))


class BaseTest(unittest.TestCase):

    def setUp(self):
        self.addCleanup(reset_session_cache)

    def get_temp_dir(self):
        temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, temp_dir)
        return temp_dir

    def write_file(self, name, contents):
        path = os.path.join(self.get_temp_dir(), name)
        with open(path, 'w') as fh:
            fh.write(contents)
        return path

    def patch(self, obj, attr, new):
        old = getattr(obj, attr, None)
        setattr(obj, attr, new)
        self.addCleanup(setattr, obj, attr, old)

    def change_environment(self, **kwargs):
        original_environ = dict(os.environ)

        @self.addCleanup
        def cleanup_env():
            os.environ.clear()
            os.environ.update(original_environ)

        for key, value in kwargs.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value

    def capture_logging(self, name=None, level=logging.INFO):
        log_file = io.StringIO()
        log_handler = logging.StreamHandler(log_file)
        logger = logging.getLogger(name)
        logger.addHandler(log_handler)
        old_logger_level = logger.level
        logger.setLevel(level)

        @self.addCleanup
        def reset_logging():
            logger.removeHandler(log_handler)
            logger.setLevel(old_logger_level)

        return log_file

    def memory_accessor(self, klass, versions=API_VERSIONS, items=(), **kw):
        """Accessor over in-memory clients, one per api version.

        Returns the accessor, the clients by version and the metrics.
        """
        clients = {v: MemoryResourceClient(v, items) for v in versions}
        metrics = kw.pop('metrics', None) or MemoryMetrics()
        accessor = klass(
            selector=StaticSelector(clients),
            metrics=metrics,
            config=kw.pop('config', None) or Config.empty(project_id=PROJECT_ID),
            **kw)
        return accessor, clients, metrics

    def replay_session_factory(self, responses, project_id=PROJECT_ID):
        """Session factory replaying canned http responses in order."""
        http = HttpMockSequence(list(responses))
        return partial(
            Session, http=http, project_id=project_id,
            config=Config.empty(project_id=project_id)), http
