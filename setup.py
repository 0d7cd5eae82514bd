# Automatically generated from poetry/pyproject.toml
# flake8: noqa
# -*- coding: utf-8 -*-
from setuptools import setup

packages = \
['gce_accessor', 'gce_accessor.resources']

package_data = \
{'': ['*']}

install_requires = \
['google-api-python-client>=2.0,<3.0',
 'google-auth>=2.0.0,<3.0.0',
 'google-auth-httplib2>=0.1.0',
 'httplib2>=0.19.0',
 'jmespath>=0.10.0',
 'prometheus-client>=0.12.0',
 'pyyaml>=5.3.1']

extras_require = \
{'test': ['pytest>=6.0', 'mock>=4.0']}

setup_kwargs = {
    'name': 'gce-accessor',
    'version': '0.1.0',
    'description': 'Versioned Google Compute Engine resource accessors with call scopes and api metrics',
    'long_description': '# GCE Accessor\n\nGet, list, create, update and delete Compute Engine resources across the\nstable, beta and alpha apis through one generic accessor per resource kind.\n\nEvery call runs within a bounded, cancellable call scope and records one\nmetric observation (outcome, error class and latency by kind, request,\nregion and api version).\n\n```python\nfrom gce_accessor.provider import GoogleCompute\n\ncompute = GoogleCompute()\nbuckets = compute.accessor(\'backendbucket\')\nbuckets.beta.get(\'static-assets\')\n```\n',
    'long_description_content_type': 'text/markdown',
    'author': 'Cloud Custodian Project',
    'author_email': None,
    'maintainer': None,
    'maintainer_email': None,
    'url': 'https://cloudcustodian.io',
    'packages': packages,
    'package_data': package_data,
    'install_requires': install_requires,
    'extras_require': extras_require,
    'python_requires': '>=3.6,<4.0',
}


setup(**setup_kwargs)
