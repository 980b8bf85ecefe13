#!/usr/bin/env python
"""
Copyright 2019 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import os

from setuptools import find_packages, setup

# read the version without importing the package, its dependencies may not be installed yet
_version: dict[str, str] = {}
with open(os.path.join(os.path.dirname(__file__), 'bsonstream', 'version.py')) as fp:
    exec(fp.read(), _version)

setup(
    name='bsonstream',
    version=_version['__version__'],
    description='Forward-only streaming reader and writer for length-prefixed binary documents (BSON)',
    author='Hathor Team',
    author_email='contact@hathor.network',
    url='https://hathor.network/',
    license='Apache License 2.0',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.10',
    packages=find_packages(exclude=('bsonstream_tests', 'bsonstream_tests.*')),
    package_data={
        'bsonstream.conf': ['*.yml'],
    },
    install_requires=[
        'pydantic>=2.0,<3',
        'pyyaml>=6.0',
        'structlog>=22.3',
        'typing-extensions>=4.6',
    ],
    extras_require={
        'test': [
            'pytest>=7.2',
        ],
    },
)
