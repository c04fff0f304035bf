# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
# Modifications Copyright OpenSearch Contributors. See
# GitHub history for details.
# Licensed to Elasticsearch B.V. under one or more contributor
# license agreements. See the NOTICE file distributed with
# this work for additional information regarding copyright
# ownership. Elasticsearch B.V. licenses this file to you under
# the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#	http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

import sys

PROGRAM_NAME = "kv-harness"

BANNER = r"""
   __                  __
  / /___   __    ____ / /  ___ ________  ___ ___ ___
 /  '_/ | / /   /___// _ \/ _ `/ __/ _ \/ -_|_-<(_-<
/_/\_\|___/         /_//_/\_,_/_/ /_//_/\__/___/___/
"""

MIN_PYTHON_VERSION = (3, 8)


def check_python_version():
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError("%s requires at least Python %s but you are using:\n\nPython %s" %
                           (PROGRAM_NAME, ".".join(str(v) for v in MIN_PYTHON_VERSION), str(sys.version)))
