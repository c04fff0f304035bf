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

from kvharness.exceptions import ConfigError


def csv_to_list(csv):
    if csv is None:
        return None
    if isinstance(csv, list):
        return csv
    elif len(csv.strip()) == 0:
        return []
    else:
        return [e.strip() for e in csv.split(",")]


def to_bool(v):
    if v is None:
        return None
    elif isinstance(v, bool):
        return v
    elif v.strip().lower() in ["false", "no", "off", "f", "n", "0"]:
        return False
    elif v.strip().lower() in ["true", "yes", "on", "t", "y", "1"]:
        return True
    raise ConfigError("Could not convert value '{}' to a boolean.".format(v))


def to_env(arg):
    """
    Converts "K1:V1,K2:V2" (or an already parsed dict) into a dict that can be used as a process environment.
    Only the first colon of each pair separates key and value so values may contain colons.

    :param arg: A comma-separated list of key:value pairs, a dict or ``None``.
    :return: A dict with string keys and string values.
    """
    if isinstance(arg, dict):
        return {str(k): str(v) for k, v in arg.items()}
    if arg is None or len(arg.strip()) == 0:
        return {}
    env = {}
    for kv in csv_to_list(arg):
        if ":" not in kv:
            raise ConfigError("Expected a key:value pair but got '{}'.".format(kv))
        k, v = kv.split(":", 1)
        env[k.strip()] = v.strip()
    return env
