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

import configparser
import logging
import os
from enum import Enum

from kvharness import PROGRAM_NAME, exceptions, paths
from kvharness.utils import io


class Scope(Enum):
    # Built-in defaults
    defaults = 0
    # Values read from the harness configuration file
    application = 1
    # Overrides from the command line
    applicationOverride = 2


DEFAULTS = {
    "service": {
        "name": "raft-key-value-rocks",
        "binary.path": "./target/debug/raft-key-value-rocks",
        "source.dir": ".",
        "build.command": "cargo build",
        "build.env": "RUSTFLAGS:--cfg tokio_unstable",
        "skip.build": False,
        "env": "RUST_LOG:trace,RUST_BACKTRACE:full",
    },
    "cluster": {
        "node.count": 3,
        "host": "127.0.0.1",
        "http.port.base": 21001,
        "rpc.port.base": 22001,
        "work.dir": ".",
        "state.file.extension": "db",
    },
    "launcher": {
        "readiness": "poll",
        "settle.delay": 1,
        "final.settle.delay": 3,
        "readiness.timeout": 30,
        "readiness.interval": 0.5,
    },
    "reaper": {
        "grace.period": 3,
    },
    "client": {
        "timeout": 10,
    },
}


def default_config_file():
    return os.path.join(paths.harness_home(), f"{PROGRAM_NAME}.ini")


class Config:
    """
    Holds all configuration options of the harness. Every option is identified by a section and a key and may be defined in
    several scopes. Lookups return the value from the most specific scope, i.e. command line overrides take precedence over
    the configuration file which in turn takes precedence over the built-in defaults.
    """

    def __init__(self, config_file=None):
        self.logger = logging.getLogger(__name__)
        self.config_file = io.normalize_path(config_file) if config_file else default_config_file()
        self._opts = {}
        for section, options in DEFAULTS.items():
            for key, value in options.items():
                self.add(Scope.defaults, section, key, value)

    def config_present(self):
        return os.path.isfile(self.config_file)

    def load_config(self):
        self.logger.info("Loading configuration from [%s].", self.config_file)
        parser = configparser.ConfigParser(interpolation=None)
        try:
            with open(self.config_file, encoding="UTF-8") as f:
                parser.read_file(f)
        except configparser.Error as e:
            raise exceptions.ConfigError(f"Cannot parse configuration file [{self.config_file}].", e)
        for section in parser.sections():
            for key, value in parser[section].items():
                self.add(Scope.application, section, key, value)

    def add(self, scope, section, key, value):
        self._opts[self._k(scope, section, key)] = value

    def add_if_set(self, scope, section, key, value):
        """
        Like ``add`` but ignores ``None`` values so unset command line flags do not shadow lower scopes.
        """
        if value is not None:
            self.add(scope, section, key, value)

    def opts(self, section, key, default_value=None, mandatory=True):
        """
        Resolves a configuration property.

        :param section: The configuration section.
        :param key: The configuration key.
        :param default_value: The default value to use for optional properties as a fallback. Default: None
        :param mandatory: Whether a value is expected to exist for the given section and key. Note that the default_value is
        ignored for mandatory properties. It must be ok to ignore the default_value if mandatory=True. Default: True.
        :return: The configuration property.
        """
        for scope in reversed(list(Scope)):
            k = self._k(scope, section, key)
            if k in self._opts:
                return self._opts[k]
        if mandatory:
            raise exceptions.ConfigError(f"No value for mandatory configuration: section='{section}', key='{key}'")
        return default_value

    def int_opts(self, section, key):
        value = self.opts(section, key)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise exceptions.ConfigError(f"Configuration {section}.{key} must be an integer but was [{value}].")

    def float_opts(self, section, key):
        value = self.opts(section, key)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise exceptions.ConfigError(f"Configuration {section}.{key} must be a number but was [{value}].")

    def _k(self, scope, section, key):
        return scope, section, key
