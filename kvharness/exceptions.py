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


class HarnessError(Exception):
    """
    Base class for all harness exceptions
    """

    def __init__(self, message, cause=None):
        super().__init__(message, cause)
        self.message = message
        self.cause = cause

    def __repr__(self):
        return self.message

    def __str__(self):
        return self.message


class CleanupError(HarnessError):
    """
    Thrown when stale service processes or state files could not be removed. Never fatal.
    """


class LaunchError(HarnessError):
    """
    Thrown whenever there was a problem launching a service node
    """


class SpawnFailed(LaunchError):
    """
    Thrown when the service executable could not be started at all (missing binary, missing permissions)
    """


class RpcError(HarnessError):
    """
    Thrown when an HTTP request against a node did not produce a usable response
    """


class ConnectionRefused(RpcError):
    pass


class RpcTimeout(RpcError):
    pass


class MalformedResponse(RpcError):
    pass


class InitError(HarnessError):
    """
    Thrown when the cluster could not be initialized
    """


class NotReachable(InitError):
    """
    Thrown when the node chosen for cluster initialization does not answer at all
    """


class SystemSetupError(HarnessError):
    """
    Thrown when a user did something wrong, e.g. the service binary is not built or required software is not installed
    """


class ConfigError(HarnessError):
    pass


class BuildError(HarnessError):
    pass


class ExecutorError(HarnessError):
    pass
