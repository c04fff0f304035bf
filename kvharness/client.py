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

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import urllib3

from kvharness import exceptions, time
from kvharness.utils import console

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class RpcRequest:
    """A single HTTP request against a node. Requests with a body are sent as POST, all others as GET."""

    address: str
    path: str
    body: Optional[Any] = None

    @property
    def method(self):
        return "GET" if self.body is None else "POST"

    @property
    def url(self):
        path = self.path if self.path.startswith("/") else "/" + self.path
        return f"http://{self.address}{path}"


@dataclass(frozen=True)
class RpcResponse:
    status_available: bool
    status: Optional[int]
    body: Any
    elapsed: float

    @property
    def successful(self):
        return self.status is not None and 200 <= self.status < 300


def render(body):
    """
    Renders a response body for humans: JSON values are pretty-printed, everything else is returned as is.
    """
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    return json.dumps(body, indent=2, sort_keys=True)


class RpcClient:
    """
    Issues single HTTP requests against the client-facing address of a node and prints a trace of every call.
    """

    def __init__(self, timeout=10, clock=time.Clock):
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self.clock = clock
        self.http = urllib3.PoolManager(retries=False)

    def get(self, address, path, expect_json=False):
        return self.call(RpcRequest(address, path), expect_json=expect_json)

    def post(self, address, path, body, expect_json=False):
        return self.call(RpcRequest(address, path, body), expect_json=expect_json)

    def call(self, request, expect_json=False):
        """
        Sends ``request`` and waits for the response.

        :param request: An ``RpcRequest``.
        :param expect_json: Whether a non-JSON response body is an error. Otherwise the raw text is returned.
        :return: An ``RpcResponse``.
        :raises ConnectionRefused: if the node does not accept connections.
        :raises RpcTimeout: if the node did not answer within the configured timeout.
        :raises MalformedResponse: if ``expect_json`` is set and the body is not valid JSON.
        """
        console.println(f"--- rpc({request.method} {request.address}{request.path}, {self._render_request_body(request.body)})")
        stop_watch = self.clock.stop_watch()
        stop_watch.start()
        raw = self._send(request)
        stop_watch.stop()
        elapsed = stop_watch.total_time()
        self.logger.info("[%s %s] returned status [%s] after [%.3f] seconds.", request.method, request.url, raw.status, elapsed)

        response = RpcResponse(status_available=True, status=raw.status, body=self._decode(request, raw.data, expect_json),
                               elapsed=elapsed)
        console.println(render(response.body))
        console.println(f"status: {response.status}, took {elapsed:.3f}s")
        console.println("")
        return response

    def probe(self, address, path="/"):
        """
        Checks quietly whether ``address`` answers HTTP requests at all. Any status code counts as alive.

        :return: ``True`` iff an HTTP response was received.
        """
        try:
            self._send(RpcRequest(address, path))
            return True
        except exceptions.RpcError as e:
            self.logger.debug("Node at [%s] is not answering yet: %s", address, e)
            return False

    def _send(self, request):
        headers = None
        body = None
        if request.body is not None:
            headers = {"Content-Type": JSON_CONTENT_TYPE}
            # strings are assumed to be serialized JSON already
            body = request.body if isinstance(request.body, str) else json.dumps(request.body)
            body = body.encode("utf-8")
        try:
            return self.http.request(request.method, request.url, body=body, headers=headers,
                                     timeout=urllib3.Timeout(total=self.timeout), retries=False)
        # NewConnectionError is a subclass of ConnectTimeoutError, check it first
        except urllib3.exceptions.NewConnectionError as e:
            raise exceptions.ConnectionRefused(f"Could not connect to [{request.address}].", e)
        except urllib3.exceptions.TimeoutError as e:
            raise exceptions.RpcTimeout(f"[{request.method} {request.url}] did not respond within [{self.timeout}] seconds.", e)
        except urllib3.exceptions.HTTPError as e:
            raise exceptions.RpcError(f"[{request.method} {request.url}] failed.", e)

    def _decode(self, request, data, expect_json):
        if not data:
            if expect_json:
                raise exceptions.MalformedResponse(f"[{request.method} {request.url}] returned an empty body.")
            return None
        text = data.decode("utf-8", errors="replace")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            if expect_json:
                raise exceptions.MalformedResponse(f"[{request.method} {request.url}] did not return valid JSON.", e)
            self.logger.debug("[%s %s] returned a non-JSON body.", request.method, request.url)
            return text

    def _render_request_body(self, body):
        if body is None:
            return ""
        return body if isinstance(body, str) else json.dumps(body)
