import json
from unittest import TestCase
from unittest.mock import Mock

import urllib3

from kvharness import client, exceptions


class FakeStopWatch:
    def start(self):
        pass

    def stop(self):
        pass

    def total_time(self):
        return 0.25


class FakeClock:
    @staticmethod
    def stop_watch():
        return FakeStopWatch()


def http_response(status, data):
    response = Mock()
    response.status = status
    response.data = data
    return response


class RpcRequestTests(TestCase):
    def test_method_depends_on_body(self):
        self.assertEqual("GET", client.RpcRequest("127.0.0.1:21001", "/cluster/metrics").method)
        self.assertEqual("POST", client.RpcRequest("127.0.0.1:21001", "/cluster/init", {}).method)

    def test_url(self):
        self.assertEqual("http://127.0.0.1:21001/cluster/init", client.RpcRequest("127.0.0.1:21001", "/cluster/init").url)
        self.assertEqual("http://127.0.0.1:21001/read", client.RpcRequest("127.0.0.1:21001", "read").url)


class RpcClientTests(TestCase):
    def setUp(self):
        self.rpc_client = client.RpcClient(timeout=5, clock=FakeClock)
        self.rpc_client.http = Mock()

    def test_get_without_body(self):
        self.rpc_client.http.request.return_value = http_response(200, b'{"Ok": {"current_leader": 1}}')

        response = self.rpc_client.get("127.0.0.1:21001", "/cluster/metrics")

        self.assertTrue(response.status_available)
        self.assertEqual(200, response.status)
        self.assertEqual({"Ok": {"current_leader": 1}}, response.body)
        self.assertEqual(0.25, response.elapsed)
        args, kwargs = self.rpc_client.http.request.call_args
        self.assertEqual(("GET", "http://127.0.0.1:21001/cluster/metrics"), args)
        self.assertIsNone(kwargs["body"])
        self.assertIsNone(kwargs["headers"])
        self.assertFalse(kwargs["retries"])

    def test_post_with_json_body(self):
        self.rpc_client.http.request.return_value = http_response(200, b'{"Ok": null}')

        response = self.rpc_client.post("127.0.0.1:21001", "/cluster/init", {})

        self.assertTrue(response.successful)
        self.assertEqual({"Ok": None}, response.body)
        args, kwargs = self.rpc_client.http.request.call_args
        self.assertEqual(("POST", "http://127.0.0.1:21001/cluster/init"), args)
        self.assertEqual(b"{}", kwargs["body"])
        self.assertEqual({"Content-Type": "application/json"}, kwargs["headers"])

    def test_string_body_is_sent_verbatim(self):
        self.rpc_client.http.request.return_value = http_response(200, b"null")

        self.rpc_client.call(client.RpcRequest("127.0.0.1:21001", "/write", '{"Set":{"key":"foo","value":"bar"}}'))

        _, kwargs = self.rpc_client.http.request.call_args
        self.assertEqual(b'{"Set":{"key":"foo","value":"bar"}}', kwargs["body"])

    def test_non_json_body_falls_back_to_text(self):
        self.rpc_client.http.request.return_value = http_response(404, b"Not Found")

        response = self.rpc_client.get("127.0.0.1:21001", "/unknown")

        self.assertEqual("Not Found", response.body)
        self.assertFalse(response.successful)

    def test_non_json_body_is_malformed_if_json_expected(self):
        self.rpc_client.http.request.return_value = http_response(200, b"<html>")

        with self.assertRaises(exceptions.MalformedResponse):
            self.rpc_client.get("127.0.0.1:21001", "/cluster/metrics", expect_json=True)

    def test_empty_body(self):
        self.rpc_client.http.request.return_value = http_response(200, b"")

        self.assertIsNone(self.rpc_client.get("127.0.0.1:21001", "/").body)
        with self.assertRaises(exceptions.MalformedResponse):
            self.rpc_client.get("127.0.0.1:21001", "/", expect_json=True)

    def test_connection_refused(self):
        self.rpc_client.http.request.side_effect = urllib3.exceptions.NewConnectionError(None, "Connection refused")

        with self.assertRaises(exceptions.ConnectionRefused):
            self.rpc_client.post("127.0.0.1:21001", "/cluster/init", {})

    def test_timeout(self):
        self.rpc_client.http.request.side_effect = urllib3.exceptions.ReadTimeoutError(None, "/cluster/init", "Read timed out.")

        with self.assertRaises(exceptions.RpcTimeout):
            self.rpc_client.post("127.0.0.1:21001", "/cluster/init", {})

    def test_other_transport_errors(self):
        self.rpc_client.http.request.side_effect = urllib3.exceptions.ProtocolError("Connection aborted.")

        with self.assertRaises(exceptions.RpcError) as ctx:
            self.rpc_client.get("127.0.0.1:21001", "/")
        self.assertNotIsInstance(ctx.exception, (exceptions.ConnectionRefused, exceptions.RpcTimeout))

    def test_probe(self):
        self.rpc_client.http.request.return_value = http_response(404, b"")
        self.assertTrue(self.rpc_client.probe("127.0.0.1:21001"))

        self.rpc_client.http.request.side_effect = urllib3.exceptions.NewConnectionError(None, "Connection refused")
        self.assertFalse(self.rpc_client.probe("127.0.0.1:21001"))


class RenderTests(TestCase):
    def test_render(self):
        self.assertEqual("", client.render(None))
        self.assertEqual("plain text", client.render("plain text"))
        self.assertEqual(json.dumps({"a": 1, "b": [1, 2]}, indent=2, sort_keys=True), client.render({"b": [1, 2], "a": 1}))
