# pylint: disable=protected-access

import os
import subprocess
import tempfile
from unittest import TestCase, mock
from unittest.mock import Mock

from kvharness.builder.launchers.local_process_launcher import LocalProcessLauncher
from kvharness.builder.models.node import NodeSpec
from kvharness.exceptions import SpawnFailed


class LocalProcessLauncherTests(TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.work_dir = self.tmp.name
        self.launcher = LocalProcessLauncher("/path/to/raft-key-value-rocks", self.work_dir,
                                             service_env={"RUST_LOG": "trace", "RUST_BACKTRACE": "full"})
        self.node_specs = [NodeSpec(id=i, client_address=f"127.0.0.1:2100{i}", peer_address=f"127.0.0.1:2200{i}")
                           for i in range(1, 4)]

    def tearDown(self):
        self.tmp.cleanup()

    @mock.patch("subprocess.Popen")
    def test_launch(self, popen):
        popen.return_value = Mock(pid=1234)

        node = self.launcher.launch(self.node_specs[0])

        self.assertEqual(1234, node.pid)
        self.assertEqual(self.node_specs[0], node.spec)
        self.assertEqual(os.path.join(self.work_dir, "n1.log"), node.log_path)
        args, kwargs = popen.call_args
        self.assertEqual(["/path/to/raft-key-value-rocks", "--id", "1", "--http-addr", "127.0.0.1:21001",
                          "--rpc-addr", "127.0.0.1:22001"], args[0])
        self.assertEqual(subprocess.STDOUT, kwargs["stderr"])
        self.assertEqual(self.work_dir, kwargs["cwd"])
        self.assertTrue(kwargs["start_new_session"])

    @mock.patch("subprocess.Popen")
    def test_one_log_file_per_node(self, popen):
        popen.side_effect = [Mock(pid=pid) for pid in [11, 12, 13]]

        nodes = [self.launcher.launch(node_spec) for node_spec in self.node_specs]

        self.assertEqual([11, 12, 13], [n.pid for n in nodes])
        self.assertEqual(["n1.log", "n2.log", "n3.log"], sorted(os.listdir(self.work_dir)))

    @mock.patch("subprocess.Popen")
    def test_foreground_launch_stays_in_session(self, popen):
        popen.return_value = Mock(pid=1234)

        self.launcher.launch(self.node_specs[0], background=False)

        _, kwargs = popen.call_args
        self.assertFalse(kwargs["start_new_session"])

    @mock.patch("subprocess.Popen")
    def test_env_is_scoped_to_child(self, popen):
        popen.return_value = Mock(pid=1234)
        before = dict(os.environ)

        self.launcher.launch(self.node_specs[0])

        _, kwargs = popen.call_args
        self.assertEqual("trace", kwargs["env"]["RUST_LOG"])
        self.assertEqual("full", kwargs["env"]["RUST_BACKTRACE"])
        self.assertEqual(os.environ.get("PATH"), kwargs["env"].get("PATH"))
        self.assertEqual(before, dict(os.environ))

    @mock.patch("subprocess.Popen")
    def test_missing_binary(self, popen):
        popen.side_effect = FileNotFoundError(2, "No such file or directory")

        with self.assertRaises(SpawnFailed):
            self.launcher.launch(self.node_specs[0])

    @mock.patch("subprocess.Popen")
    def test_binary_not_executable(self, popen):
        popen.side_effect = PermissionError(13, "Permission denied")

        with self.assertRaises(SpawnFailed):
            self.launcher.launch(self.node_specs[0])
