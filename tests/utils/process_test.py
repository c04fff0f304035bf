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

import os
import unittest.mock as mock
from unittest import TestCase

import psutil

from kvharness.utils import process


class ProcessTests(TestCase):
    class Process:
        def __init__(self, pid, name, cmdline, survives_sigterm=False):
            self.pid = pid
            self._name = name
            self._cmdline = cmdline
            self.survives_sigterm = survives_sigterm
            self.terminated = False
            self.killed = False

        def name(self):
            return self._name

        def cmdline(self):
            return self._cmdline

        def terminate(self):
            self.terminated = True

        def kill(self):
            self.killed = True

    def setUp(self):
        self.service_process = ProcessTests.Process(100, "raft-key-value-rocks",
                                                    ["./target/debug/raft-key-value-rocks", "--id", "1"])
        # On Linux, the process name is truncated to 15 characters.
        self.truncated_service_process = ProcessTests.Process(101, "raft-key-value-",
                                                              ["./target/debug/raft-key-value-rocks", "--id", "2"])
        self.started_by_path_process = ProcessTests.Process(102, "raft-key-value-",
                                                            ["/opt/bin/raft-key-value-rocks", "--id", "3"])
        self.memstore_process = ProcessTests.Process(103, "raft-key-value-",
                                                     ["./target/debug/raft-key-value-memstore", "--id", "1"])
        self.newer_service_process = ProcessTests.Process(106, "raft-key-value-",
                                                          ["/opt/bin/raft-key-value-rocks-v2", "--id", "1"])
        self.random_python = ProcessTests.Process(104, "python3", ["/some/django/app"])
        self.editor = ProcessTests.Process(105, "vim", ["vim", "raft-key-value-rocks.log"])
        # fake own process by determining our pid
        self.own_process = ProcessTests.Process(os.getpid(), "raft-key-value-rocks", ["raft-key-value-rocks"])

    def all_processes(self):
        return [
            self.service_process,
            self.truncated_service_process,
            self.started_by_path_process,
            self.memstore_process,
            self.newer_service_process,
            self.random_python,
            self.editor,
            self.own_process,
        ]

    @mock.patch("psutil.process_iter")
    def test_find_service_processes(self, process_iter):
        process_iter.return_value = self.all_processes()

        self.assertEqual([self.service_process, self.truncated_service_process, self.started_by_path_process],
                         process.find_all_service_processes("raft-key-value-rocks"))

    def test_truncated_name_needs_matching_command_line(self):
        self.assertTrue(process.is_service_process(self.truncated_service_process, "raft-key-value-rocks"))
        self.assertFalse(process.is_service_process(self.newer_service_process, "raft-key-value-rocks"))
        self.assertFalse(process.is_service_process(self.memstore_process, "raft-key-value-rocks"))

    @mock.patch("psutil.process_iter")
    def test_find_no_service_process_running(self, process_iter):
        process_iter.return_value = [self.random_python, self.editor]

        self.assertEqual(0, len(process.find_all_service_processes("raft-key-value-rocks")))

    @mock.patch("psutil.process_iter")
    def test_skips_processes_that_vanish_while_inspected(self, process_iter):
        vanished = mock.Mock(pid=200)
        vanished.name.side_effect = psutil.NoSuchProcess(200)
        process_iter.return_value = [vanished, self.service_process]

        self.assertEqual([self.service_process], process.find_all_service_processes("raft-key-value-rocks"))

    @mock.patch("psutil.wait_procs")
    @mock.patch("psutil.process_iter")
    def test_terminates_only_service_processes(self, process_iter, wait_procs):
        process_iter.return_value = self.all_processes()
        wait_procs.side_effect = lambda procs, timeout: (procs, [])

        terminated = process.terminate_service_instances("raft-key-value-rocks", grace_period=1)

        self.assertEqual(3, len(terminated))
        self.assertTrue(self.service_process.terminated)
        self.assertTrue(self.truncated_service_process.terminated)
        self.assertTrue(self.started_by_path_process.terminated)
        self.assertFalse(self.memstore_process.terminated)
        self.assertFalse(self.newer_service_process.terminated)
        self.assertFalse(self.random_python.terminated)
        self.assertFalse(self.editor.terminated)
        self.assertFalse(self.own_process.terminated)
        self.assertFalse(self.service_process.killed)
        wait_procs.assert_called_once_with(terminated, timeout=1)

    @mock.patch("psutil.wait_procs")
    @mock.patch("psutil.process_iter")
    def test_kills_processes_surviving_sigterm(self, process_iter, wait_procs):
        process_iter.return_value = [self.service_process, self.truncated_service_process]
        wait_procs.return_value = ([self.service_process], [self.truncated_service_process])

        process.terminate_service_instances("raft-key-value-rocks")

        self.assertFalse(self.service_process.killed)
        self.assertTrue(self.truncated_service_process.killed)

    @mock.patch("psutil.wait_procs")
    @mock.patch("psutil.process_iter")
    def test_nothing_to_terminate(self, process_iter, wait_procs):
        process_iter.return_value = [self.random_python]

        self.assertEqual([], process.terminate_service_instances("raft-key-value-rocks"))
        wait_procs.assert_not_called()
