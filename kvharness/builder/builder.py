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

from kvharness import client, exceptions, paths
from kvharness.builder import source_builder
from kvharness.builder.executors.local_shell_executor import LocalShellExecutor
from kvharness.builder.initiator import ClusterInitiator
from kvharness.builder.launchers.exception_handling_launcher import ExceptionHandlingLauncher
from kvharness.builder.launchers.local_process_launcher import LocalProcessLauncher
from kvharness.builder.models.cluster import Cluster
from kvharness.builder.models.harness_phase import HarnessPhase
from kvharness.builder.models.node import NodeSpec
from kvharness.builder.readiness import FixedDelayReadinessCheck, PollingReadinessCheck
from kvharness.builder.utils.process_reaper import ProcessReaper, StateFileMatcher
from kvharness.utils import console, io, opts

READINESS_POLICIES = ["poll", "delay"]


class Harness:
    """
    Brings up a candidate cluster: build, cleanup, launch all nodes, wait for readiness and initialize the first node as a
    single-node cluster. Every step runs to completion before the next one starts.
    """

    def __init__(self, node_specs, reaper, launcher, readiness_check, initiator, binary_path, builder=None, build_commands=None):
        self.logger = logging.getLogger(__name__)
        if not node_specs:
            raise exceptions.ConfigError("At least one node is required.")
        self.node_specs = node_specs
        self.reaper = reaper
        self.launcher = launcher
        self.readiness_check = readiness_check
        self.initiator = initiator
        self.binary_path = binary_path
        self.builder = builder
        self.build_commands = build_commands
        self.cluster = Cluster()
        self.phase = HarnessPhase.IDLE
        self.failed_phase = None
        self.init_response = None

    def run(self):
        if self.phase != HarnessPhase.IDLE:
            raise exceptions.SystemSetupError(f"Harness has already been run (phase [{self.phase.name}]).")
        try:
            self._build()
            self._cleanup()
            self._launch()
            self._await_readiness()
            self._initialize()
        except exceptions.HarnessError:
            self.failed_phase = self.phase
            self._transition(HarnessPhase.FAILED)
            console.error(f"Cluster bring-up failed while {_describe(self.failed_phase)}.", logger=self.logger)
            raise
        self._transition(HarnessPhase.DONE)
        return self.cluster

    def _build(self):
        self._transition(HarnessPhase.BUILDING)
        if self.builder:
            console.info(f"Building service with [{self.build_commands}]", logger=self.logger)
            self.builder.build(self.build_commands)
        source_builder.verify_binary(self.binary_path)

    def _cleanup(self):
        self._transition(HarnessPhase.CLEANING)
        self.reaper.cleanup()

    def _launch(self):
        self._transition(HarnessPhase.LAUNCHING)
        console.info(f"Start {len(self.node_specs)} uninitialized service nodes...", logger=self.logger)
        for node_spec in self.node_specs:
            node = self.launcher.launch(node_spec, background=True)
            self.cluster.add(node)
            self.readiness_check.wait(node)
            console.info(f"Server {node_spec.id} started (PID {node.pid}, log file {node.log_path})", logger=self.logger)

    def _await_readiness(self):
        self._transition(HarnessPhase.AWAITING_READINESS)
        self.readiness_check.wait_for_cluster(self.cluster.nodes)

    def _initialize(self):
        self._transition(HarnessPhase.INITIALIZING)
        first = self.cluster.first()
        self.init_response = self.initiator.initialize_single_node_cluster(first.spec)
        console.info(f"Server {first.spec.id} is a leader now", logger=self.logger)

    def _transition(self, phase):
        self.logger.info("Harness phase [%s] -> [%s].", self.phase.name, phase.name)
        self.phase = phase


def _describe(phase):
    return {
        HarnessPhase.IDLE: "starting up",
        HarnessPhase.BUILDING: "building the service",
        HarnessPhase.CLEANING: "cleaning up",
        HarnessPhase.LAUNCHING: "launching nodes",
        HarnessPhase.AWAITING_READINESS: "waiting for nodes to become ready",
        HarnessPhase.INITIALIZING: "initializing the cluster",
    }.get(phase, phase.name.lower())


def create_node_specs(cfg):
    node_count = cfg.int_opts("cluster", "node.count")
    if node_count < 1:
        raise exceptions.ConfigError(f"The cluster needs at least one node but node.count is [{node_count}].")
    host = cfg.opts("cluster", "host")
    http_port_base = cfg.int_opts("cluster", "http.port.base")
    rpc_port_base = cfg.int_opts("cluster", "rpc.port.base")
    return [NodeSpec(id=node_id,
                     client_address=f"{host}:{http_port_base + node_id - 1}",
                     peer_address=f"{host}:{rpc_port_base + node_id - 1}")
            for node_id in range(1, node_count + 1)]


def create_rpc_client(cfg):
    return client.RpcClient(timeout=cfg.float_opts("client", "timeout"))


def create_reaper(cfg):
    work_dir = io.normalize_path(cfg.opts("cluster", "work.dir"))
    matcher = StateFileMatcher(cfg.opts("cluster", "host"), cfg.opts("cluster", "state.file.extension"))
    return ProcessReaper(cfg.opts("service", "name"), work_dir, matcher, grace_period=cfg.float_opts("reaper", "grace.period"))


def create_readiness_check(cfg, rpc_client):
    policy = cfg.opts("launcher", "readiness")
    if policy == "poll":
        return PollingReadinessCheck(rpc_client,
                                     poll_interval=cfg.float_opts("launcher", "readiness.interval"),
                                     poll_timeout=cfg.float_opts("launcher", "readiness.timeout"))
    elif policy == "delay":
        return FixedDelayReadinessCheck(settle_delay=cfg.float_opts("launcher", "settle.delay"),
                                        final_settle_delay=cfg.float_opts("launcher", "final.settle.delay"))
    else:
        raise exceptions.ConfigError(f"Unknown readiness policy [{policy}]. Possible values are: {READINESS_POLICIES}.")


def create_harness(cfg):
    rpc_client = create_rpc_client(cfg)
    work_dir = io.normalize_path(cfg.opts("cluster", "work.dir"))
    binary_path = io.normalize_path(cfg.opts("service", "binary.path"))
    service_env = opts.to_env(cfg.opts("service", "env"))

    if opts.to_bool(cfg.opts("service", "skip.build")):
        builder = None
        build_commands = None
    else:
        builder = source_builder.SourceBuilder(LocalShellExecutor(),
                                               io.normalize_path(cfg.opts("service", "source.dir")),
                                               paths.logs(),
                                               build_env=opts.to_env(cfg.opts("service", "build.env")))
        build_commands = cfg.opts("service", "build.command")

    return Harness(node_specs=create_node_specs(cfg),
                   reaper=create_reaper(cfg),
                   launcher=ExceptionHandlingLauncher(LocalProcessLauncher(binary_path, work_dir, service_env=service_env)),
                   readiness_check=create_readiness_check(cfg, rpc_client),
                   initiator=ClusterInitiator(rpc_client),
                   binary_path=binary_path,
                   builder=builder,
                   build_commands=build_commands)


def start(cfg):
    harness = create_harness(cfg)
    cluster = harness.run()
    console.println(json.dumps({
        "nodes": [{"id": n.spec.id, "pid": n.pid, "http-addr": n.spec.client_address, "rpc-addr": n.spec.peer_address,
                   "log": n.log_path} for n in cluster]
    }, indent=2), force=True)


def cleanup(cfg):
    create_reaper(cfg).cleanup()


def rpc(cfg):
    address = cfg.opts("rpc", "address")
    path = cfg.opts("rpc", "path")
    body = cfg.opts("rpc", "body", mandatory=False)
    create_rpc_client(cfg).call(client.RpcRequest(address, path, body))
