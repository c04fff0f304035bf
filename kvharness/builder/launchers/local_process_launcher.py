import logging
import os

from kvharness.builder.launchers.launcher import Launcher
from kvharness.builder.models.node import Node
from kvharness.exceptions import SpawnFailed
from kvharness.utils import io, process


class LocalProcessLauncher(Launcher):
    def __init__(self, binary_path, work_dir, service_env=None):
        self.logger = logging.getLogger(__name__)
        self.binary_path = binary_path
        self.work_dir = work_dir
        self.service_env = service_env or {}

    def launch(self, node_spec, background=True):
        self.logger.info("Starting node [%s] (client address [%s], peer address [%s]).",
                         node_spec.name, node_spec.client_address, node_spec.peer_address)
        io.ensure_dir(self.work_dir)
        log_path = self.log_path(node_spec)
        cmd = self._command_line(node_spec)
        env = self._prepare_env(node_spec.name)

        try:
            node_process = process.start_detached(cmd, log_path, env=env, cwd=self.work_dir, detach=background)
        except OSError as e:
            raise SpawnFailed(f"Cannot start [{self.binary_path}] for node [{node_spec.name}].", e)

        self.logger.info("Successfully started node [%s] with PID [%s]. Output goes to [%s].", node_spec.name, node_process.pid, log_path)
        return Node(spec=node_spec, pid=node_process.pid, log_path=log_path, process=node_process)

    def log_path(self, node_spec):
        return os.path.join(self.work_dir, f"n{node_spec.id}.log")

    def _command_line(self, node_spec):
        return [os.path.abspath(self.binary_path),
                "--id", str(node_spec.id),
                "--http-addr", node_spec.client_address,
                "--rpc-addr", node_spec.peer_address]

    def _prepare_env(self, node_name):
        env = dict(os.environ)
        env.update(self.service_env)
        self.logger.debug("env overrides for [%s]: %s", node_name, str(self.service_env))
        return env
