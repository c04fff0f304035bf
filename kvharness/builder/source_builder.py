import logging
import os
import subprocess

from kvharness.exceptions import BuildError, ExecutorError
from kvharness.utils import io


class SourceBuilder:
    def __init__(self, executor, source_directory, log_directory, build_env=None):
        self.logger = logging.getLogger(__name__)
        self.executor = executor
        self.source_directory = source_directory
        self.log_directory = log_directory
        self.build_env = build_env or {}

    def build(self, build_commands):
        if isinstance(build_commands, str):
            build_commands = [build_commands]

        for build_command in build_commands:
            self._run_build_command(build_command)

    def _run_build_command(self, build_command):
        io.ensure_dir(self.log_directory)
        log_file = os.path.join(self.log_directory, "build.log")
        env = self._prepare_env()

        self.logger.info("Running build command [%s] in [%s]", build_command, self.source_directory)
        try:
            with open(log_file, "a", encoding="utf-8") as f:
                self.executor.execute(build_command, stdout=f, stderr=subprocess.STDOUT, env=env, cwd=self.source_directory)
        except ExecutorError as e:
            raise BuildError(f"Executing {build_command} failed. The build log can be found at {log_file}", e)

    def _prepare_env(self):
        env = dict(os.environ)
        for key, value in self.build_env.items():
            self._set_env(env, key, value)
        self.logger.debug("build env: %s", str(self.build_env))
        return env

    def _set_env(self, env, key, value, separator=" "):
        if value is not None:
            if key not in env or not env[key]:
                env[key] = value
            elif value not in env[key]:
                env[key] = env[key] + separator + value


def verify_binary(binary_path):
    """
    Checks that the service binary exists and can be executed.

    :raises BuildError: if the binary is missing or not executable.
    """
    if not os.path.exists(binary_path):
        raise BuildError(f"Service binary [{binary_path}] does not exist. Build the service first or specify --binary-path.")
    if not io.is_executable(binary_path):
        raise BuildError(f"Service binary [{binary_path}] is not an executable file.")
