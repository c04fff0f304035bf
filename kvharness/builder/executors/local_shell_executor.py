import subprocess

from kvharness.builder.executors.shell_executor import ShellExecutor
from kvharness.exceptions import ExecutorError
from kvharness.utils import process


class LocalShellExecutor(ShellExecutor):
    # pylint: disable=arguments-differ
    def execute(self, command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, env=None, cwd=None, detach=False):
        try:
            return_code = process.run_subprocess_with_logging(command, stdout=stdout, stderr=stderr, env=env, cwd=cwd, detach=detach)
        except OSError as e:
            raise ExecutorError(f"Command: \"{command}\" could not be started", e)
        if return_code:
            raise ExecutorError(f"Command: \"{command}\" returned a non-zero exit code [{return_code}]")
