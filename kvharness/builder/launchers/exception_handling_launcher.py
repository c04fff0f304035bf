from kvharness.builder.launchers.launcher import Launcher
from kvharness.exceptions import LaunchError


class ExceptionHandlingLauncher(Launcher):
    def __init__(self, launcher):
        self.launcher = launcher

    def launch(self, node_spec, background=True):
        try:
            return self.launcher.launch(node_spec, background)
        except LaunchError:
            raise
        except Exception as e:
            raise LaunchError(f"Starting node [{node_spec.name}] failed", e)
