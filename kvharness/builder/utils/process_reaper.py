import logging
import os
import re

from kvharness.exceptions import CleanupError
from kvharness.utils import console, io, process


class StateFileMatcher:
    """
    Matches the names of files that a service node persists its state to. Those are named after one of the node's addresses,
    e.g. ``127.0.0.1:21001.db``.
    """

    def __init__(self, host, extension="db"):
        self.host = host
        self.extension = extension
        self._pattern = re.compile(r"^{}:\d{{1,5}}\.{}$".format(re.escape(host), re.escape(extension)))

    def matches(self, file_name):
        return self._pattern.match(file_name) is not None

    def find(self, directory):
        """
        :return: A sorted list of paths in ``directory`` (not recursive) that are state files. Empty if there are none or the
        directory does not exist.
        """
        if not os.path.isdir(directory):
            return []
        return sorted(os.path.join(directory, entry) for entry in os.listdir(directory) if self.matches(entry))


class ProcessReaper:
    """
    Removes leftovers of earlier runs: running service processes and their persisted state. Cleanup is best-effort, errors are
    logged but never raised.
    """

    def __init__(self, service_name, work_dir, state_file_matcher, grace_period=3):
        self.logger = logging.getLogger(__name__)
        self.service_name = service_name
        self.work_dir = work_dir
        self.state_file_matcher = state_file_matcher
        self.grace_period = grace_period

    def cleanup(self):
        console.info(f"Killing all running {self.service_name} processes and cleaning up old data", logger=self.logger)
        try:
            self._terminate_processes()
        except CleanupError as e:
            self.logger.exception("Could not terminate running service instances.")
            console.warn(f"{e.message} Attempting to go on anyway.")

        try:
            state_files = self._state_files()
        except CleanupError as e:
            self.logger.exception("Could not scan [%s] for state files.", self.work_dir)
            console.warn(e.message)
            return

        for state_file in state_files:
            try:
                self._delete(state_file)
            except CleanupError as e:
                self.logger.exception("Could not delete state file [%s].", state_file)
                console.warn(e.message)

    def _terminate_processes(self):
        try:
            terminated = process.terminate_service_instances(self.service_name, grace_period=self.grace_period)
        except Exception as e:
            raise CleanupError(f"Could not terminate running [{self.service_name}] processes.", e)
        if terminated:
            self.logger.info("Terminated [%d] running [%s] processes.", len(terminated), self.service_name)
        else:
            self.logger.info("No running [%s] processes found.", self.service_name)

    def _state_files(self):
        try:
            return self.state_file_matcher.find(self.work_dir)
        except OSError as e:
            raise CleanupError(f"Could not list state files in [{self.work_dir}].", e)

    def _delete(self, state_file):
        self.logger.info("Deleting state file [%s].", state_file)
        try:
            io.remove_path(state_file)
        except FileNotFoundError:
            self.logger.debug("State file [%s] has disappeared in the meantime.", state_file)
        except OSError as e:
            raise CleanupError(f"Could not delete state file [{state_file}].", e)
