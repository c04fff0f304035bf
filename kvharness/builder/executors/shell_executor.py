from abc import ABC, abstractmethod


class ShellExecutor(ABC):
    """
    Executors are used to run shell commands on behalf of the harness, e.g. to build the service under test.
    """

    @abstractmethod
    def execute(self, command, **kwargs):
        """
        Executes a shell command

        ;param command: A shell command as a string
        ;return None
        """
        raise NotImplementedError
