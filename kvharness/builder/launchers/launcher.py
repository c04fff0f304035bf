from abc import ABC, abstractmethod


class Launcher(ABC):
    """
    Launchers are used to start the service processes that make up a candidate cluster.
    """

    @abstractmethod
    def launch(self, node_spec, background=True):
        """
        Starts a single service node. Returns as soon as the process has been spawned; it does not wait for the node to be ready.

        ;param node_spec: A NodeSpec object defining identity and addresses of the node
        ;param background: Whether the node should be detached from the harness' session
        ;return node: A Node object representing the spawned process
        """
        raise NotImplementedError
