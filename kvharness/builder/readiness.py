import logging
from abc import ABC, abstractmethod

from kvharness import time
from kvharness.exceptions import LaunchError
from kvharness.utils.periodic_waiter import PeriodicWaiter


class ReadinessCheck(ABC):
    """
    Decides when a launched node may be considered ready to serve requests.
    """

    @abstractmethod
    def wait(self, node):
        """
        Blocks until ``node`` is ready.

        ;param node: A Node object
        ;raises LaunchError: if the node will not become ready
        """
        raise NotImplementedError

    @abstractmethod
    def wait_for_cluster(self, nodes):
        """
        Blocks until all ``nodes`` are ready. Called once after the last node has been launched.
        """
        raise NotImplementedError


class FixedDelayReadinessCheck(ReadinessCheck):
    """
    Assumes nodes are ready after a fixed settle delay.
    """

    def __init__(self, settle_delay, final_settle_delay):
        self.logger = logging.getLogger(__name__)
        self.settle_delay = settle_delay
        self.final_settle_delay = final_settle_delay

    def wait(self, node):
        self.logger.info("Waiting [%s] seconds for node [%s] to settle.", self.settle_delay, node.name)
        time.sleep(self.settle_delay)

    def wait_for_cluster(self, nodes):
        self.logger.info("Waiting [%s] seconds for [%d] nodes to settle.", self.final_settle_delay, len(nodes))
        time.sleep(self.final_settle_delay)


class PollingReadinessCheck(ReadinessCheck):
    """
    Polls the client address of a node until it answers HTTP requests.
    """

    def __init__(self, rpc_client, poll_interval, poll_timeout, clock=time.Clock):
        self.logger = logging.getLogger(__name__)
        self.rpc_client = rpc_client
        self.poll_timeout = poll_timeout
        self.waiter = PeriodicWaiter(poll_interval, poll_timeout, clock=clock)

    def wait(self, node):
        try:
            self.waiter.wait(self._is_ready, node)
        except TimeoutError:
            raise LaunchError(f"Node [{node.name}] did not answer on [{node.spec.client_address}] within "
                              f"[{self.poll_timeout}] seconds. Check [{node.log_path}] for details.")
        self.logger.info("Node [%s] is ready.", node.name)

    def wait_for_cluster(self, nodes):
        for node in nodes:
            self.wait(node)

    def _is_ready(self, node):
        if node.has_exited():
            raise LaunchError(f"Node [{node.name}] exited with code [{node.exit_code}] before it became ready. "
                              f"Check [{node.log_path}] for details.")
        return self.rpc_client.probe(node.spec.client_address)
