import logging

from kvharness.exceptions import InitError, NotReachable, RpcError
from kvharness.utils import console

CLUSTER_INIT_PATH = "/cluster/init"


class ClusterInitiator:
    def __init__(self, rpc_client):
        self.logger = logging.getLogger(__name__)
        self.rpc_client = rpc_client

    def initialize_single_node_cluster(self, node_spec):
        """
        Promotes ``node_spec`` into the sole member of a new cluster.

        :param node_spec: The NodeSpec of the node to initialize.
        :return: The RpcResponse of the node.
        :raises NotReachable: if the node did not answer.
        :raises InitError: if the node answered with a non-successful status code.
        """
        console.info(f"Initialize {node_spec.name} as a single-node cluster", logger=self.logger)
        try:
            response = self.rpc_client.post(node_spec.client_address, CLUSTER_INIT_PATH, {})
        except RpcError as e:
            raise NotReachable(f"Node [{node_spec.name}] at [{node_spec.client_address}] is not reachable.", e)

        if not response.successful:
            raise InitError(f"Node [{node_spec.name}] rejected cluster initialization with status [{response.status}].")
        if isinstance(response.body, dict) and response.body.get("Err") is not None:
            self.logger.warning("Node [%s] reported an error during cluster initialization: %s", node_spec.name, response.body["Err"])
        self.logger.info("Node [%s] initialized a single-node cluster.", node_spec.name)
        return response
