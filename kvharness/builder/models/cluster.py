from dataclasses import dataclass, field
from typing import List

from kvharness.builder.models.node import Node


@dataclass
class Cluster:
    """
    All nodes that have been launched during one harness run. The harness owns these handles for the duration of the run but
    does not stop the processes when it exits.
    """

    nodes: List[Node] = field(default_factory=list)

    def add(self, node):
        self.nodes.append(node)

    def first(self):
        if not self.nodes:
            raise IndexError("No node has been launched yet")
        return self.nodes[0]

    def __iter__(self):
        return iter(self.nodes)

    def __len__(self):
        return len(self.nodes)
