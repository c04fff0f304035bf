import subprocess
from dataclasses import dataclass

from kvharness.exceptions import ConfigError


def split_address(address):
    """
    Splits a ``host:port`` address.

    :return: A tuple of host (str) and port (int).
    :raises ConfigError: if ``address`` is not a valid ``host:port`` pair.
    """
    host, sep, port = str(address).rpartition(":")
    if not sep or not host:
        raise ConfigError(f"Address [{address}] is not of the form host:port.")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"Address [{address}] does not contain a numeric port.")
    if not 0 < port_number < 65536:
        raise ConfigError(f"Port of address [{address}] must be in the range 1-65535.")
    return host, port_number


@dataclass(frozen=True)
class NodeSpec:
    """Identity and addresses of one cluster member"""

    id: int
    client_address: str
    peer_address: str

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id < 1:
            raise ConfigError(f"Node id must be an integer >= 1 but was [{self.id}].")
        split_address(self.client_address)
        split_address(self.peer_address)

    @property
    def name(self):
        return f"node-{self.id}"


@dataclass
class Node:
    """A running (or crashed) service process that has been started by the harness"""

    spec: NodeSpec
    pid: int
    log_path: str
    process: subprocess.Popen = None

    @property
    def name(self):
        return self.spec.name

    @property
    def exit_code(self):
        if self.process is None:
            return None
        return self.process.poll()

    def has_exited(self):
        return self.exit_code is not None
