"""Plain-text reporting of created nodes."""

from .errors import ProvisioningError
from .models import NodeMetadata


def first_public_address(node: NodeMetadata) -> str:
    if not node.public_addresses:
        raise ProvisioningError(f"Node {node.name} has no public address")
    return node.public_addresses[0]


def format_node_report(node: NodeMetadata) -> list[str]:
    """Lines describing a node and how to log in to it."""
    return [
        f"  {node}",
        f"  Instance {node.name} started with IP {first_public_address(node)}",
        f"  Username {node.credentials.identity}",
        f"  Key {node.credentials.secret}",
    ]
