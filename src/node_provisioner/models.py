"""Data models for Node Provisioner."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ProvisionerState(Enum):
    """Lifecycle of a single provisioning run."""

    UNINITIALIZED = "uninitialized"
    SESSION_OPEN = "session_open"
    HARDWARE_RESOLVED = "hardware_resolved"
    IMAGE_RESOLVED = "image_resolved"
    TEMPLATE_BUILT = "template_built"
    NODE_REQUESTED = "node_requested"
    NODE_READY = "node_ready"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass(frozen=True)
class Template:
    """Immutable description of the nodes to create.

    Equality only considers the three ids; the provider objects ride along so
    node creation does not need another catalog round trip.
    """

    location_id: str
    hardware_id: str
    image_id: str
    location: Any = field(default=None, compare=False, repr=False)
    hardware: Any = field(default=None, compare=False, repr=False)
    image: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LoginCredentials:
    """Login issued for created nodes."""

    identity: str
    secret: str = field(repr=False)
    public_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class NodeMetadata:
    """Read-only view of a node returned by the provider."""

    id: str
    name: str
    group: str
    state: str
    location_id: str
    hardware_id: str
    image_id: str
    credentials: LoginCredentials
    public_addresses: tuple[str, ...] = ()
    private_addresses: tuple[str, ...] = ()

    @classmethod
    def from_node(
        cls,
        node: Any,
        group: str,
        template: Template,
        credentials: LoginCredentials,
    ) -> "NodeMetadata":
        """Create NodeMetadata from a libcloud Node."""
        return cls(
            id=str(node.id),
            name=node.name,
            group=group,
            state=str(node.state),
            location_id=template.location_id,
            hardware_id=template.hardware_id,
            image_id=template.image_id,
            credentials=credentials,
            public_addresses=tuple(node.public_ips or ()),
            private_addresses=tuple(node.private_ips or ()),
        )

    def __str__(self) -> str:
        return (
            f"{{id={self.id}, name={self.name}, group={self.group}, "
            f"location={self.location_id}, hardware={self.hardware_id}, "
            f"image={self.image_id}, status={self.state}, "
            f"loginUser={self.credentials.identity}, "
            f"publicAddresses=[{', '.join(self.public_addresses)}], "
            f"privateAddresses=[{', '.join(self.private_addresses)}]}}"
        )
