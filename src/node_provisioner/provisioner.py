"""Provisioning client: template resolution, node creation and reporting."""

import secrets
import time
from collections.abc import Callable
from typing import Any

import structlog
from libcloud.compute.base import NodeAuthSSHKey
from libcloud.compute.types import NodeState, Provider

from .catalog import find_hardware, find_image, find_location
from .config import Settings
from .credentials import generate_login_credentials
from .errors import ProvisioningError, ProvisioningTimeoutError
from .models import LoginCredentials, NodeMetadata, ProvisionerState, Template
from .report import format_node_report
from .session import ProviderSession

logger = structlog.get_logger()


class Provisioner:
    """Runs one provisioning attempt against an open provider session.

    Not reentrant: a Provisioner walks its state machine once and always
    ends in ``CLOSED`` after ``close``.
    """

    def __init__(self, session: ProviderSession, settings: Settings) -> None:
        self.session = session
        self.settings = settings
        self.state = ProvisionerState.SESSION_OPEN

    @classmethod
    def connect(cls, identity: str, key: str, settings: Settings) -> "Provisioner":
        """Open a provider session and wrap it."""
        return cls(ProviderSession.open(identity, key, settings), settings)

    def _transition(self, state: ProvisionerState) -> None:
        logger.debug("State transition", previous=self.state.value, current=state.value)
        self.state = state

    def get_hardware(self) -> Any:
        """Resolve the configured hardware profile in the configured zone."""
        profile = find_hardware(
            self.session.list_hardware(),
            self.settings.zone,
            self.settings.hardware_profile_name,
        )
        logger.info("Resolved hardware profile", id=profile.id, name=profile.name)
        self._transition(ProvisionerState.HARDWARE_RESOLVED)
        return profile

    def get_image(self) -> Any:
        """Resolve the first image matching the configured name prefix."""
        image = find_image(self.session.list_images(), self.settings.image_name_prefix)
        logger.info("Resolved image", id=image.id, name=image.name)
        self._transition(ProvisionerState.IMAGE_RESOLVED)
        return image

    def build_template(self) -> Template:
        hardware = self.get_hardware()
        image = self.get_image()
        location = find_location(self.session.list_locations(), self.settings.zone)
        template = Template(
            location_id=self.settings.zone,
            hardware_id=str(hardware.id),
            image_id=str(image.id),
            location=location,
            hardware=hardware,
            image=image,
        )
        self._transition(ProvisionerState.TEMPLATE_BUILT)
        return template

    def _create_kwargs(self, group: str, credentials: LoginCredentials) -> dict[str, Any]:
        if self.settings.provider == Provider.GCE:
            return {
                "ex_metadata": {"ssh-keys": f"{credentials.identity}:{credentials.public_key}"},
                "ex_tags": [group],
            }
        return {"auth": NodeAuthSSHKey(credentials.public_key)}

    def create_nodes_in_group(self, group: str, count: int, template: Template) -> list[NodeMetadata]:
        """Create count nodes named after group and wait until they run.

        Raises:
            ProvisioningError: If the provider rejects a creation request
            ProvisioningTimeoutError: If nodes are not running in time
        """
        credentials = generate_login_credentials(self.settings.login_user)
        extra = self._create_kwargs(group, credentials)
        self._transition(ProvisionerState.NODE_REQUESTED)

        created: list[Any] = []
        for _ in range(count):
            name = f"{group}-{secrets.token_hex(2)[:3]}"
            logger.info("Creating node", name=name, group=group, template=repr(template))
            try:
                node = self.session.create_node(
                    name=name,
                    size=template.hardware,
                    image=template.image,
                    location=template.location,
                    **extra,
                )
            except Exception as e:
                # Nodes created so far are left running
                raise ProvisioningError(
                    f"Failed to create node {name} in group {group} "
                    f"(already created: {[n.name for n in created]}): {e}"
                ) from e
            created.append(node)

        running = self._wait_until_running(created)
        self._transition(ProvisionerState.NODE_READY)
        return [NodeMetadata.from_node(node, group, template, credentials) for node in running]

    def _wait_until_running(self, nodes: list[Any]) -> list[Any]:
        timeout = self.settings.provisioning_timeout_seconds
        interval = self.settings.poll_interval_seconds
        ids = [node.id for node in nodes]
        deadline = time.time() + timeout

        while True:
            try:
                listed = {node.id: node for node in self.session.list_nodes() if node.id in ids}
            except Exception as e:
                raise ProvisioningError(f"Failed to poll node status: {e}") from e

            ready = [
                listed[node_id]
                for node_id in ids
                if node_id in listed
                and listed[node_id].state == NodeState.RUNNING
                and listed[node_id].public_ips
            ]
            if len(ready) == len(ids):
                logger.info("Nodes running", nodes=[node.name for node in ready])
                return ready

            if time.time() >= deadline:
                raise ProvisioningTimeoutError(
                    f"Timed out after {timeout} seconds waiting for {len(ids) - len(ready)} "
                    f"of {len(ids)} nodes to run"
                )
            logger.debug("Waiting for nodes", ready=len(ready), total=len(ids), sleep=interval)
            time.sleep(interval)

    def create_server(self, out: Callable[[str], None] = print) -> list[NodeMetadata]:
        """Build the template, create the group and report the first node."""
        try:
            template = self.build_template()
            nodes = self.create_nodes_in_group(
                self.settings.group_name, self.settings.node_count, template
            )
            for line in format_node_report(nodes[0]):
                out(line)
        except Exception:
            self._transition(ProvisionerState.FAILED)
            raise
        return nodes

    def close(self) -> None:
        try:
            self.session.close()
        finally:
            self._transition(ProvisionerState.CLOSED)
