"""Exceptions raised by Node Provisioner."""


class ProvisionerError(Exception):
    """Base class for all provisioner errors."""


class CredentialsError(ProvisionerError):
    """The private key file could not be read."""


class SessionError(ProvisionerError):
    """The provider session could not be established."""


class SessionCloseError(SessionError):
    """Releasing the provider session failed."""


class NotFoundError(ProvisionerError):
    """A required catalog entry did not match any listed item."""

    kind = "entry"

    def __init__(self, criteria: str) -> None:
        self.criteria = criteria
        super().__init__(f"No {self.kind} matching {criteria}")


class HardwareNotFoundError(NotFoundError):
    kind = "hardware profile"


class ImageNotFoundError(NotFoundError):
    kind = "image"


class LocationNotFoundError(NotFoundError):
    kind = "location"


class ProvisioningError(ProvisionerError):
    """Node creation failed."""


class ProvisioningTimeoutError(ProvisioningError):
    """Nodes did not reach running state before the timeout elapsed."""
