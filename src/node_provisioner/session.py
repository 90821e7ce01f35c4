"""Provider session wrapper around a libcloud compute driver."""

from types import TracebackType
from typing import Any

import structlog
from libcloud.compute.base import NodeDriver
from libcloud.compute.providers import get_driver
from libcloud.compute.types import Provider

from .config import Settings
from .credentials import project_from_identity
from .errors import SessionCloseError, SessionError

logger = structlog.get_logger()


class ProviderSession:
    """Authenticated handle to a provider's compute API.

    The session owns the driver's HTTP connection and releases it exactly
    once, however many times ``close`` is called.
    """

    def __init__(self, driver: NodeDriver, settings: Settings) -> None:
        self.driver = driver
        self.settings = settings
        self._closed = False
        self._apply_poll_overrides()

    @classmethod
    def open(cls, identity: str, key: str, settings: Settings) -> "ProviderSession":
        """Construct the provider driver and wrap it in a session.

        Raises:
            SessionError: If the provider is unknown or authentication fails
        """
        try:
            driver_cls = get_driver(settings.provider)
        except (AttributeError, ImportError) as e:
            raise SessionError(f"Unknown compute provider {settings.provider!r}") from e

        kwargs = cls._driver_kwargs(identity, settings)
        logger.info("Opening provider session", provider=settings.provider, identity=identity)
        try:
            driver = driver_cls(identity, key, **kwargs)
        except Exception as e:
            raise SessionError(f"Failed to authenticate to {settings.provider}: {e}") from e

        return cls(driver, settings)

    @staticmethod
    def _driver_kwargs(identity: str, settings: Settings) -> dict[str, Any]:
        if settings.provider != Provider.GCE:
            return {}
        project = settings.project or project_from_identity(identity)
        if not project:
            raise SessionError(
                f"Cannot derive a GCE project from {identity!r}, set NODE_PROVISIONER_PROJECT"
            )
        return {"project": project, "datacenter": settings.zone, "auth_type": "SA"}

    def _apply_poll_overrides(self) -> None:
        connection = getattr(self.driver, "connection", None)
        if connection is not None and hasattr(connection, "poll_interval"):
            connection.poll_interval = self.settings.poll_interval_seconds
            logger.debug("Overrode provider poll interval", seconds=connection.poll_interval)

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionError("Provider session is closed")

    def list_hardware(self) -> list[Any]:
        self._ensure_open()
        return list(self.driver.list_sizes())

    def list_images(self) -> list[Any]:
        self._ensure_open()
        return list(self.driver.list_images())

    def list_locations(self) -> list[Any]:
        self._ensure_open()
        return list(self.driver.list_locations())

    def list_nodes(self) -> list[Any]:
        self._ensure_open()
        return list(self.driver.list_nodes())

    def create_node(self, **kwargs: Any) -> Any:
        self._ensure_open()
        return self.driver.create_node(**kwargs)

    def close(self) -> None:
        """Release the driver's HTTP resources.

        Raises:
            SessionCloseError: If releasing the connection fails
        """
        if self._closed:
            return
        self._closed = True

        connection = getattr(self.driver, "connection", None)
        http = getattr(connection, "connection", None)
        http_session = getattr(http, "session", None)
        try:
            if http_session is not None:
                http_session.close()
        except Exception as e:
            raise SessionCloseError(f"Failed to release provider session: {e}") from e
        logger.info("Provider session closed", provider=self.settings.provider)

    def __enter__(self) -> "ProviderSession":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
