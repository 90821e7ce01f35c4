"""Lookups over provider catalog listings."""

from collections.abc import Iterable
from typing import Any

from .errors import HardwareNotFoundError, ImageNotFoundError, LocationNotFoundError


def location_id_of(size: Any) -> str | None:
    """Location id a hardware profile belongs to, if the provider reports one."""
    extra = getattr(size, "extra", None) or {}
    zone = extra.get("zone") or extra.get("location")
    if zone is None:
        return None
    return getattr(zone, "name", zone)


def find_hardware(profiles: Iterable[Any], location_id: str, name: str) -> Any:
    """Return the first profile whose location id and name match exactly."""
    for profile in profiles:
        if location_id_of(profile) == location_id and profile.name == name:
            return profile
    raise HardwareNotFoundError(f"location={location_id!r} name={name!r}")


def find_image(images: Iterable[Any], prefix: str) -> Any:
    """Return the first image whose name starts with prefix, in listing order."""
    for image in images:
        if (image.name or "").startswith(prefix):
            return image
    raise ImageNotFoundError(f"name prefix {prefix!r}")


def find_location(locations: Iterable[Any], location_id: str) -> Any:
    for location in locations:
        if location_id in (str(location.id), location.name):
            return location
    raise LocationNotFoundError(f"id {location_id!r}")
