"""CLI entrypoint for Node Provisioner."""

from pathlib import Path
from typing import Any, Optional

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .catalog import location_id_of
from .config import Settings
from .credentials import read_private_key
from .errors import CredentialsError, SessionCloseError, SessionError
from .logging_config import configure_logging
from .provisioner import Provisioner
from .session import ProviderSession

app = typer.Typer(
    name="node-provisioner",
    help="Provision cloud VMs through Apache Libcloud",
    add_completion=False,
)
console = Console()

logger = structlog.get_logger()


def _load_settings(**overrides: Any) -> Settings:
    """Settings from the environment, with non-empty CLI options on top."""
    try:
        settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        typer.echo(f"Invalid configuration:\n{e}", err=True)
        raise typer.Exit(1)
    configure_logging(settings.log_level, settings.log_json)
    return settings


def _read_key(key_file: Path) -> str:
    try:
        return read_private_key(key_file)
    except CredentialsError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)


def _open_session(identity: str, key: str, settings: Settings) -> ProviderSession:
    try:
        return ProviderSession.open(identity, key, settings)
    except SessionError:
        logger.exception("Failed to open provider session")
        raise typer.Exit(1)


@app.command("create")
def create(
    identity: str = typer.Argument(..., help="Service account identity (email)"),
    key_file: Path = typer.Argument(..., help="Service account private key file"),
    provider: Optional[str] = typer.Option(None, help="Libcloud compute provider"),
    zone: Optional[str] = typer.Option(None, help="Location id for new nodes"),
    profile: Optional[str] = typer.Option(None, help="Hardware profile name"),
    image: Optional[str] = typer.Option(None, help="Image name prefix"),
    group: Optional[str] = typer.Option(None, help="Node group name"),
    count: Optional[int] = typer.Option(None, help="Number of nodes to create"),
    poll_interval_ms: Optional[int] = typer.Option(None, help="Provider poll interval in ms"),
    timeout: Optional[int] = typer.Option(None, help="Seconds to wait for nodes to run"),
    project: Optional[str] = typer.Option(None, help="GCE project id"),
) -> None:
    """Create a group of nodes and print their connection details."""
    settings = _load_settings(
        provider=provider,
        zone=zone,
        hardware_profile_name=profile,
        image_name_prefix=image,
        group_name=group,
        node_count=count,
        poll_interval_ms=poll_interval_ms,
        provisioning_timeout_seconds=timeout,
        project=project,
    )
    key = _read_key(key_file)

    try:
        provisioner = Provisioner.connect(identity, key, settings)
    except SessionError:
        logger.exception("Failed to open provider session")
        raise typer.Exit(1)

    try:
        provisioner.create_server(out=typer.echo)
    except Exception:
        logger.exception("Provisioning failed", state=provisioner.state.value)
    finally:
        try:
            provisioner.close()
        except SessionCloseError:
            logger.exception("Failed to release provider session")
            raise typer.Exit(1)


@app.command("hardware")
def list_hardware(
    identity: str = typer.Argument(..., help="Service account identity (email)"),
    key_file: Path = typer.Argument(..., help="Service account private key file"),
    zone: Optional[str] = typer.Option(None, help="Only show profiles in this zone"),
    provider: Optional[str] = typer.Option(None, help="Libcloud compute provider"),
) -> None:
    """List hardware profiles visible to the account."""
    settings = _load_settings(provider=provider, zone=zone)
    key = _read_key(key_file)

    with _open_session(identity, key, settings) as session:
        profiles = session.list_hardware()

    table = Table(title="Hardware Profiles")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Location")
    table.add_column("RAM (MB)", justify="right")

    for size in profiles:
        location = location_id_of(size)
        if zone and location != zone:
            continue
        table.add_row(str(size.id), size.name, location or "-", str(size.ram or "-"))

    console.print(table)


@app.command("images")
def list_images(
    identity: str = typer.Argument(..., help="Service account identity (email)"),
    key_file: Path = typer.Argument(..., help="Service account private key file"),
    prefix: Optional[str] = typer.Option(None, help="Only show images with this name prefix"),
    provider: Optional[str] = typer.Option(None, help="Libcloud compute provider"),
) -> None:
    """List images visible to the account."""
    settings = _load_settings(provider=provider)
    key = _read_key(key_file)

    with _open_session(identity, key, settings) as session:
        images = session.list_images()

    table = Table(title="Images")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")

    for entry in images:
        if prefix and not (entry.name or "").startswith(prefix):
            continue
        table.add_row(str(entry.id), entry.name)

    console.print(table)


if __name__ == "__main__":
    app()
