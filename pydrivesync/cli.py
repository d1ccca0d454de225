"""CLI interface for pydrivesync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import DriveClient
from .cli_progress import SyncProgressDisplay
from .config import config
from .exceptions import DriveSyncError, RemoteUnavailableError
from .local_storage import LocalDirectoryStore
from .models import ChangeEvent, ChangeKind, RemoteFolder
from .output import OutputFormatter
from .sync import IncrementalOutcome, SelectionStore, SyncCallbacks, SyncEngine

logger = logging.getLogger(__name__)

CHANGE_KIND_CHOICES = ["created", "updated", "deleted", "create", "update", "delete"]


def require_client(ctx: Any, out: OutputFormatter) -> DriveClient:
    """Create a Drive client or exit when no access token is available."""
    token = ctx.obj.get("token")
    if not config.is_configured() and not token:
        out.error("Access token not configured.")
        out.info("Run 'pydrivesync init' to configure your access token")
        ctx.exit(1)
    return DriveClient(access_token=token)


def build_engine(
    client: DriveClient, callbacks: Optional[SyncCallbacks] = None
) -> SyncEngine:
    """Create a sync engine wired to the default local and selection stores."""
    return SyncEngine(
        client,
        LocalDirectoryStore(),
        SelectionStore(config.get_selection_path()),
        callbacks=callbacks,
    )


def resolve_folder(
    folders: list[RemoteFolder], identifier: str
) -> Optional[RemoteFolder]:
    """Find a folder by ID, falling back to an exact name match.

    Args:
        folders: Folders to search
        identifier: Folder ID or name

    Returns:
        Matching RemoteFolder, or None
    """
    for folder in folders:
        if folder.id == identifier:
            return folder
    for folder in folders:
        if folder.name == identifier:
            return folder
    return None


@click.group()
@click.option(
    "--token", "-t", envvar="DRIVESYNC_ACCESS_TOKEN", help="Google Drive access token"
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pydrivesync")
@click.pass_context
def main(
    ctx: Any,
    token: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyDriveSync - Mirror a Google Drive folder into a local directory."""
    ctx.ensure_object(dict)
    ctx.obj["token"] = token
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pydrivesync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--token",
    "-t",
    prompt="Enter your Google Drive access token",
    hide_input=True,
    help="Google Drive access token",
)
@click.pass_context
def init(ctx: Any, token: str) -> None:
    """Initialize pydrivesync configuration.

    Stores your access token in ~/.config/pydrivesync/config.json for
    future use.
    """
    out: OutputFormatter = ctx.obj["out"]

    out.info("Validating access token...")
    client = DriveClient(access_token=token)
    try:
        remote_folders = client.list_folders()
        out.success(
            f"Access token is valid ({len(remote_folders)} folders visible)"
        )
    except RemoteUnavailableError as e:
        out.error(f"Access token validation failed: {e}")
        if not click.confirm("Save access token anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)
    finally:
        client.close()

    try:
        config.save_access_token(token)
    except OSError as e:
        out.error(f"Failed to save configuration: {e}")
        ctx.exit(1)

    if out.json_output:
        out.print_json({"config_file": str(config.get_config_path())})
    else:
        out.success(f"Configuration saved to {config.get_config_path()}")


@main.command()
@click.pass_context
def folders(ctx: Any) -> None:
    """List Drive folders that can be mirrored."""
    out: OutputFormatter = ctx.obj["out"]
    client = require_client(ctx, out)

    try:
        remote_folders = client.list_folders()
    except RemoteUnavailableError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    finally:
        client.close()

    if not remote_folders and not out.json_output:
        out.info("No folders found")
        return

    out.print_table(
        ["id", "name"],
        [[folder.id, folder.name] for folder in remote_folders],
        title="Drive folders",
    )


@main.command()
@click.argument("folder")
@click.argument(
    "local_dir",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)
@click.pass_context
def select(ctx: Any, folder: str, local_dir: Path) -> None:
    """Select the Drive folder and local directory to keep in sync.

    FOLDER: Drive folder ID or name

    LOCAL_DIR: Existing local directory that will mirror the folder
    """
    out: OutputFormatter = ctx.obj["out"]
    client = require_client(ctx, out)
    engine = build_engine(client)

    try:
        engine.restore_selection().result()
        remote_folders = engine.list_remote_folders().result()
        match = resolve_folder(remote_folders, folder)
        if match is None:
            out.error(f"Drive folder not found: {folder}")
            ctx.exit(1)
            return
        engine.select_remote_folder(match.id, match.name).result()
        selection = engine.select_local_dir(local_dir.resolve()).result()
    except RemoteUnavailableError as e:
        out.error(str(e))
        ctx.exit(1)
        return
    finally:
        engine.shutdown()
        client.close()

    if out.json_output:
        out.print_json(selection.to_dict())
    else:
        out.success(
            f"Selected Drive folder '{selection.remote_folder_name}' "
            f"-> {selection.local_dir}"
        )


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show the current folder selection."""
    out: OutputFormatter = ctx.obj["out"]

    selection = SelectionStore(config.get_selection_path()).load_selection()
    local_store = LocalDirectoryStore()
    accessible = bool(
        selection
        and selection.local_dir is not None
        and local_store.is_accessible(selection.local_dir)
    )

    if out.json_output:
        data = selection.to_dict() if selection else {}
        data["configured"] = config.is_configured()
        data["local_folder_accessible"] = accessible
        out.print_json(data)
        return

    out.print(f"Access token: {'configured' if config.is_configured() else 'missing'}")
    if selection is None:
        out.print("No folder selection. Run 'pydrivesync select FOLDER LOCAL_DIR'")
        return
    out.print(
        f"Drive folder: {selection.remote_folder_name or '-'} "
        f"({selection.remote_folder_id or '-'})"
    )
    out.print(f"Local folder: {selection.local_dir or '-'}")
    if selection.local_dir is not None and not accessible:
        out.warning("Local folder is not accessible")


@main.command()
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable progress bars",
)
@click.pass_context
def sync(ctx: Any, no_progress: bool) -> None:
    """Mirror the selected Drive folder into the selected local directory.

    New and newer Drive files are downloaded, local files that no longer
    exist in the Drive folder are deleted.

    Examples:
        pydrivesync select Photos ~/photos
        pydrivesync sync
        pydrivesync --json sync        # Print the result counters as JSON
    """
    out: OutputFormatter = ctx.obj["out"]
    client = require_client(ctx, out)
    display = SyncProgressDisplay(
        enabled=not (no_progress or out.quiet or out.json_output)
    )
    engine = build_engine(client, callbacks=display)

    try:
        engine.restore_selection().result()
        with display:
            result = engine.request_sync().result()
    except KeyboardInterrupt:
        out.warning("Sync cancelled by user")
        engine.shutdown()
        client.close()
        ctx.exit(130)
        return
    except DriveSyncError as e:
        out.error(f"Sync failed: {e}")
        engine.shutdown()
        client.close()
        ctx.exit(1)
        return

    engine.shutdown()
    client.close()

    if result.error:
        out.error(f"Sync failed: {result.error}")
        if display.selection_required:
            out.info("Run 'pydrivesync select FOLDER LOCAL_DIR' to choose a folder")
        ctx.exit(1)
        return

    if out.json_output:
        out.print_json(result.to_dict())
    else:
        out.success(f"Sync complete. {result.summary()}")
        if result.failed:
            out.warning(f"{result.failed} file(s) could not be downloaded")


@main.command(name="apply-change")
@click.argument(
    "kind", type=click.Choice(CHANGE_KIND_CHOICES, case_sensitive=False)
)
@click.argument("name")
@click.option(
    "--modified",
    "-m",
    type=int,
    default=None,
    help="Remote modified time in epoch milliseconds (looked up if omitted)",
)
@click.pass_context
def apply_change(ctx: Any, kind: str, name: str, modified: Optional[int]) -> None:
    """Apply a single remote change notification.

    KIND: created, updated or deleted

    NAME: File name inside the selected Drive folder
    """
    out: OutputFormatter = ctx.obj["out"]
    client = require_client(ctx, out)
    engine = build_engine(client)
    event = ChangeEvent(
        kind=ChangeKind.from_string(kind),
        file_name=name,
        remote_modified_time=modified,
    )

    try:
        engine.restore_selection().result()
        outcome = engine.on_remote_change(event).result()
    finally:
        engine.shutdown()
        client.close()

    if outcome is None:
        out.error("No folder selection. Run 'pydrivesync select FOLDER LOCAL_DIR'")
        ctx.exit(1)
        return

    if out.json_output:
        out.print_json(
            {"kind": event.kind.value, "name": name, "outcome": outcome.value}
        )
    elif outcome == IncrementalOutcome.FAILED:
        out.error(f"Failed to apply {event.kind.value} for {name}")
    else:
        out.success(f"{name}: {outcome.value.replace('_', ' ')}")

    if outcome == IncrementalOutcome.FAILED:
        ctx.exit(1)


if __name__ == "__main__":
    main()
