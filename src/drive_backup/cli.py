"""Command-line interface for the Google Drive backup application."""

import asyncio
import signal
import sys
from pathlib import Path

import click
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from .auth.google_auth import GoogleDriveAuth
from .config.settings import SyncConfig, load_settings
from .destinations.google_drive import GoogleDriveDestination
from .errors import InitializationError
from .sync.backup_manager import BackupManager, SyncResults
from .sync.watcher import ChangeWatcher
from .utils.file_utils import FileHelper
from .utils.logging import setup_logging

console = Console()


@click.group()
@click.version_option(version="1.0.0")
@click.option('--config', '-c',
              type=click.Path(path_type=Path),
              default=Path('config/drive-backup.yaml'),
              help='Path to configuration file (defaults apply when missing)')
@click.option('--log-level',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              default='INFO',
              help='Console log level')
@click.option('--log-file',
              type=click.Path(path_type=Path),
              default=Path('logs/drive_backup.log'),
              help='Rotating log file')
@click.pass_context
def cli(ctx, config: Path, log_level: str, log_file: Path):
    """Google Drive Backup Tool

    Uploads the tracked notes and dated memory files to a shared Google Drive
    folder, on demand (sync) or continuously (watch).
    """
    ctx.ensure_object(dict)
    setup_logging(log_level=log_level, log_file=log_file)
    try:
        sync_config, creds_config = load_settings(config)
    except Exception as e:
        console.print(f"❌ Invalid configuration {config}: {e}", style="red bold")
        sys.exit(1)
    ctx.obj['config'] = sync_config
    ctx.obj['credentials'] = creds_config


def _initialized_manager(ctx) -> BackupManager:
    """Build and initialize the backup manager, exiting on failure."""
    manager = BackupManager(
        ctx.obj['config'],
        ctx.obj['credentials'],
        destination=ctx.obj.get('destination'),
    )
    try:
        with console.status("Connecting to Google Drive..."):
            manager.initialize()
    except InitializationError as e:
        console.print(f"❌ Failed to initialize Google Drive sync: {e}", style="red bold")
        console.print("\n🔧 Please run: drive-backup setup")
        sys.exit(1)
    return manager


@cli.command()
@click.pass_context
def sync(ctx):
    """Upload all tracked files to Google Drive."""
    manager = _initialized_manager(ctx)
    try:
        results = manager.sync_all()
    except Exception as e:
        console.print(f"❌ Sync failed: {e}", style="red bold")
        sys.exit(1)

    _display_sync_results(results)


def _display_sync_results(results: SyncResults):
    """Display sync results."""
    summary = results.summary()
    rprint("\n📊 [bold]Sync Results:[/bold]")
    rprint(f"   ✅ Uploaded: [green]{summary['uploaded']}[/green] files")
    rprint(f"   ⚠️  Skipped: [yellow]{summary['skipped']}[/yellow] files")
    rprint(f"   ❌ Errors: [red]{summary['errors']}[/red] files")
    rprint(f"   ⏱️  Duration: {results.duration:.1f}s")

    if results.errors:
        rprint("\n❌ [red]Errors:[/red]")
        for error in results.errors:
            rprint(f"   • {error['file']}: {error['error']}")


@cli.command()
@click.pass_context
def url(ctx):
    """Print the backup folder URL."""
    manager = _initialized_manager(ctx)
    rprint("\n🔗 [bold]Google Drive Backup Folder URL:[/bold]")
    click.echo(manager.get_folder_url())


@cli.command()
@click.pass_context
def links(ctx):
    """Print the folder URL and an edit link for every tracked file."""
    manager = _initialized_manager(ctx)
    shareable = manager.get_shareable_links()

    rprint("\n🔗 [bold]Shareable Links:[/bold]")
    rprint(f"📁 Backup Folder: {shareable['folder']}")

    table = Table(title="Files")
    table.add_column("Local Path", style="cyan")
    table.add_column("Edit URL", overflow="fold")
    for local_path, edit_url in sorted(shareable['files'].items()):
        table.add_row(local_path, edit_url)
    console.print(table)


@cli.command()
@click.pass_context
def watch(ctx):
    """Re-upload tracked files whenever they change (runs until interrupted)."""
    manager = _initialized_manager(ctx)
    rprint(f"📁 Backup folder: {manager.get_folder_url()}")
    rprint("\nWatching for changes... (Ctrl+C to stop)\n")

    try:
        asyncio.run(_run_watcher(manager))
    except KeyboardInterrupt:
        pass
    console.print("🛑 Watcher stopped")


async def _run_watcher(manager: BackupManager):
    """Run the watcher until SIGINT or SIGTERM."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows: Ctrl+C surfaces as KeyboardInterrupt instead
            pass

    await ChangeWatcher(manager).run(stop_event)


@cli.command()
@click.option('--no-browser', is_flag=True, help='Print the consent URL instead of opening a browser')
@click.option('--port', type=int, default=0, help='Local port for the OAuth redirect (0 = any free port)')
@click.pass_context
def setup(ctx, no_browser: bool, port: int):
    """Authorize access to Google Drive and store the token."""
    creds_config = ctx.obj['credentials']

    console.print("🔑 Setting up Google Drive authentication...\n")
    console.print("STEP 1: Create a Google Cloud project and enable the Drive API")
    console.print("  1. Go to https://console.cloud.google.com/")
    console.print("  2. Enable the Google Drive API")
    console.print("  3. Create an \"OAuth 2.0 Client ID\" for a \"Desktop application\"")
    console.print(f"  4. Save the downloaded JSON as: {creds_config.credentials_path}\n")

    auth = GoogleDriveAuth(creds_config)
    try:
        auth.run_setup_flow(open_browser=not no_browser, port=port)
        email = GoogleDriveDestination(auth.get_drive_service()).get_user_email()
    except Exception as e:
        console.print(f"❌ Setup failed: {e}", style="red bold")
        if not creds_config.credentials_path.exists():
            console.print(f"\n📝 Please create the credentials file: {creds_config.credentials_path}")
        sys.exit(1)

    console.print("✅ Authentication successful!", style="green")
    console.print(f"📧 Connected as: {email}")


@cli.command()
@click.pass_context
def check(ctx):
    """Check that tracked files, the memory directory and credentials are in place."""
    config: SyncConfig = ctx.obj['config']
    creds_config = ctx.obj['credentials']
    all_good = True

    table = Table(title="Setup Check")
    table.add_column("Item", style="cyan")
    table.add_column("Status")

    for file_path in config.sync_files:
        if Path(file_path).is_file():
            table.add_row(file_path, "[green]✅ found[/green]")
        else:
            table.add_row(file_path, "[red]❌ FILE NOT FOUND[/red]")
            all_good = False

    memory_dir = Path(config.memory_dir)
    try:
        daily_files = FileHelper.list_matching(memory_dir, config.memory_file_pattern)
        recent = ", ".join(daily_files[-3:]) or "none"
        table.add_row(f"{memory_dir}/", f"[green]✅ {len(daily_files)} daily files[/green] (recent: {recent})")
    except OSError:
        table.add_row(f"{memory_dir}/", "[red]❌ directory not found[/red]")
        all_good = False

    missing_creds = creds_config.missing_files()
    for cred_file in (creds_config.credentials_path, creds_config.token_path):
        if cred_file in missing_creds:
            table.add_row(str(cred_file), "[yellow]⚠️ NOT FOUND (run setup first)[/yellow]")
        else:
            table.add_row(str(cred_file), "[green]✅ found[/green]")

    console.print(table)

    if all_good:
        console.print("\n✅ All required files are ready!", style="green bold")
        if missing_creds:
            console.print("🚀 Next step: drive-backup setup")
        else:
            console.print("🚀 Next step: drive-backup sync, then drive-backup watch")
    else:
        console.print("\n❌ Some issues found. Please fix the missing files above.", style="red bold")
        sys.exit(1)


@cli.command()
@click.option('--output', '-o',
              type=click.Path(path_type=Path),
              default=Path('config/drive-backup.yaml'),
              help='Path to save configuration file')
@click.pass_context
def init(ctx, output: Path):
    """Write the current configuration to a YAML file for editing."""
    if output.exists():
        if not click.confirm(f"Configuration file {output} already exists. Overwrite?"):
            return

    ctx.obj['config'].to_yaml(output, ctx.obj['credentials'])
    console.print(f"✅ Configuration saved to {output}", style="green")


if __name__ == '__main__':
    cli()
