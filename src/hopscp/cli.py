"""Command-line interface for hopscp.

Every option can also be given through the environment variable shown in
--help, so the command runs unchanged inside CI jobs that pass settings as
environment variables.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from hopscp import __version__
from hopscp.config_manager import ConfigManager, Direction, TransferConfig
from hopscp.exceptions import HopScpError, TransferError
from hopscp.modules.file_transfer import (
    FileCopier,
    FileTransfer,
    ScpCopier,
    TransferRequest,
    TransferResult,
)
from hopscp.modules.progress import ProgressDisplay
from hopscp.ssh.transport import TransportBuilder
from hopscp.watchdog import Watchdog

logger = logging.getLogger(__name__)
console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )
    # paramiko logs every negotiation step at DEBUG
    logging.getLogger("paramiko").setLevel(logging.INFO if verbose else logging.WARNING)


def execute_transfer(
    config: TransferConfig,
    progress: ProgressDisplay | None = None,
    builder: TransportBuilder | None = None,
    copier: FileCopier | None = None,
) -> TransferResult:
    """Run one transfer under the action deadline.

    Sessions are closed on every exit path, target before proxy.

    Raises:
        HopScpError: Any failure, including DeadlineExceededError
    """
    with Watchdog(config.action_timeout):
        builder = builder or TransportBuilder(config.dial_timeout)

        if progress:
            route = f" via {config.proxy.address}" if config.proxy is not None else ""
            progress.start_phase(f"Connecting to {config.target.address}{route}")

        with builder.connect(config.target, config.proxy) as session:
            if progress:
                verb = "Uploading" if config.direction is Direction.UPLOAD else "Downloading"
                progress.start_phase(f"{verb} {len(config.sources)} files ...")

            transfer = FileTransfer(
                copier=copier or ScpCopier(socket_timeout=config.dial_timeout),
                progress_callback=progress.file_transferred if progress else None,
            )
            return transfer.run(session, TransferRequest.from_config(config))


def _fail(error: HopScpError, progress: ProgressDisplay) -> None:
    if isinstance(error, TransferError):
        progress.complete(
            success=False,
            message=f"Transferred {error.files_transferred} files before failure",
        )
    console.print(f"[red]Error:[/red] {escape(str(error))}", soft_wrap=True)
    sys.exit(error.exit_code)


@click.command(name="hopscp")
@click.option(
    "--direction",
    envvar="DIRECTION",
    show_envvar=True,
    help="Transfer direction: upload or download",
)
@click.option(
    "--action-timeout",
    envvar="ACTION_TIMEOUT",
    show_envvar=True,
    help="Deadline for the whole run, e.g. 5m or 90s",
)
@click.option(
    "--timeout",
    "dial_timeout",
    envvar="TIMEOUT",
    show_envvar=True,
    help="Timeout for each dial and handshake, e.g. 30s",
)
@click.option("--host", envvar="HOST", show_envvar=True, help="Target host")
@click.option("--port", envvar="PORT", show_envvar=True, help="Target SSH port (default: 22)")
@click.option("--username", envvar="USERNAME", show_envvar=True, help="Target SSH user")
@click.option("--key", envvar="KEY", show_envvar=True, help="Target private key contents")
@click.option(
    "--key-file", type=click.Path(dir_okay=False), help="Read target private key from file"
)
@click.option(
    "--fingerprint",
    envvar="FINGERPRINT",
    show_envvar=True,
    help="Expected target host key fingerprint (SHA256:...)",
)
@click.option("--proxy-host", envvar="PROXY_HOST", show_envvar=True, help="Jump host")
@click.option(
    "--proxy-port", envvar="PROXY_PORT", show_envvar=True, help="Jump host SSH port (default: 22)"
)
@click.option(
    "--proxy-username", envvar="PROXY_USERNAME", show_envvar=True, help="Jump host SSH user"
)
@click.option(
    "--proxy-key", envvar="PROXY_KEY", show_envvar=True, help="Jump host private key contents"
)
@click.option(
    "--proxy-key-file",
    type=click.Path(dir_okay=False),
    help="Read jump host private key from file",
)
@click.option(
    "--proxy-fingerprint",
    envvar="PROXY_FINGERPRINT",
    show_envvar=True,
    help="Expected jump host key fingerprint (SHA256:...)",
)
@click.option(
    "--source",
    "sources",
    envvar="SOURCE",
    show_envvar=True,
    help="Newline-separated list of files to transfer",
)
@click.option(
    "--destination",
    envvar="TARGET",
    show_envvar=True,
    help="Directory the files are copied into",
)
@click.option(
    "--config",
    "config_file",
    envvar="HOPSCP_CONFIG",
    type=click.Path(dir_okay=False),
    help="TOML file with default settings",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
def main(config_file: str | None, verbose: bool, **options) -> None:
    """Copy files to or from a remote host over SSH.

    Host keys are pinned by fingerprint. The target may be reached through
    a jump host; its host key is then verified independently.

    \b
    Examples:
        hopscp --direction upload --host 10.0.0.5 --username deploy \\
            --key-file ~/.ssh/deploy --fingerprint SHA256:... \\
            --action-timeout 5m --timeout 30s \\
            --source "$(printf 'dist/a.tgz\\ndist/b.tgz')" --destination /srv/drop

        DIRECTION=download HOST=... SOURCE=/var/log/app.log TARGET=. hopscp
    """
    _configure_logging(verbose)
    progress = ProgressDisplay()

    try:
        config = ConfigManager.load(options, Path(config_file) if config_file else None)
        result = execute_transfer(config, progress)
    except HopScpError as e:
        _fail(e, progress)
        return

    progress.complete(success=True, message=f"📡 Transferred {result.files_transferred} files")


if __name__ == "__main__":
    main()
