"""Command line entry point, meant to be run by inetd/xinetd.

Usage:
    sshtun-redir [OPTIONS] LOCAL_PORT SSH_USER_HOST [SSH_PORT]

The accepted client connection is read from stdin and written to stdout.
Each failure exits with its own status code.
"""

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from pydantic import ValidationError

from .api import parse_target, redirect
from .common.exceptions import RedirError, UsageError
from .common.logging import get_logger, setup_logging
from .config import RedirConfig

logger = get_logger(__name__)

app = typer.Typer(
    name="sshtun-redir",
    help="Relay an inetd connection through an on-demand ssh SOCKS tunnel.",
    add_completion=False,
)


@app.command()
def main(
    local_port: Annotated[
        str, typer.Argument(help="Loopback port for the ssh SOCKS proxy")
    ],
    ssh_user_host: Annotated[str, typer.Argument(help="ssh destination, user@host")],
    ssh_port: Annotated[
        str | None, typer.Argument(help="ssh server port [default: 22]")
    ] = None,
    ssh_binary: Annotated[
        str | None, typer.Option("--ssh-binary", help="ssh client binary")
    ] = None,
    run_dir: Annotated[
        Path | None,
        typer.Option("--run-dir", help="Directory for control sockets and locks"),
    ] = None,
    log_file: Annotated[
        Path | None, typer.Option("--log-file", help="Append ssh output here")
    ] = None,
    wait_timeout: Annotated[
        int | None,
        typer.Option("--wait-timeout", help="Seconds to wait for a new tunnel"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level", help="Diagnostic log level", envvar="SSHTUN_REDIR_LOG_LEVEL"
        ),
    ] = "WARNING",
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Write diagnostics as JSON")
    ] = False,
    diagnostic_log: Annotated[
        Path | None,
        typer.Option(
            "--diagnostic-log",
            help="Also write diagnostics to this file",
            envvar="SSHTUN_REDIR_DIAGNOSTIC_LOG",
        ),
    ] = None,
):
    """
    Forward the connection on stdin/stdout to 127.0.0.1:LOCAL_PORT.

    The ssh ControlMaster for SSH_USER_HOST is started first if it is not
    already running.
    """
    try:
        setup_logging(
            level=log_level,
            json_format=json_logs,
            log_file=str(diagnostic_log) if diagnostic_log else None,
        )
    except (ValueError, OSError) as e:
        setup_logging()
        _fail(UsageError(f"invalid logging options: {e}"))

    try:
        config = RedirConfig.from_env(
            ssh_binary=ssh_binary,
            run_dir=run_dir,
            log_file=log_file,
            wait_timeout=wait_timeout,
        )
    except ValidationError as e:
        _fail(UsageError(f"invalid configuration: {e}"))

    try:
        endpoint, key = parse_target(local_port, ssh_user_host, ssh_port)
        redirect(endpoint, key, config)
    except RedirError as e:
        _fail(e)


def _fail(error: RedirError) -> NoReturn:
    """Log the error and exit with its status code."""
    logger.error(str(error), exit_code=error.exit_code)
    raise typer.Exit(error.exit_code) from error


def run() -> None:
    """Console script entry point."""
    app()
