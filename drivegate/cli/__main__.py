"""drivegate CLI - serve the gateway and manage Drive from the command line."""

import logging
import os
import sys
import json
from dotenv import load_dotenv
import click

from drivegate import __version__
from drivegate.sdk.config import get_config_value, load_config
from drivegate.sdk.exceptions import DriveGateError

from .drive_commands import drive_group as drive_module, build_services
from .config_commands import config_group as config_module
from .token_commands import token as token_module


# Configure logging at the application level
if not logging.root.handlers:
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO),
                        format='%(asctime)s - %(levelname)s - %(message)s')
# Suppress noisy INFO logs from googleapiclient and google_auth_oauthlib
logging.getLogger('googleapiclient.discovery').setLevel(logging.WARNING)
logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.WARNING)
logging.getLogger('google_auth_oauthlib.flow').setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(__version__, prog_name="drivegate")
def drivegate():
    """drivegate CLI.

    An HTTP gateway for uploading, downloading, updating, deleting and
    searching files in Google Drive.
    """
    pass


@click.command()
@click.option('--host', default=None, help='Interface to bind. Defaults to server.host.')
@click.option('--port', type=int, default=None, help='Port to listen on. Defaults to server.port.')
def serve(host, port):
    """Run the HTTP gateway."""
    import uvicorn
    from drivegate.api import create_app

    config = load_config()
    host = host or get_config_value("server.host", "127.0.0.1", config_data=config)
    port = port or get_config_value("server.port", 3000, config_data=config)

    try:
        app = create_app(config)
    except DriveGateError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        click.echo("\nTo fix:")
        click.echo("  drivegate token create <client_secrets.json>")
        sys.exit(1)

    logger.info(f"Server is running on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


@click.command()
def reconcile():
    """Make public every upload whose permission grant never completed."""
    try:
        _, files, _ = build_services()
        repaired = files.reconcile()
    except DriveGateError as e:
        logger.critical(f"Reconciliation failed: {e}")
        sys.exit(1)
    click.echo(json.dumps({"repaired": repaired}, indent=2))


drivegate.add_command(serve, name='serve')
drivegate.add_command(reconcile, name='reconcile')
drivegate.add_command(drive_module, name='drive')
drivegate.add_command(config_module, name='config')
drivegate.add_command(token_module, name='token')


def main():
    """Entry point for the CLI."""
    load_dotenv()
    drivegate()


if __name__ == "__main__":
    main()
