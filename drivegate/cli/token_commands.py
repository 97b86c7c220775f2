"""CLI commands for the one-time credential bootstrap."""

import sys
import click

from drivegate.sdk.auth import (
    CredentialProvider,
    build_client_config,
    create_token,
    refresh_credentials,
)
from drivegate.sdk.config import get_config_dir, get_config_value, load_config
from drivegate.sdk.exceptions import ConfigurationError


@click.group()
def token():
    """Create and verify the Drive credentials the gateway runs with."""
    pass


@token.command("create")
@click.argument("client_secrets", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None,
              help="Where to write the token JSON. Defaults to <config dir>/token.json.")
def create_cmd(client_secrets, output):
    """Run the browser consent flow and save a refresh token.

    CLIENT_SECRETS: OAuth client_secrets.json downloaded from Google Cloud Console.
    When omitted, auth.client_id, auth.client_secret and auth.redirect_uri from
    the configuration are used instead.
    """
    if client_secrets is None:
        config_data = load_config()
        client_id = get_config_value("auth.client_id", config_data=config_data)
        client_secret = get_config_value("auth.client_secret", config_data=config_data)
        if not (client_id and client_secret):
            click.secho("Error: pass CLIENT_SECRETS or configure auth.client_id and auth.client_secret.",
                        fg="red", err=True)
            sys.exit(1)
        client_secrets = build_client_config(
            client_id,
            client_secret,
            get_config_value("auth.redirect_uri", config_data=config_data),
        )

    output = output or str(get_config_dir() / "token.json")
    if not create_token(client_secrets, output):
        click.secho("Token creation failed. See log output above.", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Token saved to {output}", fg="green")
    click.echo("\nTo use it:")
    click.echo(f"  drivegate config set auth.token_file {output}")


@token.command("check")
def check_cmd():
    """Obtain an access token to prove the configured refresh token works."""
    try:
        provider = CredentialProvider.from_config(load_config())
        creds = provider.get_credentials()
        refresh_credentials(creds)
    except ConfigurationError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except Exception as e:
        click.secho(f"Error getting access token: {e}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Access token obtained ({provider.source}).", fg="green")
