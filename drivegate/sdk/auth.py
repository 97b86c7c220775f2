"""Credential management for the drivegate SDK.

The gateway never runs an authorization flow while serving requests. It is
handed a CredentialProvider built once at startup (from config or explicit
values) and every Drive call reuses the credentials it returns.
"""

import os
import logging
from typing import Optional, Any, Union
from urllib.parse import urlparse

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"
DEFAULT_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
DEFAULT_REDIRECT_URI = "http://localhost"


class CredentialProvider:
    """Supplies pre-authorized Google credentials to the Drive adapter.

    Either a client id / client secret / refresh token triple or the path to
    an authorized-user token file (as written by `drivegate token create`)
    must be supplied.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        token_file: Optional[str] = None,
        token_uri: str = DEFAULT_TOKEN_URI,
    ):
        if not token_file and not (client_id and client_secret and refresh_token):
            raise ConfigurationError(
                "No Drive credentials configured. Set auth.client_id, auth.client_secret "
                "and auth.refresh_token, or auth.token_file."
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.token_file = token_file
        self.token_uri = token_uri
        self._credentials = None

    @classmethod
    def from_config(cls, config: dict) -> "CredentialProvider":
        """Build a provider from the `auth` section of a loaded config."""
        auth = config.get("auth") or {}
        return cls(
            client_id=auth.get("client_id"),
            client_secret=auth.get("client_secret"),
            refresh_token=auth.get("refresh_token"),
            token_file=auth.get("token_file"),
        )

    @property
    def source(self) -> str:
        """Human-readable description of where the credentials come from."""
        if self.token_file:
            return f"Token file: {self.token_file}"
        return f"Refresh token for client {self.client_id}"

    def get_credentials(self) -> Any:
        """Return the shared credentials object, creating it on first use.

        Raises:
            ConfigurationError: If the token file is missing or unreadable
        """
        if self._credentials is None:
            self._credentials = self._load()
        return self._credentials

    def _load(self):
        from google.oauth2.credentials import Credentials

        if self.token_file:
            if not os.path.exists(self.token_file):
                raise ConfigurationError(f"Token file not found: {self.token_file}")
            try:
                creds = Credentials.from_authorized_user_file(self.token_file, [DRIVE_SCOPE])
            except ValueError as e:
                raise ConfigurationError(f"Invalid token file {self.token_file}: {e}") from e
            logger.debug(f"Loaded credentials from {self.token_file}")
            return creds

        # No access token yet; google-auth refreshes on the first request.
        return Credentials(
            None,
            refresh_token=self.refresh_token,
            client_id=self.client_id,
            client_secret=self.client_secret,
            token_uri=self.token_uri,
            scopes=[DRIVE_SCOPE],
        )


def refresh_credentials(creds) -> bool:
    """
    Force a token refresh to prove the refresh token still works.

    Args:
        creds: Google credentials object

    Returns:
        True if the refresh succeeded

    Raises:
        ConfigurationError: If there is no refresh token to use
        google.auth.exceptions.RefreshError: If Google rejects the refresh
    """
    from google.auth.transport.requests import Request

    if not getattr(creds, "refresh_token", None):
        raise ConfigurationError("Credentials have no refresh token available")
    creds.refresh(Request())
    return True


def build_client_config(
    client_id: str,
    client_secret: str,
    redirect_uri: Optional[str] = None,
) -> dict:
    """
    Build an installed-app client config from individually configured values.

    The result has the shape of a client_secrets.json downloaded from the
    Google Cloud Console, so it can be handed to create_token instead of a path.
    """
    return {
        "installed": {
            "client_id": client_id,
            "client_secret": client_secret,
            "auth_uri": DEFAULT_AUTH_URI,
            "token_uri": DEFAULT_TOKEN_URI,
            "redirect_uris": [redirect_uri or DEFAULT_REDIRECT_URI],
        }
    }


def _local_server_address(client_config: dict):
    """Host and port for the consent callback, taken from the first redirect URI (port 0 = any)."""
    parsed = urlparse(client_config["installed"]["redirect_uris"][0])
    return parsed.hostname or "localhost", parsed.port or 0


def create_token(
    client_secrets: Union[str, dict],
    output_path: str,
    scopes: Optional[list] = None,
) -> bool:
    """
    Run the one-time OAuth consent flow and save an authorized-user token.

    The resulting JSON holds the refresh token the gateway needs; point
    auth.token_file at it, or copy the refresh token into auth.refresh_token.

    Args:
        client_secrets: Path to the OAuth client_secrets.json, or a client config
            dict as returned by build_client_config
        output_path: Path where the token should be saved
        scopes: Scopes to request (defaults to full Drive access)

    Returns:
        True if successful, False otherwise
    """
    from google_auth_oauthlib.flow import InstalledAppFlow

    from_file = isinstance(client_secrets, str)
    if from_file and not os.path.exists(client_secrets):
        logger.error(f"Client credentials file not found: {client_secrets}")
        return False

    scopes = scopes or [DRIVE_SCOPE]

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    logger.info(f"Requesting OAuth token for scopes: {', '.join(scopes)}")
    if from_file:
        logger.info(f"Using client credentials: {client_secrets}")
    else:
        logger.info(f"Using configured client {client_secrets['installed']['client_id']}")

    try:
        if from_file:
            flow = InstalledAppFlow.from_client_secrets_file(client_secrets, scopes)
        else:
            flow = InstalledAppFlow.from_client_config(client_secrets, scopes)
        if from_file:
            creds = flow.run_local_server(port=0)
        else:
            host, port = _local_server_address(client_secrets)
            creds = flow.run_local_server(host=host, port=port)
        logger.info("User authorization completed via browser.")
    except Exception as e:
        logger.error(f"Failed to complete OAuth flow: {e}")
        return False

    with open(output_path, "w") as token_file:
        token_file.write(creds.to_json())
    logger.info(f"Token saved to {output_path}")
    return True
