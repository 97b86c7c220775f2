"""Google Drive service factory."""

from googleapiclient.discovery import build

from ..auth import CredentialProvider


def get_drive_service(provider: CredentialProvider):
    """
    Build and return a Google Drive API service object.

    Args:
        provider: Supplies the pre-authorized credentials

    Returns:
        Google Drive API service object
    """
    creds = provider.get_credentials()
    return build("drive", "v3", credentials=creds, cache_discovery=False)
