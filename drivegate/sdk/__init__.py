"""drivegate SDK - Core library behind the HTTP gateway and CLI.

Example usage:
    from drivegate.sdk import config, auth, drive
    from drivegate.sdk.stage import TemporaryStage

    cfg = config.load_config()
    client = drive.DriveClient(auth.CredentialProvider.from_config(cfg))
    files = drive.FileOperations(client)

    stage = TemporaryStage.from_config(cfg)
    with open("photo.png", "rb") as f:
        staged = stage.stage(f, "photo.png", kind="image")
    print(files.upload(staged))
"""

from . import config
from . import auth
from . import drive

__all__ = ["config", "auth", "drive"]
