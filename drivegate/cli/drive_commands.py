"""Drive commands for the drivegate CLI."""

import json
import click

from drivegate.sdk.auth import CredentialProvider
from drivegate.sdk.config import load_config
from drivegate.sdk.drive import DriveClient, FileOperations, FolderOperations
from drivegate.sdk.exceptions import DriveGateError
from drivegate.sdk.retry import RetryPolicy
from drivegate.sdk.stage import TemporaryStage


def build_services():
    """Build (stage, file operations, folder operations) from the current config."""
    config = load_config()
    client = DriveClient(
        CredentialProvider.from_config(config),
        retry_policy=RetryPolicy.from_config(config),
    )
    return TemporaryStage.from_config(config), FileOperations(client), FolderOperations(client)


def _fail(e: Exception):
    click.echo(f"Error: {e}", err=True)
    raise SystemExit(1)


@click.group()
def drive_group():
    """Google Drive operations."""
    pass


@drive_group.command('upload')
@click.argument('local_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--folder-id', default=None, help='Destination folder ID.')
def upload_file(local_path, folder_id):
    """Upload a file to Drive and make it public.

    The file is copied into the stage first; LOCAL_PATH itself is left alone.
    """
    try:
        stage, files, _ = build_services()
        with open(local_path, 'rb') as f:
            staged = stage.stage(f, local_path)
        result = files.upload(staged, parent_folder_id=folder_id)
        click.echo(json.dumps(result, indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('download')
@click.argument('file_id')
@click.argument('save_path', type=click.Path(dir_okay=False, writable=True))
def download_file(file_id, save_path):
    """Download a file from Google Drive.

    FILE_ID: The Drive file ID to download
    SAVE_PATH: Local path where the file should be saved
    """
    try:
        _, files, _ = build_services()
        with open(save_path, 'wb') as sink:
            size = files.download(file_id, sink)
        click.echo(json.dumps({"file_path": save_path, "size": size}, indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('metadata')
@click.argument('file_id')
def file_metadata(file_id):
    """Show a file's metadata and public download link."""
    try:
        _, files, _ = build_services()
        click.echo(json.dumps(files.get_metadata(file_id), indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('list')
@click.option('--mime-type', default=None, help='Only list files of this MIME type.')
def list_files(mime_type):
    """List files (folders excluded unless --mime-type selects them)."""
    try:
        _, files, _ = build_services()
        click.echo(json.dumps(files.list_all(mime_type), indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('search')
@click.argument('term')
def search_files(term):
    """Find files whose name contains TERM."""
    try:
        _, files, _ = build_services()
        click.echo(json.dumps(files.search(term), indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('mkdir')
@click.argument('name')
@click.option('--parent-id', default=None, help='Parent folder ID.')
def create_folder(name, parent_id):
    """Create a new folder in Drive."""
    try:
        _, _, folders = build_services()
        click.echo(json.dumps(folders.create(name, parent_id=parent_id), indent=2))
    except DriveGateError as e:
        _fail(e)


@drive_group.command('folders')
def list_folders():
    """List all folders."""
    try:
        _, _, folders = build_services()
        click.echo(json.dumps(folders.list(), indent=2))
    except DriveGateError as e:
        _fail(e)
