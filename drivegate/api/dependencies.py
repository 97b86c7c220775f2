"""Request dependencies: services live on app.state, built once by create_app."""

from fastapi import Request

from drivegate.sdk.drive import FileOperations, FolderOperations
from drivegate.sdk.local import LocalStore
from drivegate.sdk.stage import TemporaryStage


def get_stage(request: Request) -> TemporaryStage:
    return request.app.state.stage


def get_local_store(request: Request) -> LocalStore:
    return request.app.state.local_store


def get_file_operations(request: Request) -> FileOperations:
    return request.app.state.files


def get_folder_operations(request: Request) -> FolderOperations:
    return request.app.state.folders
