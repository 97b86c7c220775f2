"""drivegate - HTTP gateway for Google Drive file and folder storage.

Namespace package containing:
- drivegate.sdk: Core library (config, credentials, staging, Drive adapter, services)
- drivegate.api: FastAPI application exposing the SDK over HTTP
- drivegate.cli: Command-line interface
"""

__version__ = "0.3.1"
