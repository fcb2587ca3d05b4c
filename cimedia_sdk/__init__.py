"""Ci media cloud SDK

Public surface:
- CiClient: one workspace, all operations over a shared Transport
- authenticate, Credentials, Session, Settings
- Transport, AssetDirectory, AssetPager, list_names
- Uploader, ThresholdPolicy, UploadLog, LogRecord
- errors: SDKError, TransportError, AuthError, NotFoundError, ConfigurationError
"""

from .errors import SDKError, TransportError, AuthError, NotFoundError, ConfigurationError
from .config import Settings, Credentials, Session, get_settings, SIZE_THRESHOLD, CHUNK_SIZE
from .log import configure_logging
from .auth import authenticate
from .transport import Transport
from .directory import AssetDirectory
from .pager import AssetPager, list_names
from .upload_log import UploadLog, LogRecord
from .uploader import Uploader, ThresholdPolicy, UploadStrategy
from .client import CiClient

__all__ = [
    "SDKError",
    "TransportError",
    "AuthError",
    "NotFoundError",
    "ConfigurationError",
    "Settings",
    "Credentials",
    "Session",
    "get_settings",
    "SIZE_THRESHOLD",
    "CHUNK_SIZE",
    "configure_logging",
    "authenticate",
    "Transport",
    "AssetDirectory",
    "AssetPager",
    "list_names",
    "UploadLog",
    "LogRecord",
    "Uploader",
    "ThresholdPolicy",
    "UploadStrategy",
    "CiClient",
]
