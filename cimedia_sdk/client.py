from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests

from .auth import authenticate
from .config import Credentials, Session, Settings, get_settings, load_credentials
from .directory import AssetDirectory, AssetRecord
from .pager import AssetPager, list_names
from .transport import Transport
from .uploader import Uploader


@dataclass
class CiClient:
    """One workspace on Ci: browse, inspect, delete and upload assets.

    All operations share a single Transport. Large and small files upload
    alike through ``upload``.
    """

    session: Session
    settings: Settings = field(default_factory=get_settings)
    transport: Optional[Transport] = None

    def __post_init__(self) -> None:
        if self.transport is None:
            self.transport = Transport(self.session, self.settings)
        self.directory = AssetDirectory(
            self.transport, self.session, download_url_ttl=self.settings.download_url_ttl
        )
        self.uploader = Uploader.from_settings(self.transport, self.directory, self.session, self.settings)

    @classmethod
    def connect(
        cls,
        credentials: Optional[Credentials] = None,
        settings: Optional[Settings] = None,
        http: Optional[requests.Session] = None,
    ) -> "CiClient":
        """Authenticate and build a client; credentials default to ``settings.credentials_path``."""
        settings = settings or get_settings()
        credentials = credentials or load_credentials(settings)
        http = http if http is not None else requests.Session()
        session = authenticate(credentials, settings, http=http)
        return cls(session, settings, Transport(session, settings, http=http))

    def __enter__(self) -> "CiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.transport.close()

    @property
    def workspace_id(self) -> str:
        return self.session.workspace_id

    def upload(self, file_path: Union[str, Path], log_path: Union[str, Path]) -> str:
        return self.uploader.upload(file_path, log_path)

    def list_names(self) -> List[str]:
        return list_names(self.directory, self.settings.list_limit)

    def list(self, limit: Optional[int] = None, offset: int = 0) -> List[AssetRecord]:
        return self.directory.list_page(self.settings.list_limit if limit is None else limit, offset)

    def __iter__(self) -> AssetPager:
        return AssetPager(self.directory, self.settings.page_window)

    def delete(self, asset_id: str) -> None:
        self.directory.delete(asset_id)

    def detail(self, asset_id: str) -> AssetRecord:
        return self.directory.get_detail(asset_id)

    def multi_details(self, asset_ids: Sequence[str], fields: Sequence[str]) -> Dict[str, AssetRecord]:
        return self.directory.get_details_bulk(asset_ids, fields)

    def download_url(self, asset_id: str) -> str:
        return self.directory.download_url(asset_id)
