"""Upload files into a Ci workspace.

Small files go up in one multipart-form POST. Large files use the three-step
multipart protocol: initiate, PUT each chunk in order, complete. Either way the
upload log only gets a line once the asset is committed and its detail fetched.

Known limitations:

- If the transfer succeeds but the detail fetch fails, the upload is reported
  as failed although the asset exists remotely, without a log line.
- A failed multipart upload cannot be resumed. Retrying starts a new asset and
  may leave an incomplete one behind.
"""

from __future__ import annotations

import errno
import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

import orjson
from loguru import logger

from .config import CHUNK_SIZE, SIZE_THRESHOLD, Session, Settings
from .directory import AssetDirectory
from .errors import TransportError
from .transport import JSON, OCTET_STREAM, Transport
from .upload_log import LogRecord, UploadLog, serialize_detail


class UploadStrategy(str, Enum):
    SINGLE = "single"
    MULTIPART = "multipart"


class UploadState(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETING = "completing"
    DONE = "done"


@dataclass(frozen=True)
class ThresholdPolicy:
    """Where single-shot uploads stop and multipart ones start.

    With ``inclusive`` a file of exactly ``threshold`` bytes goes multipart,
    without it that file still goes up in one request.
    """

    threshold: int = SIZE_THRESHOLD
    inclusive: bool = True

    def choose(self, size: int) -> UploadStrategy:
        large = size >= self.threshold if self.inclusive else size > self.threshold
        return UploadStrategy.MULTIPART if large else UploadStrategy.SINGLE


@dataclass
class UploadTransaction:
    path: Path
    size: int
    strategy: UploadStrategy
    asset_id: Optional[str] = None
    part: int = 0
    state: UploadState = UploadState.PENDING


def _asset_id(data: Any, step: str) -> str:
    asset_id = data.get("assetId") if isinstance(data, dict) else None
    if not asset_id:
        raise TransportError(f"{step} response has no assetId")
    return str(asset_id)


class Uploader:
    def __init__(
        self,
        transport: Transport,
        directory: AssetDirectory,
        session: Session,
        *,
        io_base_url: str = "https://io.cimediacloud.com",
        policy: Optional[ThresholdPolicy] = None,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._transport = transport
        self._directory = directory
        self._session = session
        self._policy = policy or ThresholdPolicy()
        self._chunk_size = chunk_size
        self.singlepart_url = f"{io_base_url.rstrip('/')}/upload"
        self.multipart_url = f"{io_base_url.rstrip('/')}/upload/multipart"

    @classmethod
    def from_settings(
        cls, transport: Transport, directory: AssetDirectory, session: Session, settings: Settings
    ) -> "Uploader":
        return cls(
            transport,
            directory,
            session,
            io_base_url=settings.io_base_url,
            policy=ThresholdPolicy(settings.multipart_threshold, settings.multipart_threshold_inclusive),
            chunk_size=settings.chunk_size,
        )

    def upload(self, file_path: Union[str, Path], log_path: Union[str, Path]) -> str:
        """Upload ``file_path`` and append one line to ``log_path``; returns the asset id.

        Raises OSError when the file cannot be read or the log cannot be opened
        (before anything is sent), and TransportError when any request fails.
        """
        path = Path(file_path)
        if path.is_dir():
            raise IsADirectoryError(errno.EISDIR, "Is a directory", str(path))
        if not path.exists():
            raise FileNotFoundError(errno.ENOENT, "No such file", str(path))
        if not path.is_file():
            raise OSError(errno.EINVAL, "Not a regular file", str(path))
        with UploadLog.open(log_path) as upload_log, open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            txn = UploadTransaction(path, size, self._policy.choose(size))
            logger.info("upload starting", file=path.name, size=txn.size, strategy=txn.strategy.value)
            if txn.strategy is UploadStrategy.MULTIPART:
                self._multipart_upload(txn, f)
            else:
                self._singlepart_upload(txn, f)

            detail = self._directory.get_detail(txn.asset_id)
            record = LogRecord(datetime.now().astimezone(), path.name, txn.asset_id, serialize_detail(detail))
            upload_log.append(record)
        logger.info("upload committed", file=path.name, asset_id=txn.asset_id)
        return txn.asset_id

    def _singlepart_upload(self, txn: UploadTransaction, f: BinaryIO) -> None:
        form = {"metadata": orjson.dumps({"workspaceId": self._session.workspace_id}).decode("utf-8")}
        files = {"filename": (txn.path.name, f)}
        data = self._transport.post(self.singlepart_url, form, files=files)
        txn.asset_id = _asset_id(data, "upload")
        txn.state = UploadState.DONE

    def _multipart_upload(self, txn: UploadTransaction, f: BinaryIO) -> None:
        self._initiate(txn)
        while self._upload_part(txn, f):
            pass
        self._complete(txn)

    def _initiate(self, txn: UploadTransaction) -> None:
        payload = {"name": txn.path.name, "size": txn.size, "workspaceId": self._session.workspace_id}
        data = self._transport.post(self.multipart_url, payload, JSON)
        txn.asset_id = _asset_id(data, "initiate")
        txn.part = 0
        txn.state = UploadState.UPLOADING
        logger.debug("multipart initiated", asset_id=txn.asset_id, size=txn.size)

    def _upload_part(self, txn: UploadTransaction, f: BinaryIO) -> bool:
        chunk = f.read(self._chunk_size)
        if not chunk:
            txn.state = UploadState.COMPLETING
            return False
        self._transport.put(f"{self.multipart_url}/{txn.asset_id}/{txn.part + 1}", chunk, OCTET_STREAM)
        txn.part += 1
        logger.debug("part uploaded", asset_id=txn.asset_id, part=txn.part, bytes=len(chunk))
        return True

    def _complete(self, txn: UploadTransaction) -> None:
        self._transport.post(f"{self.multipart_url}/{txn.asset_id}/complete")
        txn.state = UploadState.DONE
        logger.debug("multipart completed", asset_id=txn.asset_id, parts=txn.part)
