from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, TextIO, Union

import orjson

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def serialize_detail(detail: Any) -> str:
    """Asset detail as a single line of JSON."""
    return orjson.dumps(detail, option=orjson.OPT_NON_STR_KEYS).decode("utf-8").replace("\n", " ")


@dataclass(frozen=True)
class LogRecord:
    timestamp: datetime
    filename: str
    asset_id: str
    detail: str

    def to_line(self) -> str:
        fields = [self.timestamp.strftime(TIMESTAMP_FORMAT), self.filename, self.asset_id, self.detail]
        return "\t".join(f.replace("\t", " ").replace("\n", " ") for f in fields) + "\n"

    @classmethod
    def from_line(cls, line: str) -> "LogRecord":
        parts = line.rstrip("\n").split("\t", 3)
        if len(parts) != 4:
            raise ValueError(f"malformed upload log line: {line!r}")
        ts, filename, asset_id, detail = parts
        return cls(datetime.strptime(ts, TIMESTAMP_FORMAT), filename, asset_id, detail)


class UploadLog:
    """Append-only, tab-separated record of committed uploads.

    Each record is written with a single write() of one whole line followed by
    a flush, so concurrent uploads sharing a log never interleave partial lines.
    """

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle

    @classmethod
    def open(cls, path: Union[str, Path]) -> "UploadLog":
        return cls(open(path, "a", encoding="utf-8"))

    def __enter__(self) -> "UploadLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._handle.close()

    def append(self, record: LogRecord) -> None:
        self._handle.write(record.to_line())
        self._handle.flush()

    @staticmethod
    def records(path: Union[str, Path]) -> Iterator[LogRecord]:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                if line.strip():
                    yield LogRecord.from_line(line)
