from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests

from cimedia_sdk.config import Session, Settings
from cimedia_sdk.directory import AssetDirectory
from cimedia_sdk.errors import TransportError

WORKSPACE_ID = "0123456789abcdef0123456789abcdef"
IO = "https://io.test"


@dataclass
class Call:
    method: str
    url: str
    body: Any = None
    content_type: Optional[str] = None
    files: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


class RecordingTransport:
    """In-memory stand-in for Transport that records every call.

    ``routes`` maps (method, url) to a response value or to a callable taking
    the Call. ``fail_on`` decides which calls raise a TransportError.
    """

    def __init__(self, routes: Optional[Dict[tuple, Any]] = None) -> None:
        self.routes: Dict[tuple, Any] = dict(routes or {})
        self.calls: List[Call] = []
        self.fail_on: Optional[Callable[[Call], bool]] = None

    def _dispatch(self, call: Call) -> Any:
        self.calls.append(call)
        if self.fail_on is not None and self.fail_on(call):
            raise TransportError("simulated failure", code=500, body="boom")
        response = self.routes.get((call.method, call.url))
        if callable(response):
            return response(call)
        return response

    def get(self, path, params=None):
        return self._dispatch(Call("GET", path, params=params))

    def post(self, path, body=None, content_type=None, files=None):
        if files:
            # file handles are only open during the call
            files = {k: (v[0], v[1].read()) for k, v in files.items()}
        return self._dispatch(Call("POST", path, body, content_type, files))

    def put(self, path, body, content_type=None):
        return self._dispatch(Call("PUT", path, body, content_type))

    def delete(self, path):
        return self._dispatch(Call("DELETE", path))

    def close(self):
        pass


def make_response(status: int = 200, content: bytes = b"") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = content
    resp.encoding = "utf-8"
    return resp


@pytest.fixture
def session():
    return Session(access_token="token-123", workspace_id=WORKSPACE_ID)


@pytest.fixture
def settings():
    return Settings(
        api_base_url="https://api.test",
        io_base_url=IO,
        credentials_path=None,
    )


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def directory(transport, session):
    return AssetDirectory(transport, session)


@pytest.fixture
def make_file(tmp_path):
    """Write a file of the given size (or content) and return its path."""

    def _make(name: str, size: int = 0, content: Optional[bytes] = None):
        path = tmp_path / name
        if content is None:
            content = (bytes(range(251)) * (size // 251 + 1))[:size]
        path.write_bytes(content)
        return path

    return _make
