from __future__ import annotations

from typing import Any, Dict, Optional

import orjson
import requests
from loguru import logger

from .config import Session, Settings
from .errors import AuthError, NotFoundError, TransportError

JSON = "application/json"
OCTET_STREAM = "application/octet-stream"

_MAX_BODY = 1024


def raise_for_response(resp: requests.Response, method: str, url: str) -> None:
    """Classify a non-2xx response into the SDK error hierarchy."""
    if 200 <= resp.status_code < 300:
        return
    text = resp.text or ""
    msg = f"Error {resp.status_code} while sending {method} request to {url}"
    if text:
        msg += f": {text[:_MAX_BODY]}"
    logger.warning("request failed", method=method, url=url, status=resp.status_code)
    if resp.status_code in (401, 403):
        raise AuthError(msg, code=resp.status_code, body=text)
    if resp.status_code == 404:
        raise NotFoundError(msg, code=resp.status_code, body=text)
    raise TransportError(msg, code=resp.status_code, body=text)


def parse_body(resp: requests.Response) -> Any:
    if not resp.content:
        return None
    try:
        return orjson.loads(resp.content)
    except orjson.JSONDecodeError:
        return resp.text


class Transport:
    """
    Authenticated HTTP(S) access to the Ci API.

    Paths starting with ``http://`` or ``https://`` are used as-is, anything
    else is appended to ``settings.api_base_url``. Every request carries the
    session's bearer token. Responses are parsed as JSON when possible; a
    non-2xx status or a connection problem raises ``TransportError`` (or one
    of its subclasses). Nothing is retried.
    """

    def __init__(
        self,
        session: Session,
        settings: Settings,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.http = http if http is not None else requests.Session()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.settings.api_base_url.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        h = {"Authorization": f"Bearer {self.session.access_token}", "Accept": JSON}
        if content_type:
            h["Content-Type"] = content_type
        return h

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Any = None,
        content_type: Optional[str] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = self.url(path)
        if content_type == JSON and body is not None and not isinstance(body, (bytes, str)):
            body = orjson.dumps(body)
        # requests picks the multipart boundary itself
        headers = self._headers(None if files else content_type)
        logger.debug("request", method=method, url=url)
        try:
            resp = self.http.request(
                method,
                url,
                params=params,
                data=body,
                files=files,
                headers=headers,
                timeout=self.settings.timeout,
            )
        except requests.RequestException as ex:
            logger.error("connection failed", method=method, url=url, error=str(ex))
            raise TransportError(f"{method} {url} failed: {ex}")
        raise_for_response(resp, method, url)
        return parse_body(resp)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(
        self,
        path: str,
        body: Any = None,
        content_type: Optional[str] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return self.request("POST", path, body=body, content_type=content_type, files=files)

    def put(self, path: str, body: Any, content_type: Optional[str] = None) -> Any:
        return self.request("PUT", path, body=body, content_type=content_type)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
