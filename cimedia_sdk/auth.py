from __future__ import annotations
from typing import Optional

import requests
from loguru import logger

from .config import Credentials, Session, Settings
from .errors import AuthError, TransportError
from .transport import parse_body, raise_for_response


def _post_token(http: requests.Session, url: str, credentials: Credentials, settings: Settings) -> requests.Response:
    form = {
        "grant_type": "password",
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret.get_secret_value(),
    }
    try:
        return http.post(
            url,
            data=form,
            auth=(credentials.username, credentials.password.get_secret_value()),
            timeout=settings.timeout,
        )
    except requests.RequestException as ex:
        raise TransportError(f"POST {url} failed: {ex}")


def authenticate(
    credentials: Credentials,
    settings: Settings,
    http: Optional[requests.Session] = None,
) -> Session:
    """Exchange account credentials for a bearer token (OAuth2 password grant).

    A session created here is closed before returning; a caller's ``http`` is left open.
    """
    url = f"{settings.api_base_url}/oauth2/token"
    if http is None:
        with requests.Session() as own:
            resp = _post_token(own, url, credentials, settings)
    else:
        resp = _post_token(http, url, credentials, settings)
    raise_for_response(resp, "POST", url)
    data = parse_body(resp)
    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise AuthError("OAuth failed: no access_token in response", code=resp.status_code)
    logger.info("authenticated", username=credentials.username, workspace_id=credentials.workspace_id)
    return Session(access_token=token, workspace_id=credentials.workspace_id)
