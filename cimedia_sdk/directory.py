from __future__ import annotations
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from .config import Session
from .errors import TransportError
from .transport import JSON, Transport

AssetRecord = Dict[str, Any]


def _non_negative(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


class AssetDirectory:
    """Stateless metadata operations: one request, one response each."""

    def __init__(
        self,
        transport: Transport,
        session: Session,
        *,
        download_url_ttl: float = 3 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._session = session
        self._download_url_ttl = download_url_ttl
        self._clock = clock
        self._download_urls: Dict[str, Tuple[str, float]] = {}

    def get_detail(self, asset_id: str) -> AssetRecord:
        return self._transport.get(f"/assets/{asset_id}")

    def get_details_bulk(self, asset_ids: Sequence[str], fields: Sequence[str]) -> Dict[str, AssetRecord]:
        payload = {"assetIds": list(asset_ids), "fields": list(fields)}
        data = self._transport.post("/assets/details/bulk", payload, JSON)
        # The service answers with a list of records (or {"items": [...]}); key them by id.
        items: Optional[List[AssetRecord]] = None
        if isinstance(data, list):
            items = data
        elif isinstance(data, dict) and isinstance(data.get("items"), list):
            items = data["items"]
        if items is None:
            raise TransportError("invalid bulk detail response: expected a list of records")
        return {item["id"]: item for item in items if "id" in item}

    def delete(self, asset_id: str) -> None:
        self._transport.delete(f"/assets/{asset_id}")
        logger.info("asset deleted", asset_id=asset_id)

    def list_page(self, limit: int, offset: int) -> List[AssetRecord]:
        params = {"limit": _non_negative("limit", limit), "offset": _non_negative("offset", offset)}
        data = self._transport.get(f"/workspaces/{self._session.workspace_id}/contents", params=params)
        if not isinstance(data, dict):
            raise TransportError("invalid listing response: expected a JSON object")
        return data.get("items") or []

    def download_url(self, asset_id: str) -> str:
        """Temporary URL the asset can be downloaded from; cached until the TTL lapses."""
        now = self._clock()
        hit = self._download_urls.get(asset_id)
        if hit and hit[1] > now:
            return hit[0]
        data = self._transport.get(f"/assets/{asset_id}/download")
        location = data.get("location") if isinstance(data, dict) else None
        if not location:
            raise TransportError(f"download response for {asset_id} has no location")
        self._download_urls[asset_id] = (location, now + self._download_url_ttl)
        return location
