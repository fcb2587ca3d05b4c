from __future__ import annotations
from collections import deque
from typing import Deque, Iterator, List

from loguru import logger

from .directory import AssetDirectory, AssetRecord

PAGE_WINDOW = 5
SELF_REFERENCE = "Workspace"


class AssetPager(Iterator[AssetRecord]):
    """Lazy walk over every item in the workspace, one window at a time.

    Pages of ``window`` items are requested from offset 0 until the service
    returns an empty page. The pager is single-use: once exhausted it stays
    exhausted.

    There is no snapshot. Items added or removed while paging shift the
    offsets, so an item at a page boundary may be skipped or seen twice.
    """

    def __init__(self, directory: AssetDirectory, window: int = PAGE_WINDOW) -> None:
        if window < 1:
            raise ValueError("window must be positive")
        self._directory = directory
        self._window = window
        self._offset = 0
        self._buffer: Deque[AssetRecord] = deque()
        self._exhausted = False
        self.pages_fetched = 0

    def __iter__(self) -> "AssetPager":
        return self

    def __next__(self) -> AssetRecord:
        if not self.has_next():
            raise StopIteration
        return self._buffer.popleft()

    def has_next(self) -> bool:
        while not self._buffer and not self._exhausted:
            self._fetch()
        return bool(self._buffer)

    def _fetch(self) -> None:
        page = self._directory.list_page(self._window, self._offset)
        self.pages_fetched += 1
        logger.debug("page fetched", offset=self._offset, window=self._window, count=len(page))
        if not page:
            self._exhausted = True
            return
        self._buffer.extend(page)
        self._offset += self._window


def list_names(directory: AssetDirectory, limit: int = 50, offset: int = 0) -> List[str]:
    """Names of one page of items, which may include folders."""
    # A self reference is present even in an empty workspace.
    return [item.get("name") for item in directory.list_page(limit, offset) if item.get("name") != SELF_REFERENCE]
