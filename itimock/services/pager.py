import logging
from typing import Any, Callable, List
from itimock.core.config import settings
from itimock.core.errors import StoreUnavailable
from itimock.stores.base import Page

logger = logging.getLogger(__name__)

def _item_id(item: Any) -> Any:
    return getattr(item, "id", item)

def fetch_all(list_page: Callable[[int, int], Page], page_size: int | None = None, max_pages: int | None = None,
              key: Callable[[Any], Any] = _item_id) -> List[Any]:
    """Read every item behind ``list_page(limit, offset)``.

    Stops once ``offset`` reaches the advertised total or a page comes back
    empty, so a stale total cannot spin forever. Items are de-duplicated by
    ``key``. Gives up with ``StoreUnavailable`` after ``max_pages`` pages.
    """
    page_size = page_size or settings.PAGE_SIZE
    max_pages = max_pages or settings.MAX_PAGES
    items: List[Any] = []
    seen = set()
    offset = 0
    for _ in range(max_pages):
        page = list_page(page_size, offset)
        if not page.items:
            return items
        for item in page.items:
            k = key(item)
            if k in seen: continue
            seen.add(k)
            items.append(item)
        offset += len(page.items)
        if offset >= page.total:
            return items
    logger.error("Pagination did not finish after %d pages (offset=%d)", max_pages, offset)
    raise StoreUnavailable(f"Store pagination did not finish after {max_pages} pages.")
