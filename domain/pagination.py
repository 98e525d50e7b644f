"""Pages and cursors over paginated resource collections."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

PageLoader = Callable[[str], "Page"]


@dataclass(frozen=True)
class Page:
    """
    One page of a collection listing.

    Holds the items and the pagination links returned by the API. Navigation
    methods never reuse data: each call fetches the linked page again through
    the loader supplied by the page factory.
    """
    items: tuple = ()
    count: Optional[int] = None
    self_link: Optional[str] = None
    first_link: Optional[str] = None
    previous_link: Optional[str] = None
    next_link: Optional[str] = None
    loader: Optional[PageLoader] = field(default=None, repr=False, compare=False)

    def has_next_page(self) -> bool:
        return self.next_link is not None

    def has_previous_page(self) -> bool:
        return self.previous_link is not None

    def next_page(self) -> Optional["Page"]:
        """Fetch the next page, or None on the last page."""
        return self._follow(self.next_link)

    def previous_page(self) -> Optional["Page"]:
        """Fetch the previous page, or None on the first page."""
        return self._follow(self.previous_link)

    def first_page(self) -> Optional["Page"]:
        """Fetch the first page of the collection."""
        return self._follow(self.first_link)

    def _follow(self, link: Optional[str]) -> Optional["Page"]:
        if link is None:
            return None
        if self.loader is None:
            raise RuntimeError("Page was built without a loader and cannot be navigated")
        logger.debug(f"Following pagination link: {link}")
        return self.loader(link)

    def __len__(self) -> int:
        return len(self.items)


class ResourceCursor:
    """
    Forward cursor over every page of a collection.

    Starts on an already fetched first page; each advance fetches the next
    page through the current page's link. Iterating yields the current page
    and then every following page once. Not safe to advance from several
    threads at the same time; build a new cursor to traverse again.
    """

    def __init__(self, page_size: int, first_page: Page):
        self.page_size = page_size
        self._current_page = first_page
        self._started = False

    @property
    def current_page(self) -> Page:
        return self._current_page

    def has_next(self) -> bool:
        """Whether the current page links to a following page."""
        return self._current_page.has_next_page()

    def advance(self) -> Page:
        """
        Fetch the next page and make it current.

        Raises:
            StopIteration: If the current page is the last one.
        """
        next_page = self._current_page.next_page()
        if next_page is None:
            raise StopIteration
        self._current_page = next_page
        return next_page

    def __iter__(self) -> Iterator[Page]:
        return self

    def __next__(self) -> Page:
        if not self._started:
            self._started = True
            return self._current_page
        return self.advance()

    def items(self) -> Iterator[dict]:
        """Yield every item of every remaining page, in page order."""
        for page in self:
            yield from page.items
