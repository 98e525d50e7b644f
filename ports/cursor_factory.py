"""Interface for building cursors over paginated collections."""
from abc import ABC, abstractmethod

from domain.pagination import Page, ResourceCursor


class CursorFactory(ABC):
    """Builds a forward cursor from a page size and an already fetched first page."""

    @abstractmethod
    def create_cursor(self, page_size: int, first_page: Page) -> ResourceCursor:
        """
        Wrap the first page of a collection into a cursor.

        Args:
            page_size: Number of items requested per page.
            first_page: First page, freshly fetched.

        Returns:
            Cursor positioned on first_page.
        """
        pass
