"""Default cursor factory."""
from domain.pagination import Page, ResourceCursor
from ports.cursor_factory import CursorFactory


class ResourceCursorFactory(CursorFactory):
    """Creates ResourceCursor instances."""

    def create_cursor(self, page_size: int, first_page: Page) -> ResourceCursor:
        return ResourceCursor(page_size, first_page)
