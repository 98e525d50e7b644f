"""Unit tests for Page and ResourceCursor."""
from unittest.mock import Mock

import pytest

from domain.pagination import Page, ResourceCursor


def build_collection(items, page_size):
    """
    Build a linked list of pages over items, loaded through a counting loader.

    Returns (first_page, loader) where loader.call_args_list records fetches.
    """
    chunks = [items[i:i + page_size] for i in range(0, len(items), page_size)] or [[]]
    links = [f"http://pim/api/rest/v1/media-files?page={n + 1}" for n in range(len(chunks))]
    pages = {}
    loader = Mock(side_effect=lambda link: pages[link])

    for n, chunk in enumerate(chunks):
        pages[links[n]] = Page(
            items=tuple(chunk),
            self_link=links[n],
            first_link=links[0],
            previous_link=links[n - 1] if n > 0 else None,
            next_link=links[n + 1] if n + 1 < len(chunks) else None,
            loader=loader,
        )

    return pages[links[0]], loader


@pytest.mark.unit
class TestPage:
    """Tests for page navigation."""

    def test_navigation_links(self):
        first, loader = build_collection([{"code": str(i)} for i in range(5)], 2)

        assert first.has_next_page()
        assert not first.has_previous_page()
        assert first.previous_page() is None

        second = first.next_page()
        assert second.items == ({"code": "2"}, {"code": "3"})
        assert second.previous_page().items == first.items
        assert second.first_page().self_link == first.self_link

    def test_last_page_has_no_next(self):
        first, loader = build_collection([{"code": "only"}], 10)

        assert not first.has_next_page()
        assert first.next_page() is None
        loader.assert_not_called()

    def test_page_without_loader_cannot_navigate(self):
        page = Page(items=(), next_link="http://pim/next")

        with pytest.raises(RuntimeError):
            page.next_page()

    def test_len(self):
        assert len(Page(items=({"code": "a"}, {"code": "b"}))) == 2


@pytest.mark.unit
class TestResourceCursor:
    """Tests for forward traversal."""

    def test_iterates_pages_in_order(self):
        items = [{"code": f"file_{i}"} for i in range(7)]
        first, loader = build_collection(items, 3)

        cursor = ResourceCursor(3, first)
        pages = list(cursor)

        assert len(pages) == 3
        assert pages[0] is first
        assert [item for page in pages for item in page.items] == items

    def test_visits_every_item_exactly_once(self):
        items = [{"code": f"file_{i}"} for i in range(10)]
        first, loader = build_collection(items, 4)

        visited = list(ResourceCursor(4, first).items())

        assert visited == items
        assert len({item["code"] for item in visited}) == 10
        # One fetch per page after the first
        assert loader.call_count == 2

    def test_each_advance_fetches_fresh_page(self):
        first, loader = build_collection([{"code": str(i)} for i in range(4)], 2)
        cursor = ResourceCursor(2, first)

        assert cursor.current_page is first
        assert cursor.has_next()

        second = cursor.advance()

        assert cursor.current_page is second
        assert not cursor.has_next()
        loader.assert_called_once_with(first.next_link)

    def test_advance_past_last_page(self):
        first, loader = build_collection([{"code": "a"}], 5)
        cursor = ResourceCursor(5, first)

        with pytest.raises(StopIteration):
            cursor.advance()

    def test_exhausted_cursor_stays_exhausted(self):
        first, loader = build_collection([{"code": str(i)} for i in range(3)], 2)
        cursor = ResourceCursor(2, first)

        assert len(list(cursor)) == 2
        assert list(cursor) == []

    def test_empty_collection(self):
        first, loader = build_collection([], 10)

        assert list(ResourceCursor(10, first).items()) == []

    def test_keeps_page_size(self):
        first, loader = build_collection([], 10)

        assert ResourceCursor(25, first).page_size == 25
