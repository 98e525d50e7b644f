"""Page factory for HAL listings returned by the PIM REST API."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from domain.pagination import Page
from ports.adapter_error import AdapterError
from ports.page_factory import PageFactory
from ports.resource_client import ResourceClient


class HalPageFactory(PageFactory):
    """
    Builds pages from HAL listing data.

    Expected shape::

        {
            "_links": {"self": {"href": ...}, "first": {...}, "previous": {...}, "next": {...}},
            "current_page": 1,
            "items_count": 42,
            "_embedded": {"items": [...]}
        }

    Pages built here navigate by fetching their links through the resource
    client and wrapping the result with this same factory.
    """

    def __init__(self, resource_client: ResourceClient):
        self.resource_client = resource_client

    def create_page(self, data: Any) -> Page:
        if not isinstance(data, Mapping):
            raise AdapterError(
                code="INVALID_PAGE_DATA",
                message="Listing response is not a JSON object",
                details={"type": type(data).__name__},
            )

        links = data.get("_links") or {}
        embedded = data.get("_embedded") or {}

        return Page(
            items=tuple(embedded.get("items") or ()),
            count=data.get("items_count"),
            self_link=_href(links, "self"),
            first_link=_href(links, "first"),
            previous_link=_href(links, "previous"),
            next_link=_href(links, "next"),
            loader=self._load,
        )

    def _load(self, uri: str) -> Page:
        return self.create_page(self.resource_client.get_page(uri))


def _href(links: Mapping[str, Any], rel: str) -> Optional[str]:
    link = links.get(rel)
    if isinstance(link, Mapping):
        return link.get("href")
    return None
